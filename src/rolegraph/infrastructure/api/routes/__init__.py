"""API Routes for RoleGraph."""

from rolegraph.infrastructure.api.routes.roles_router import (
    build_roles_router,
    client_roles_router,
    realm_roles_router,
)

__all__ = [
    "build_roles_router",
    "client_roles_router",
    "realm_roles_router",
]
