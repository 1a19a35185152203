"""API Schemas for request/response validation."""

from rolegraph.infrastructure.api.schemas.role_schemas import (
    CreateRoleRequest,
    RoleReference,
    RoleResponse,
    UpdateRoleRequest,
    to_role_list,
)

__all__ = [
    "CreateRoleRequest",
    "RoleReference",
    "RoleResponse",
    "UpdateRoleRequest",
    "to_role_list",
]
