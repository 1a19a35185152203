"""Persistence repositories for database operations."""

from rolegraph.infrastructure.persistence.repositories.container_repository import (
    ContainerRepository,
)
from rolegraph.infrastructure.persistence.repositories.role_repository import (
    RoleRepository,
)

__all__ = [
    "ContainerRepository",
    "RoleRepository",
]
