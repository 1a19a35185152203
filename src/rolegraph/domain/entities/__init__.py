"""Domain entities for RoleGraph.

Entities are pure Python dataclasses that represent core business concepts.
They have no dependencies on infrastructure or external frameworks.
"""

from rolegraph.domain.entities.admin_event import AdminEvent, OperationType, Outcome
from rolegraph.domain.entities.role import Role
from rolegraph.domain.entities.role_container import ContainerType, RoleContainer

__all__ = [
    "AdminEvent",
    "ContainerType",
    "OperationType",
    "Outcome",
    "Role",
    "RoleContainer",
]
