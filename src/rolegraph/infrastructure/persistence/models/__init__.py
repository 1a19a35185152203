"""SQLAlchemy models for RoleGraph tables.

All models inherit from the Base class defined in database.py and are
created on application startup outside production.
"""

from rolegraph.infrastructure.persistence.models.client import ClientModel
from rolegraph.infrastructure.persistence.models.composite_role import CompositeRoleModel
from rolegraph.infrastructure.persistence.models.realm import RealmModel
from rolegraph.infrastructure.persistence.models.role import RoleModel

__all__ = [
    "ClientModel",
    "CompositeRoleModel",
    "RealmModel",
    "RoleModel",
]
