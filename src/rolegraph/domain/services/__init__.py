"""Domain services for RoleGraph.

Services contain business logic that doesn't naturally fit within a single entity.
Persistence is reached only through the RoleStore interface.
"""

from rolegraph.domain.services.audit_recorder import (
    AuditRecorder,
    AuditSink,
    LoggingAuditSink,
    audited,
)
from rolegraph.domain.services.authorization_gate import (
    AuthorizationGate,
    Capability,
    CapabilitySet,
    ClientAuthorizationGate,
    RealmAuthorizationGate,
    client_scope,
    gate_for,
    realm_scope,
)
from rolegraph.domain.services.composite_graph import CompositeGraphEngine
from rolegraph.domain.services.lock_registry import LockRegistry, default_lock_registry
from rolegraph.domain.services.role_container_service import RoleContainerService
from rolegraph.domain.services.role_store import RoleStore

__all__ = [
    "AuditRecorder",
    "AuditSink",
    "AuthorizationGate",
    "Capability",
    "CapabilitySet",
    "ClientAuthorizationGate",
    "CompositeGraphEngine",
    "LockRegistry",
    "LoggingAuditSink",
    "RealmAuthorizationGate",
    "RoleContainerService",
    "RoleStore",
    "audited",
    "client_scope",
    "default_lock_registry",
    "gate_for",
    "realm_scope",
]
