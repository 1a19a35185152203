"""Authorization gate for role container operations.

The gate checks the caller's pre-resolved capability set against the
container being acted upon. It never resolves identity or tokens itself;
the authentication layer hands it a CapabilitySet.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from rolegraph.core.exceptions import ForbiddenError
from rolegraph.core.logging import get_logger
from rolegraph.domain.entities.role_container import ContainerType, RoleContainer

logger = get_logger(__name__)


class Capability(str, Enum):
    """Capabilities checked by the gate. MANAGE implies VIEW."""

    VIEW = "view"
    MANAGE = "manage"


def realm_scope(realm_id: str) -> str:
    return f"realm:{realm_id}"


def client_scope(client_uuid: str) -> str:
    return f"client:{client_uuid}"


@dataclass(frozen=True)
class CapabilitySet:
    """Capabilities granted to the caller.

    Attributes:
        principal: Identity of the caller, used for audit events.
        grants: Pairs of (scope, capability). Scopes are ``realm:<realm_id>``
            or ``client:<client_uuid>``.
    """

    principal: str | None = None
    grants: frozenset[tuple[str, Capability]] = field(default_factory=frozenset)

    @classmethod
    def of(cls, principal: str | None, grants: Iterable[tuple[str, Capability | str]]) -> "CapabilitySet":
        """Build a capability set, accepting capability names as strings."""
        return cls(
            principal=principal,
            grants=frozenset((scope, Capability(capability)) for scope, capability in grants),
        )

    def allows(self, scope: str, capability: Capability) -> bool:
        """Check whether a scope grants a capability."""
        if (scope, capability) in self.grants:
            return True
        return capability == Capability.VIEW and (scope, Capability.MANAGE) in self.grants


class AuthorizationGate(ABC):
    """Checks view/manage access to one role container.

    ``require_view`` and ``require_manage`` return when access is granted and
    raise ForbiddenError otherwise. Callers run them before any store access.
    """

    def __init__(self, capabilities: CapabilitySet, container: RoleContainer) -> None:
        self.capabilities = capabilities
        self.container = container

    @abstractmethod
    def can_view(self) -> bool:
        ...

    @abstractmethod
    def can_manage(self) -> bool:
        ...

    def require_view(self) -> None:
        if not self.can_view():
            self._deny(Capability.VIEW)

    def require_manage(self) -> None:
        if not self.can_manage():
            self._deny(Capability.MANAGE)

    def _deny(self, capability: Capability) -> None:
        logger.info(
            "Authorization denied",
            principal=self.capabilities.principal,
            container_id=self.container.id,
            capability=capability.value,
        )
        raise ForbiddenError(
            f"Missing {capability.value} capability for {self.container.name}"
        )


class RealmAuthorizationGate(AuthorizationGate):
    """Gate for realm roles: only realm-scoped grants apply."""

    def can_view(self) -> bool:
        return self.capabilities.allows(realm_scope(self.container.realm_id), Capability.VIEW)

    def can_manage(self) -> bool:
        return self.capabilities.allows(realm_scope(self.container.realm_id), Capability.MANAGE)


class ClientAuthorizationGate(AuthorizationGate):
    """Gate for client roles: grants on the client or on its realm apply."""

    def _allows(self, capability: Capability) -> bool:
        return self.capabilities.allows(
            client_scope(self.container.id), capability
        ) or self.capabilities.allows(realm_scope(self.container.realm_id), capability)

    def can_view(self) -> bool:
        return self._allows(Capability.VIEW)

    def can_manage(self) -> bool:
        return self._allows(Capability.MANAGE)


def gate_for(container: RoleContainer, capabilities: CapabilitySet) -> AuthorizationGate:
    """Pick the gate matching the container type."""
    if container.container_type == ContainerType.REALM:
        return RealmAuthorizationGate(capabilities, container)
    return ClientAuthorizationGate(capabilities, container)
