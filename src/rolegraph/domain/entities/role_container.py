"""Role container entity.

A container is either a realm or a client registered within a realm. Each
container owns its own namespace of role names.
"""

from dataclasses import dataclass
from enum import Enum


class ContainerType(str, Enum):
    """Kinds of role containers."""

    REALM = "REALM"
    CLIENT = "CLIENT"


@dataclass(frozen=True)
class RoleContainer:
    """A realm or client owning a set of uniquely named roles.

    Attributes:
        id: Stable identifier (UUID string).
        name: Realm name, or the public client id for clients.
        container_type: Whether this is a realm or a client.
        realm_id: Owning realm. Equal to ``id`` for realms.
    """

    id: str
    name: str
    container_type: ContainerType
    realm_id: str

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Container ID is required")
        if not self.name:
            raise ValueError("Container name is required")
        if self.container_type == ContainerType.REALM and self.realm_id != self.id:
            raise ValueError("A realm container must be its own realm")

    @classmethod
    def realm(cls, id: str, name: str) -> "RoleContainer":
        """Build a realm container."""
        return cls(id=id, name=name, container_type=ContainerType.REALM, realm_id=id)

    @classmethod
    def client(cls, id: str, client_id: str, realm_id: str) -> "RoleContainer":
        """Build a client container.

        Args:
            id: Internal client ID.
            client_id: Public client identifier, unique within the realm.
            realm_id: Realm the client is registered in.
        """
        return cls(id=id, name=client_id, container_type=ContainerType.CLIENT, realm_id=realm_id)

    @property
    def is_realm(self) -> bool:
        return self.container_type == ContainerType.REALM

    @property
    def roles_path(self) -> str:
        """Admin resource path of this container's role collection."""
        if self.is_realm:
            return "roles"
        return f"clients/{self.id}/roles"
