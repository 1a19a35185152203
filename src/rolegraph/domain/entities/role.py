"""Role entity.

Roles belong to exactly one container (a realm or a client) and may
aggregate other roles of the same realm as composite children.
"""

from dataclasses import dataclass, field

from rolegraph.domain.entities.role_container import ContainerType, RoleContainer


@dataclass(frozen=True)
class Role:
    """Role owned by a realm or client container.

    Composite children are held as role IDs, never as object references, so
    the graph can be walked and cleaned up independently of loaded entities.

    Attributes:
        id: Unique identifier (UUID string).
        name: Role name, unique within the owning container.
        container_id: ID of the owning realm or client. Never changes.
        container_type: Type of the owning container.
        realm_id: Realm the role lives in.
        description: Optional human-readable description.
        composite_ids: IDs of the direct composite children.
    """

    id: str
    name: str
    container_id: str
    container_type: ContainerType
    realm_id: str
    description: str | None = None
    composite_ids: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        """Validate role data after initialization."""
        if not self.name:
            raise ValueError("Role name is required")
        if not self.container_id:
            raise ValueError("Role container is required")

    @property
    def composite(self) -> bool:
        """True if the role has at least one composite child."""
        return bool(self.composite_ids)

    @property
    def client_role(self) -> bool:
        return self.container_type == ContainerType.CLIENT

    def is_owned_by(self, container: RoleContainer) -> bool:
        """Check whether ``container`` owns this role."""
        return self.container_id == container.id
