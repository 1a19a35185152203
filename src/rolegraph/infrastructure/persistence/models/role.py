"""SQLAlchemy model for the roles table.

Roles are owned by either a realm or a client. ``container_id`` holds the
owning container's ID so one unique constraint covers both kinds.
"""

from sqlalchemy import Boolean, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from rolegraph.infrastructure.persistence.database import Base


class RoleModel(Base):
    """SQLAlchemy model for the roles table.

    Attributes:
        id: Primary key (UUID string).
        realm_id: Realm the role lives in.
        client_id: Owning client for client roles, NULL for realm roles.
        container_id: Owning container (realm ID or client ID).
        client_role: Whether the role is owned by a client.
        name: Role name (unique within container).
        description: Optional description of the role's purpose.
    """

    __tablename__ = "roles"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        comment="Role ID (UUID)",
    )
    realm_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("realms.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Foreign key to realms table",
    )
    client_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=True,
        comment="Owning client for client roles",
    )
    container_id: Mapped[str] = mapped_column(
        String(36),
        nullable=False,
        comment="Owning realm or client ID",
    )
    client_role: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Role name",
    )
    description: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Description of the role's purpose",
    )

    __table_args__ = (
        UniqueConstraint("container_id", "name", name="uq_roles_container_name"),
        Index("ix_roles_container_name", "container_id", "name"),
    )

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, name={self.name}, container_id={self.container_id})>"
