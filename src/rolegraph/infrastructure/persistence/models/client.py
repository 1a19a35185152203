"""SQLAlchemy model for the clients table.

Clients are registered within a realm and own their own role namespace.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rolegraph.infrastructure.persistence.database import Base


class ClientModel(Base):
    """SQLAlchemy model for the clients table.

    Attributes:
        id: Primary key (UUID string).
        realm_id: Foreign key to realms table.
        client_id: Public client identifier (unique within realm).
        created_at: Timestamp when the client was registered.
    """

    __tablename__ = "clients"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        comment="Client ID (UUID)",
    )
    realm_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("realms.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Foreign key to realms table",
    )
    client_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Public client identifier",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )

    # Relationships
    realm: Mapped["RealmModel"] = relationship(  # noqa: F821
        "RealmModel",
        back_populates="clients",
    )

    __table_args__ = (
        UniqueConstraint("realm_id", "client_id", name="uq_clients_realm_client_id"),
    )

    def __repr__(self) -> str:
        return f"<Client(id={self.id}, client_id={self.client_id}, realm_id={self.realm_id})>"
