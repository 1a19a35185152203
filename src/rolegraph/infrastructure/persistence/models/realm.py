"""SQLAlchemy model for the realms table.

Realms are provisioned outside RoleGraph; the table is read to resolve
realm containers.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rolegraph.infrastructure.persistence.database import Base


class RealmModel(Base):
    """SQLAlchemy model for the realms table.

    Attributes:
        id: Primary key (UUID string).
        name: Unique realm name.
        created_at: Timestamp when the realm was created.
    """

    __tablename__ = "realms"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        comment="Realm ID (UUID)",
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="Realm name",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )

    # Relationships
    clients: Mapped[list["ClientModel"]] = relationship(  # noqa: F821
        "ClientModel",
        back_populates="realm",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Realm(id={self.id}, name={self.name})>"
