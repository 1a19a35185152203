"""SQLAlchemy model for the composite_roles edge table.

Each row is one edge from a composite role to one of its direct children.
"""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from rolegraph.infrastructure.persistence.database import Base


class CompositeRoleModel(Base):
    """Edge table for the composite role graph.

    Attributes:
        composite_id: Parent role.
        child_role_id: Direct child of the parent.
    """

    __tablename__ = "composite_roles"

    composite_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
        comment="Parent (composite) role",
    )
    child_role_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
        comment="Child role",
    )

    def __repr__(self) -> str:
        return f"<CompositeRole(composite_id={self.composite_id}, child_role_id={self.child_role_id})>"
