"""Admin event entity for the role management audit trail.

One event is emitted per logical role or composite operation, after the
operation's outcome is known.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class OperationType(str, Enum):
    """Kinds of audited operations."""

    VIEW = "VIEW"
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    ACTION = "ACTION"


class Outcome(str, Enum):
    """Result of an audited operation."""

    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


@dataclass
class AdminEvent:
    """Structured record of one role management operation.

    Attributes:
        operation_type: What kind of operation ran.
        resource_path: Admin path of the affected resource, relative to the realm.
        outcome: Whether the operation succeeded.
        realm_id: Realm the operation ran in, if known.
        principal: Caller identity taken from the capability set, if known.
        representation: Submitted payload, for operations that carry one.
        error: Name of the error kind for failed operations.
        occurred_at: Timestamp when the outcome was known (UTC).
    """

    operation_type: OperationType
    resource_path: str
    outcome: Outcome = Outcome.SUCCESS
    realm_id: str | None = None
    principal: str | None = None
    representation: Any = None
    error: str | None = None
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        """Validate event data after initialization."""
        if not self.resource_path:
            raise ValueError("Resource path is required")

    def to_dict(self) -> dict[str, Any]:
        """Flatten the event for structured logging."""
        return {
            "operation_type": self.operation_type.value,
            "resource_path": self.resource_path,
            "outcome": self.outcome.value,
            "realm_id": self.realm_id,
            "principal": self.principal,
            "representation": self.representation,
            "error": self.error,
            "occurred_at": self.occurred_at.isoformat(),
        }
