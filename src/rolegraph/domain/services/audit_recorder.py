"""Admin event recording for role operations.

Every public role or composite operation is wrapped with ``@audited``, which
emits exactly one AdminEvent once the operation's outcome is known. Sinks
decide where events go; a failing sink is logged and never changes the
operation's own result.
"""

import functools
import inspect
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Mapping, TypeVar

from rolegraph.core.exceptions import ForbiddenError
from rolegraph.core.logging import LoggingContext, get_logger
from rolegraph.domain.entities.admin_event import AdminEvent, OperationType, Outcome

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


class AuditSink(ABC):
    """Destination for admin events."""

    @abstractmethod
    async def emit(self, event: AdminEvent) -> None:
        """Deliver one event."""
        ...


class LoggingAuditSink(AuditSink):
    """Writes admin events to the structured log."""

    def __init__(self, logger_name: str = "rolegraph.audit") -> None:
        self._logger = get_logger(logger_name)

    async def emit(self, event: AdminEvent) -> None:
        self._logger.info("Admin event", **event.to_dict())


class AuditRecorder:
    """Builds admin events and hands them to a sink.

    Attributes:
        sink: Where events are delivered.
        include_representation: Whether submitted payloads are attached to events.
    """

    def __init__(self, sink: AuditSink | None = None, include_representation: bool = True) -> None:
        self.sink = sink or LoggingAuditSink()
        self.include_representation = include_representation

    async def record(
        self,
        operation_type: OperationType,
        resource_path: str,
        representation: Any = None,
        outcome: Outcome = Outcome.SUCCESS,
        realm_id: str | None = None,
        principal: str | None = None,
        error: str | None = None,
    ) -> AdminEvent | None:
        """Emit one admin event.

        Returns:
            The emitted event, or None if the sink failed.
        """
        try:
            event = AdminEvent(
                operation_type=operation_type,
                resource_path=resource_path,
                outcome=outcome,
                realm_id=realm_id,
                principal=principal,
                representation=representation if self.include_representation else None,
                error=error,
            )
            await self.sink.emit(event)
            return event
        except Exception as e:
            # Audit failures never alter the operation result
            logger.error(
                "Failed to record admin event",
                operation_type=operation_type.value,
                resource_path=resource_path,
                error=str(e),
                exc_info=True,
            )
            return None


def audited(
    operation_type: OperationType,
    resource_path: str,
    representation: Callable[[Mapping[str, Any]], Any] | None = None,
) -> Callable[[F], F]:
    """Record one admin event around an async service method.

    The decorated method's owner must expose ``audit_recorder`` and
    ``capabilities``. SUCCESS is recorded when the method returns and FAILURE
    when it raises anything other than ForbiddenError; a refused call was
    never authorized and records nothing.

    Args:
        operation_type: Operation type of the emitted event.
        resource_path: ``str.format`` template rendered with the call's
            arguments, e.g. ``"{container.roles_path}/{name}"``.
        representation: Optional callable building the event payload from the
            call's arguments.

    Example:
        @audited(OperationType.CREATE, "{container.roles_path}/{name}")
        async def create_role(self, container, name, description=None):
            ...
    """

    def decorator(func: F) -> F:
        signature = inspect.signature(func)

        @functools.wraps(func)
        async def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
            bound = signature.bind(self, *args, **kwargs)
            bound.apply_defaults()
            arguments = dict(bound.arguments)
            arguments.pop("self", None)

            container = arguments.get("container")

            with LoggingContext(
                realm_id=getattr(container, "realm_id", None),
                principal=self.capabilities.principal,
            ):
                try:
                    result = await func(self, *args, **kwargs)
                except ForbiddenError:
                    raise
                except Exception as e:
                    await _emit(self, arguments, Outcome.FAILURE, type(e).__name__)
                    raise

                await _emit(self, arguments, Outcome.SUCCESS, None)
                return result

        async def _emit(
            owner: Any, arguments: dict[str, Any], outcome: Outcome, error: str | None
        ) -> None:
            container = arguments.get("container")
            payload = None
            try:
                path = resource_path.format(**arguments)
                if representation is not None:
                    payload = representation(arguments)
            except Exception as e:
                logger.error(
                    "Failed to build admin event",
                    operation_type=operation_type.value,
                    template=resource_path,
                    error=str(e),
                )
                return
            await owner.audit_recorder.record(
                operation_type,
                path,
                representation=payload,
                outcome=outcome,
                realm_id=getattr(container, "realm_id", None),
                principal=owner.capabilities.principal,
                error=error,
            )

        return wrapper  # type: ignore[return-value]

    return decorator
