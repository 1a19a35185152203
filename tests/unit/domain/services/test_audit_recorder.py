"""Unit tests for AuditRecorder and the @audited decorator."""

from unittest.mock import AsyncMock

import pytest

from rolegraph.core.exceptions import ForbiddenError, NotFoundError
from rolegraph.domain.entities import OperationType, Outcome, RoleContainer
from rolegraph.domain.services import AuditRecorder, CapabilitySet, LoggingAuditSink, audited

REALM = RoleContainer.realm("r1", "demo")


class FakeService:
    """Minimal owner for audited methods."""

    def __init__(self, recorder: AuditRecorder) -> None:
        self.audit_recorder = recorder
        self.capabilities = CapabilitySet(principal="alice")
        self.calls = 0

    @audited(
        OperationType.CREATE,
        "{container.roles_path}/{name}",
        representation=lambda args: {"name": args["name"]},
    )
    async def create(self, container, name, fail_with=None):
        self.calls += 1
        if fail_with is not None:
            raise fail_with
        return name


class TestAuditRecorder:
    @pytest.mark.asyncio
    async def test_record_emits_event(self, audit_recorder, audit_sink):
        event = await audit_recorder.record(
            OperationType.DELETE, "roles/admin", realm_id="r1", principal="alice"
        )

        assert audit_sink.events == [event]
        assert event.outcome == Outcome.SUCCESS

    @pytest.mark.asyncio
    async def test_representation_can_be_omitted(self, audit_sink):
        recorder = AuditRecorder(sink=audit_sink, include_representation=False)

        event = await recorder.record(
            OperationType.CREATE, "roles/admin", representation={"name": "admin"}
        )

        assert event.representation is None

    @pytest.mark.asyncio
    async def test_sink_failure_is_swallowed(self):
        sink = AsyncMock()
        sink.emit.side_effect = RuntimeError("sink down")
        recorder = AuditRecorder(sink=sink)

        result = await recorder.record(OperationType.VIEW, "roles")

        assert result is None
        sink.emit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_logging_sink(self):
        sink = LoggingAuditSink()

        event = await AuditRecorder(sink=sink).record(OperationType.VIEW, "roles")

        assert event is not None


class TestAuditedDecorator:
    @pytest.mark.asyncio
    async def test_success_records_one_event(self, audit_recorder, audit_sink):
        service = FakeService(audit_recorder)

        assert await service.create(REALM, "admin") == "admin"

        assert len(audit_sink.events) == 1
        event = audit_sink.events[0]
        assert event.operation_type == OperationType.CREATE
        assert event.resource_path == "roles/admin"
        assert event.outcome == Outcome.SUCCESS
        assert event.realm_id == "r1"
        assert event.principal == "alice"
        assert event.representation == {"name": "admin"}

    @pytest.mark.asyncio
    async def test_failure_records_failure_and_reraises(self, audit_recorder, audit_sink):
        service = FakeService(audit_recorder)

        with pytest.raises(NotFoundError):
            await service.create(REALM, "admin", fail_with=NotFoundError("missing"))

        assert len(audit_sink.events) == 1
        assert audit_sink.events[0].outcome == Outcome.FAILURE
        assert audit_sink.events[0].error == "NotFoundError"

    @pytest.mark.asyncio
    async def test_forbidden_records_nothing(self, audit_recorder, audit_sink):
        service = FakeService(audit_recorder)

        with pytest.raises(ForbiddenError):
            await service.create(REALM, "admin", fail_with=ForbiddenError("no"))

        assert audit_sink.events == []

    @pytest.mark.asyncio
    async def test_sink_failure_does_not_change_result(self):
        sink = AsyncMock()
        sink.emit.side_effect = RuntimeError("sink down")
        service = FakeService(AuditRecorder(sink=sink))

        assert await service.create(REALM, "admin") == "admin"
        assert service.calls == 1

    @pytest.mark.asyncio
    async def test_client_container_path(self, audit_recorder, audit_sink):
        service = FakeService(audit_recorder)

        await service.create(RoleContainer.client("c1", "web-app", "r1"), "reader")

        assert audit_sink.events[0].resource_path == "clients/c1/roles/reader"
        assert audit_sink.events[0].realm_id == "r1"
