"""Pytest configuration for all tests."""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from rolegraph.core.logging import get_logger
from rolegraph.domain.entities import AdminEvent, RoleContainer
from rolegraph.domain.services import (
    AuditRecorder,
    AuditSink,
    Capability,
    CapabilitySet,
    CompositeGraphEngine,
    LockRegistry,
    RoleContainerService,
    realm_scope,
)
from rolegraph.infrastructure.persistence.database import Base
from rolegraph.infrastructure.persistence.repositories import (
    ContainerRepository,
    RoleRepository,
)

logger = get_logger(__name__)


class RecordingSink(AuditSink):
    """Audit sink keeping every event in memory."""

    def __init__(self) -> None:
        self.events: list[AdminEvent] = []

    async def emit(self, event: AdminEvent) -> None:
        self.events.append(event)


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session.

    Uses an in-memory SQLite database for testing.
    """
    # Register models with Base.metadata
    from rolegraph.infrastructure.persistence import models  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def realm(db_session: AsyncSession) -> RoleContainer:
    """The "demo" realm."""
    return await ContainerRepository(db_session).create_realm("demo")


@pytest_asyncio.fixture
async def other_realm(db_session: AsyncSession) -> RoleContainer:
    """A second realm, for cross-realm checks."""
    return await ContainerRepository(db_session).create_realm("other")


@pytest_asyncio.fixture
async def client_container(db_session: AsyncSession, realm: RoleContainer) -> RoleContainer:
    """The "web-app" client registered in the demo realm."""
    return await ContainerRepository(db_session).create_client(realm.name, "web-app")


@pytest.fixture
def audit_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def audit_recorder(audit_sink: RecordingSink) -> AuditRecorder:
    return AuditRecorder(sink=audit_sink)


@pytest.fixture
def admin_capabilities(realm: RoleContainer) -> CapabilitySet:
    """Capabilities of a realm administrator."""
    return CapabilitySet.of("admin", [(realm_scope(realm.id), Capability.MANAGE)])


@pytest.fixture
def viewer_capabilities(realm: RoleContainer) -> CapabilitySet:
    """Capabilities of a caller who may only view the realm."""
    return CapabilitySet.of("viewer", [(realm_scope(realm.id), Capability.VIEW)])


@pytest.fixture
def role_store(db_session: AsyncSession) -> RoleRepository:
    return RoleRepository(db_session)


@pytest.fixture
def make_service(role_store: RoleRepository, audit_recorder: AuditRecorder):
    """Factory building a service for a given capability set."""
    locks = LockRegistry()

    def _make(capabilities: CapabilitySet, traversal_limit: int = 10_000) -> RoleContainerService:
        return RoleContainerService(
            role_store,
            capabilities,
            audit_recorder=audit_recorder,
            graph=CompositeGraphEngine(role_store, traversal_limit),
            locks=locks,
        )

    return _make


@pytest.fixture
def service(make_service, admin_capabilities: CapabilitySet) -> RoleContainerService:
    """Service acting as the realm administrator."""
    return make_service(admin_capabilities)


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession,
    admin_capabilities: CapabilitySet,
    audit_recorder: AuditRecorder,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with overridden database and caller dependencies."""
    from rolegraph.infrastructure.api.app import app
    from rolegraph.infrastructure.api.dependencies import get_audit_recorder, get_capabilities
    from rolegraph.infrastructure.persistence.database import get_db_session

    app.dependency_overrides[get_db_session] = lambda: db_session
    app.dependency_overrides[get_capabilities] = lambda: admin_capabilities
    app.dependency_overrides[get_audit_recorder] = lambda: audit_recorder

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides = {}
