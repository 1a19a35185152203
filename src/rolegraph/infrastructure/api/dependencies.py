"""FastAPI dependencies for role container routes.

The caller's capabilities are resolved by an authentication layer outside
RoleGraph, which stores a CapabilitySet on ``request.state.capabilities``.
A request without one is treated as having no grants.
"""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from rolegraph.core.config import get_settings
from rolegraph.core.exceptions import NotFoundError
from rolegraph.core.logging import get_logger
from rolegraph.domain.entities.role_container import RoleContainer
from rolegraph.domain.services import (
    AuditRecorder,
    CapabilitySet,
    CompositeGraphEngine,
    RoleContainerService,
)
from rolegraph.infrastructure.persistence.database import get_db_session
from rolegraph.infrastructure.persistence.repositories import RoleRepository

logger = get_logger(__name__)


def get_capabilities(request: Request) -> CapabilitySet:
    """Get the caller's capability set from the request state."""
    capabilities = getattr(request.state, "capabilities", None)
    if capabilities is None:
        logger.debug("No capabilities on request", path=str(request.url.path))
        return CapabilitySet()
    return capabilities


def get_audit_recorder(request: Request) -> AuditRecorder:
    """Get the audit recorder from app state.

    Args:
        request: FastAPI request object.

    Returns:
        AuditRecorder instance.
    """
    # Created lazily for apps built without the lifespan (tests)
    if not hasattr(request.app.state, "audit_recorder"):
        settings = get_settings()
        request.app.state.audit_recorder = AuditRecorder(
            include_representation=settings.audit_include_representation
        )
    return request.app.state.audit_recorder


def get_role_store(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> RoleRepository:
    """Get the role store bound to the request's session."""
    return RoleRepository(session)


RoleStoreDep = Annotated[RoleRepository, Depends(get_role_store)]


def get_role_service(
    store: RoleStoreDep,
    capabilities: Annotated[CapabilitySet, Depends(get_capabilities)],
    audit_recorder: Annotated[AuditRecorder, Depends(get_audit_recorder)],
) -> RoleContainerService:
    """Get a role container service for the current caller."""
    settings = get_settings()
    return RoleContainerService(
        store,
        capabilities,
        audit_recorder=audit_recorder,
        graph=CompositeGraphEngine(store, settings.composite_traversal_limit),
    )


RoleService = Annotated[RoleContainerService, Depends(get_role_service)]


async def get_realm_container(realm: str, store: RoleStoreDep) -> RoleContainer:
    """Resolve the ``{realm}`` path parameter to a realm container.

    Raises:
        NotFoundError: If no realm has that name.
    """
    container = await store.find_realm_by_name(realm)
    if container is None:
        raise NotFoundError(f"Could not find realm: {realm}")
    return container


async def get_client_container(
    client_uuid: str,
    realm: Annotated[RoleContainer, Depends(get_realm_container)],
    store: RoleStoreDep,
) -> RoleContainer:
    """Resolve the ``{client_uuid}`` path parameter to a client container.

    Raises:
        NotFoundError: If the realm has no client with that ID.
    """
    container = await store.find_client_by_id(realm.id, client_uuid)
    if container is None:
        raise NotFoundError(f"Could not find client: {client_uuid}")
    return container
