"""Role repository: the SQLAlchemy implementation of RoleStore."""

import uuid
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Iterable

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from rolegraph.core.exceptions import DuplicateNameError, NotFoundError, StoreUnavailableError
from rolegraph.core.logging import get_logger
from rolegraph.domain.entities.role import Role
from rolegraph.domain.entities.role_container import ContainerType, RoleContainer
from rolegraph.domain.services.role_store import RoleStore
from rolegraph.infrastructure.persistence.models import (
    ClientModel,
    CompositeRoleModel,
    RealmModel,
    RoleModel,
)

logger = get_logger(__name__)


class RoleRepository(RoleStore):
    """Repository for roles, containers and composite edges.

    Methods only flush; ``atomic()`` commits or rolls back the session.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    @asynccontextmanager
    async def atomic(self) -> AsyncGenerator[None, None]:
        """Commit the session on success, roll it back on any error.

        Raises:
            StoreUnavailableError: If the database could not be reached.
        """
        try:
            yield
            await self.session.commit()
        except (OperationalError, InterfaceError) as e:
            await self.session.rollback()
            logger.error("Role store unavailable", error=str(e))
            raise StoreUnavailableError("Role store unavailable") from e
        except Exception:
            await self.session.rollback()
            raise

    # =========================================================================
    # Roles
    # =========================================================================

    async def list_roles(self, container: RoleContainer) -> list[Role]:
        result = await self.session.execute(
            select(RoleModel)
            .where(RoleModel.container_id == container.id)
            .order_by(RoleModel.name)
        )
        return await self._to_entities(list(result.scalars().all()))

    async def find_role(self, container: RoleContainer, name: str) -> Role | None:
        model = await self._get_model(container.id, name)
        if model is None:
            return None
        return self._to_entity(model, await self.get_composite_ids(model.id))

    async def find_role_by_id(self, role_id: str) -> Role | None:
        result = await self.session.execute(select(RoleModel).where(RoleModel.id == role_id))
        model = result.scalar_one_or_none()
        if model is None:
            return None
        return self._to_entity(model, await self.get_composite_ids(model.id))

    async def find_roles_by_ids(self, role_ids: Iterable[str]) -> list[Role]:
        role_ids = list(role_ids)
        if not role_ids:
            return []
        result = await self.session.execute(select(RoleModel).where(RoleModel.id.in_(role_ids)))
        return await self._to_entities(list(result.scalars().all()))

    async def create_role(
        self, container: RoleContainer, name: str, description: str | None = None
    ) -> Role:
        """Create a role in a container.

        Args:
            container: Owning realm or client.
            name: Role name.
            description: Optional description.

        Returns:
            The created role.

        Raises:
            DuplicateNameError: If the name is taken in the container.
        """
        if await self._get_model(container.id, name) is not None:
            raise DuplicateNameError(name, container.name)

        model = RoleModel(
            id=str(uuid.uuid4()),
            realm_id=container.realm_id,
            client_id=None if container.is_realm else container.id,
            container_id=container.id,
            client_role=not container.is_realm,
            name=name,
            description=description,
        )
        self.session.add(model)
        try:
            await self.session.flush()
        except IntegrityError as e:
            # Lost a race with another process on the unique constraint
            raise DuplicateNameError(name, container.name) from e
        return self._to_entity(model, set())

    async def update_role(self, role: Role) -> Role:
        """Persist a role's name and description.

        Raises:
            NotFoundError: If the role no longer exists.
            DuplicateNameError: If the new name is taken in the container.
        """
        model = await self.session.get(RoleModel, role.id)
        if model is None:
            raise NotFoundError(f"Could not find role: {role.name}")

        model.name = role.name
        model.description = role.description
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise DuplicateNameError(role.name) from e
        return self._to_entity(model, await self.get_composite_ids(model.id))

    async def delete_role(self, role: Role) -> None:
        """Delete a role and every composite edge into or out of it."""
        await self.session.execute(
            delete(CompositeRoleModel).where(
                or_(
                    CompositeRoleModel.composite_id == role.id,
                    CompositeRoleModel.child_role_id == role.id,
                )
            )
        )
        await self.session.execute(delete(RoleModel).where(RoleModel.id == role.id))
        await self.session.flush()

    # =========================================================================
    # Composite edges
    # =========================================================================

    async def get_composite_ids(self, role_id: str) -> set[str]:
        result = await self.session.execute(
            select(CompositeRoleModel.child_role_id).where(
                CompositeRoleModel.composite_id == role_id
            )
        )
        return set(result.scalars().all())

    async def add_composite_edges(self, role_id: str, child_ids: Iterable[str]) -> None:
        existing = await self.get_composite_ids(role_id)
        for child_id in set(child_ids) - existing:
            self.session.add(CompositeRoleModel(composite_id=role_id, child_role_id=child_id))
        await self.session.flush()

    async def remove_composite_edges(self, role_id: str, child_ids: Iterable[str]) -> None:
        child_ids = list(child_ids)
        if not child_ids:
            return
        await self.session.execute(
            delete(CompositeRoleModel).where(
                (CompositeRoleModel.composite_id == role_id)
                & (CompositeRoleModel.child_role_id.in_(child_ids))
            )
        )
        await self.session.flush()

    # =========================================================================
    # Containers
    # =========================================================================

    async def find_realm_by_name(self, name: str) -> RoleContainer | None:
        result = await self.session.execute(select(RealmModel).where(RealmModel.name == name))
        realm = result.scalar_one_or_none()
        return RoleContainer.realm(realm.id, realm.name) if realm else None

    async def find_client_by_id(self, realm_id: str, id: str) -> RoleContainer | None:
        result = await self.session.execute(
            select(ClientModel).where(
                (ClientModel.id == id) & (ClientModel.realm_id == realm_id)
            )
        )
        return self._client_container(result.scalar_one_or_none())

    async def find_client_by_client_id(self, realm_id: str, client_id: str) -> RoleContainer | None:
        result = await self.session.execute(
            select(ClientModel).where(
                (ClientModel.client_id == client_id) & (ClientModel.realm_id == realm_id)
            )
        )
        return self._client_container(result.scalar_one_or_none())

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _get_model(self, container_id: str, name: str) -> RoleModel | None:
        result = await self.session.execute(
            select(RoleModel).where(
                (RoleModel.container_id == container_id) & (RoleModel.name == name)
            )
        )
        return result.scalar_one_or_none()

    async def _to_entities(self, models: list[RoleModel]) -> list[Role]:
        """Convert models to entities, loading all their edges in one query."""
        if not models:
            return []
        result = await self.session.execute(
            select(CompositeRoleModel).where(
                CompositeRoleModel.composite_id.in_([model.id for model in models])
            )
        )
        edges: dict[str, set[str]] = defaultdict(set)
        for edge in result.scalars().all():
            edges[edge.composite_id].add(edge.child_role_id)
        return [self._to_entity(model, edges[model.id]) for model in models]

    @staticmethod
    def _to_entity(model: RoleModel, composite_ids: Iterable[str]) -> Role:
        return Role(
            id=model.id,
            name=model.name,
            container_id=model.container_id,
            container_type=ContainerType.CLIENT if model.client_role else ContainerType.REALM,
            realm_id=model.realm_id,
            description=model.description,
            composite_ids=frozenset(composite_ids),
        )

    @staticmethod
    def _client_container(client: ClientModel | None) -> RoleContainer | None:
        if client is None:
            return None
        return RoleContainer.client(client.id, client.client_id, client.realm_id)
