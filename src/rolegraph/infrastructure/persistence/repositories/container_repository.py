"""Container repository for provisioning realms and clients."""

import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rolegraph.core.exceptions import NotFoundError, RoleGraphError
from rolegraph.core.logging import get_logger
from rolegraph.domain.entities.role_container import RoleContainer
from rolegraph.infrastructure.persistence.models import ClientModel, RealmModel

logger = get_logger(__name__)


class ContainerRepository:
    """Repository for creating realms and clients.

    Role operations never create containers; this is used by the CLI and
    test fixtures to seed them.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_realm(self, name: str) -> RoleContainer:
        """Create a realm.

        Args:
            name: Unique realm name.

        Returns:
            The new realm container.

        Raises:
            RoleGraphError: If a realm with that name exists.
        """
        realm = RealmModel(id=str(uuid.uuid4()), name=name)
        self.session.add(realm)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise RoleGraphError(f"Realm {name} already exists") from e

        logger.info("Realm created", realm_id=realm.id, name=name)
        return RoleContainer.realm(realm.id, realm.name)

    async def create_client(self, realm_name: str, client_id: str) -> RoleContainer:
        """Register a client in a realm.

        Args:
            realm_name: Name of the owning realm.
            client_id: Public client identifier, unique within the realm.

        Returns:
            The new client container.

        Raises:
            NotFoundError: If the realm does not exist.
            RoleGraphError: If the realm already has that client.
        """
        result = await self.session.execute(select(RealmModel).where(RealmModel.name == realm_name))
        realm = result.scalar_one_or_none()
        if realm is None:
            raise NotFoundError(f"Could not find realm: {realm_name}")

        client = ClientModel(id=str(uuid.uuid4()), realm_id=realm.id, client_id=client_id)
        self.session.add(client)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise RoleGraphError(f"Client {client_id} already exists in {realm_name}") from e

        logger.info("Client created", realm_id=realm.id, id=client.id, client_id=client_id)
        return RoleContainer.client(client.id, client.client_id, client.realm_id)
