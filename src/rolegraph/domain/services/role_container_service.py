"""Role container service.

Entry point for every role and composite operation on one container. Each
public method checks the authorization gate first, does its store and graph
work inside one atomic unit, and emits exactly one admin event through the
``@audited`` decorator.
"""

from dataclasses import replace
from typing import Sequence

from rolegraph.core.exceptions import DuplicateNameError, NotFoundError
from rolegraph.core.logging import get_logger
from rolegraph.domain.entities.admin_event import OperationType
from rolegraph.domain.entities.role import Role
from rolegraph.domain.entities.role_container import RoleContainer
from rolegraph.domain.services.audit_recorder import AuditRecorder, audited
from rolegraph.domain.services.authorization_gate import (
    Capability,
    CapabilitySet,
    gate_for,
)
from rolegraph.domain.services.composite_graph import CompositeGraphEngine
from rolegraph.domain.services.lock_registry import LockRegistry, default_lock_registry
from rolegraph.domain.services.role_store import RoleStore

logger = get_logger(__name__)


def _role_representation(arguments: dict) -> dict:
    return {"name": arguments["name"], "description": arguments["description"]}


def _update_representation(arguments: dict) -> dict:
    return {
        "name": arguments["new_name"] or arguments["name"],
        "description": arguments["description"],
    }


def _composites_representation(arguments: dict) -> list[dict]:
    return [{"id": role_id} for role_id in arguments["composite_ids"]]


class RoleContainerService:
    """Role lifecycle and composite operations scoped to a container.

    One instance serves one caller: ``capabilities`` is the caller's resolved
    capability set. Mutations serialize on process-wide locks: the container
    lock for name changes, the realm graph lock for edge changes (always
    taken in that order).
    """

    def __init__(
        self,
        store: RoleStore,
        capabilities: CapabilitySet,
        audit_recorder: AuditRecorder | None = None,
        graph: CompositeGraphEngine | None = None,
        locks: LockRegistry | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            store: Role store for persistence.
            capabilities: Capabilities granted to the caller.
            audit_recorder: Recorder for admin events. Defaults to structured logging.
            graph: Composite graph engine. Defaults to one over ``store``.
            locks: Lock registry. Defaults to the process-wide registry.
        """
        self.store = store
        self.capabilities = capabilities
        self.audit_recorder = audit_recorder or AuditRecorder()
        self.graph = graph or CompositeGraphEngine(store)
        self.locks = locks or default_lock_registry

    # =========================================================================
    # Role lifecycle
    # =========================================================================

    @audited(OperationType.VIEW, "{container.roles_path}")
    async def list_roles(self, container: RoleContainer) -> list[Role]:
        """List all roles owned by the container."""
        self._authorize(container, Capability.VIEW)
        async with self.store.atomic():
            return await self.store.list_roles(container)

    @audited(
        OperationType.CREATE,
        "{container.roles_path}/{name}",
        representation=_role_representation,
    )
    async def create_role(
        self, container: RoleContainer, name: str, description: str | None = None
    ) -> Role:
        """Create a non-composite role.

        Raises:
            DuplicateNameError: If the container already has a role named ``name``.
        """
        self._authorize(container, Capability.MANAGE)
        async with self.locks.container_lock(container.id):
            async with self.store.atomic():
                role = await self.store.create_role(container, name, description)

        logger.info("Role created", container_id=container.id, role_id=role.id, name=name)
        return role

    @audited(OperationType.VIEW, "{container.roles_path}/{name}")
    async def get_role(self, container: RoleContainer, name: str) -> Role:
        """Get a role by name.

        Raises:
            NotFoundError: If the container has no such role.
        """
        async with self.store.atomic():
            return await self._authorized_role(container, name, Capability.VIEW)

    @audited(
        OperationType.UPDATE,
        "{container.roles_path}/{name}",
        representation=_update_representation,
    )
    async def update_role(
        self,
        container: RoleContainer,
        name: str,
        description: str | None,
        new_name: str | None = None,
    ) -> Role:
        """Update a role's description and optionally rename it.

        Raises:
            NotFoundError: If the container has no such role.
            DuplicateNameError: If ``new_name`` is taken in the container.
        """
        self._authorize(container, Capability.MANAGE)
        async with self.locks.container_lock(container.id):
            async with self.store.atomic():
                role = await self._find_role(container, name)
                if new_name and new_name != role.name:
                    if await self.store.find_role(container, new_name) is not None:
                        raise DuplicateNameError(new_name, container.name)
                updated = await self.store.update_role(
                    replace(role, name=new_name or role.name, description=description)
                )

        logger.info(
            "Role updated",
            container_id=container.id,
            role_id=updated.id,
            renamed=updated.name != name,
        )
        return updated

    @audited(OperationType.DELETE, "{container.roles_path}/{name}")
    async def delete_role(self, container: RoleContainer, name: str) -> None:
        """Delete a role and every composite edge touching it.

        Raises:
            NotFoundError: If the container has no such role.
        """
        self._authorize(container, Capability.MANAGE)
        async with self.locks.container_lock(container.id):
            async with self.locks.graph_lock(container.realm_id):
                async with self.store.atomic():
                    role = await self._find_role(container, name)
                    await self.store.delete_role(role)

        logger.info("Role deleted", container_id=container.id, role_id=role.id)

    # =========================================================================
    # Composites
    # =========================================================================

    @audited(
        OperationType.ACTION,
        "{container.roles_path}/{name}/composites",
        representation=_composites_representation,
    )
    async def add_composites(
        self, container: RoleContainer, name: str, composite_ids: Sequence[str]
    ) -> Role:
        """Add composite children to a role, all or nothing.

        Raises:
            NotFoundError: If the role or any child does not exist in the realm.
            CyclicCompositionError: If any new edge would create a cycle.
        """
        self._authorize(container, Capability.MANAGE)
        async with self.locks.graph_lock(container.realm_id):
            async with self.store.atomic():
                role = await self._find_role(container, name)
                children = await self._find_children(composite_ids)
                return await self.graph.add_composites(role, children)

    @audited(
        OperationType.DELETE,
        "{container.roles_path}/{name}/composites",
        representation=_composites_representation,
    )
    async def remove_composites(
        self, container: RoleContainer, name: str, composite_ids: Sequence[str]
    ) -> Role:
        """Remove composite children from a role. Absent edges are ignored.

        Raises:
            NotFoundError: If the role or any child does not exist.
        """
        self._authorize(container, Capability.MANAGE)
        async with self.locks.graph_lock(container.realm_id):
            async with self.store.atomic():
                role = await self._find_role(container, name)
                children = await self._find_children(composite_ids)
                return await self.graph.remove_composites(role, children)

    @audited(OperationType.VIEW, "{container.roles_path}/{name}/composites")
    async def get_composites(self, container: RoleContainer, name: str) -> set[Role]:
        """Get a role's direct composite children."""
        async with self.store.atomic():
            role = await self._authorized_role(container, name, Capability.MANAGE)
            return await self.graph.get_composites(role)

    @audited(OperationType.VIEW, "{container.roles_path}/{name}/composites/realm")
    async def get_realm_composites(self, container: RoleContainer, name: str) -> set[Role]:
        """Get a role's direct composite children that are realm roles."""
        async with self.store.atomic():
            role = await self._authorized_role(container, name, Capability.MANAGE)
            return await self.graph.get_realm_composites(role)

    @audited(OperationType.VIEW, "{container.roles_path}/{name}/composites/client/{client_id}")
    async def get_client_composites(
        self, container: RoleContainer, name: str, client_id: str
    ) -> set[Role]:
        """Get a role's direct composite children owned by a client.

        Args:
            client_id: Public client ID within the container's realm.

        Raises:
            NotFoundError: If the role or the client does not exist.
        """
        async with self.store.atomic():
            role = await self._authorized_role(container, name, Capability.MANAGE)
            client = await self.store.find_client_by_client_id(container.realm_id, client_id)
            if client is None:
                raise NotFoundError(f"Could not find client: {client_id}")
            return await self.graph.get_client_composites(role, client)

    @audited(
        OperationType.VIEW,
        "{container.roles_path}/{name}/composites/client-by-id/{client_uuid}",
    )
    async def get_client_composites_by_id(
        self, container: RoleContainer, name: str, client_uuid: str
    ) -> set[Role]:
        """Same as get_client_composites, with the client given by internal ID."""
        async with self.store.atomic():
            role = await self._authorized_role(container, name, Capability.MANAGE)
            client = await self.store.find_client_by_id(container.realm_id, client_uuid)
            if client is None:
                raise NotFoundError(f"Could not find client: {client_uuid}")
            return await self.graph.get_client_composites(role, client)

    @audited(OperationType.VIEW, "{container.roles_path}/{name}/composites/effective")
    async def get_effective_composites(self, container: RoleContainer, name: str) -> set[Role]:
        """Get every role a role grants through composite edges, at any depth.

        Raises:
            NotFoundError: If the container has no such role.
            CyclicCompositionError: If the walk exceeds the traversal limit.
        """
        async with self.store.atomic():
            role = await self._authorized_role(container, name, Capability.MANAGE)
            return await self.graph.expand_composites(role)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _authorize(self, container: RoleContainer, capability: Capability) -> None:
        gate = gate_for(container, self.capabilities)
        if capability == Capability.MANAGE:
            gate.require_manage()
        else:
            gate.require_view()

    async def _find_role(self, container: RoleContainer, name: str) -> Role:
        """Look a role up by name, raising NotFoundError if absent.

        Mutations authorize before taking their locks and call this under the
        lock; reads go through ``_authorized_role``.
        """
        role = await self.store.find_role(container, name)
        if role is None:
            raise NotFoundError(f"Could not find role: {name}")
        return role

    async def _authorized_role(
        self, container: RoleContainer, name: str, capability: Capability
    ) -> Role:
        """Check the gate, then look the role up by name."""
        self._authorize(container, capability)
        return await self._find_role(container, name)

    async def _find_children(self, composite_ids: Sequence[str]) -> list[Role]:
        wanted = list(dict.fromkeys(composite_ids))
        found = {role.id: role for role in await self.store.find_roles_by_ids(wanted)}
        for role_id in wanted:
            if role_id not in found:
                raise NotFoundError(f"Could not find composite role: {role_id}")
        return [found[role_id] for role_id in wanted]
