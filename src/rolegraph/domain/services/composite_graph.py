"""Composite role graph engine.

Maintains the composite-children relation between roles and serves direct,
scoped and flattened views of it. Edges are keyed by role ID and stored
through the RoleStore; the engine itself holds no graph state between calls.

The engine does not authorize, lock or audit. RoleContainerService runs every
mutating call under the realm's graph lock and inside ``RoleStore.atomic()``,
so the cycle check below and the edge commit form a single unit.
"""

from dataclasses import replace
from typing import Iterable, Sequence

from rolegraph.core.config import get_settings
from rolegraph.core.exceptions import CyclicCompositionError, NotFoundError
from rolegraph.core.logging import get_logger
from rolegraph.domain.entities.role import Role
from rolegraph.domain.entities.role_container import ContainerType, RoleContainer
from rolegraph.domain.services.role_store import RoleStore

logger = get_logger(__name__)


class CompositeGraphEngine:
    """Adds, removes and queries composite edges with cycle detection.

    Cycle detection runs a depth-first reachability search from each candidate
    child; if the parent is reachable the edge would close a cycle. Searches
    expand at most ``traversal_limit`` roles and fail closed past that.
    """

    def __init__(self, store: RoleStore, traversal_limit: int | None = None) -> None:
        """Initialize the engine.

        Args:
            store: Role store holding roles and edges.
            traversal_limit: Maximum roles expanded per search. Defaults to the
                ``composite_traversal_limit`` setting.

        Raises:
            ValueError: If ``traversal_limit`` is not positive.
        """
        self.store = store
        self.traversal_limit = (
            traversal_limit
            if traversal_limit is not None
            else get_settings().composite_traversal_limit
        )
        if self.traversal_limit < 1:
            raise ValueError("traversal_limit must be a positive integer")

    async def add_composites(self, role: Role, children: Sequence[Role]) -> Role:
        """Add composite edges from ``role`` to every child, all or nothing.

        Args:
            role: Parent role.
            children: Roles to add as direct composite children.

        Returns:
            The parent role with its updated composite set.

        Raises:
            NotFoundError: If a child lives in another realm.
            CyclicCompositionError: If any edge would create a cycle, or the
                search exceeded the traversal limit.
        """
        for child in children:
            if child.realm_id != role.realm_id:
                raise NotFoundError(f"Could not find composite role: {child.id}")

        existing = await self.store.get_composite_ids(role.id)
        child_ids = {child.id for child in children}
        new_ids = child_ids - existing

        offending = await self._find_cycle(role.id, [child.id for child in children], existing)
        if offending is not None:
            logger.info(
                "Composite edge rejected: cycle",
                role_id=role.id,
                child_id=offending,
            )
            if offending == role.id:
                message = f"Role {role.name} cannot be a composite of itself"
            else:
                child_name = next(c.name for c in children if c.id == offending)
                message = f"Adding {child_name} to {role.name} would create a composite cycle"
            raise CyclicCompositionError(message, role_id=role.id, child_id=offending)

        if new_ids:
            await self.store.add_composite_edges(role.id, new_ids)
            logger.debug("Composite edges added", role_id=role.id, count=len(new_ids))

        return replace(role, composite_ids=frozenset(existing | new_ids))

    async def remove_composites(self, role: Role, children: Sequence[Role]) -> Role:
        """Remove composite edges from ``role``. Edges that don't exist are ignored."""
        existing = await self.store.get_composite_ids(role.id)
        remove_ids = {child.id for child in children} & existing

        if remove_ids:
            await self.store.remove_composite_edges(role.id, remove_ids)
            logger.debug("Composite edges removed", role_id=role.id, count=len(remove_ids))

        return replace(role, composite_ids=frozenset(existing - remove_ids))

    async def get_composites(self, role: Role) -> set[Role]:
        """Get the direct composite children of a role."""
        child_ids = await self.store.get_composite_ids(role.id)
        if not child_ids:
            return set()
        return set(await self.store.find_roles_by_ids(child_ids))

    async def get_realm_composites(self, role: Role) -> set[Role]:
        """Get the direct composite children owned by a realm."""
        return {
            child
            for child in await self.get_composites(role)
            if child.container_type == ContainerType.REALM
        }

    async def get_client_composites(self, role: Role, client: RoleContainer) -> set[Role]:
        """Get the direct composite children owned by ``client``."""
        return {child for child in await self.get_composites(role) if child.is_owned_by(client)}

    async def expand_composites(self, role: Role) -> set[Role]:
        """Get every role reachable from ``role`` through composite edges.

        This is the effective-role view used when evaluating permissions. The
        role itself is not included.
        """
        reachable = await self._walk(role.id, {})
        reachable.discard(role.id)
        if not reachable:
            return set()
        return set(await self.store.find_roles_by_ids(reachable))

    async def creates_cycle(self, role: Role, child_ids: Iterable[str]) -> bool:
        """Check whether adding ``child_ids`` under ``role`` would create a cycle."""
        existing = await self.store.get_composite_ids(role.id)
        return await self._find_cycle(role.id, list(child_ids), existing) is not None

    async def _find_cycle(
        self, role_id: str, child_ids: Sequence[str], existing: set[str]
    ) -> str | None:
        """Return the first child whose edge from ``role_id`` would close a cycle.

        Checked against the existing edges overlaid with the whole batch.
        """
        if role_id in child_ids:
            return role_id

        adjacency: dict[str, set[str]] = {role_id: existing | set(child_ids)}
        for child_id in child_ids:
            if await self._reaches(child_id, role_id, adjacency):
                return child_id
        return None

    async def _reaches(self, start: str, target: str, adjacency: dict[str, set[str]]) -> bool:
        """Depth-first search from ``start`` for ``target``."""
        visited = await self._walk(start, adjacency, target=target)
        return target in visited

    async def _walk(
        self,
        start: str,
        adjacency: dict[str, set[str]],
        target: str | None = None,
    ) -> set[str]:
        """Collect role IDs reachable from ``start``, stopping early at ``target``.

        ``adjacency`` caches fetched edges and may carry edges not yet stored.
        """
        visited: set[str] = set()
        stack = [start]

        while stack:
            node = stack.pop()
            if node in visited:
                continue
            visited.add(node)
            if node == target:
                break

            if len(visited) > self.traversal_limit:
                logger.warning(
                    "Composite traversal limit exceeded",
                    start=start,
                    limit=self.traversal_limit,
                )
                raise CyclicCompositionError(
                    f"Composite graph traversal exceeded {self.traversal_limit} roles"
                )

            if node not in adjacency:
                adjacency[node] = await self.store.get_composite_ids(node)
            stack.extend(child for child in adjacency[node] if child not in visited)

        return visited
