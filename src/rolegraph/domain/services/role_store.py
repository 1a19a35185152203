"""Abstract role store used by the role services.

The store owns persistence of roles, containers and composite edges. The
services never touch the database directly, they only call this interface.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from typing import Iterable

from rolegraph.domain.entities.role import Role
from rolegraph.domain.entities.role_container import RoleContainer


class RoleStore(ABC):
    """Abstract base class for role persistence backends."""

    @abstractmethod
    def atomic(self) -> AbstractAsyncContextManager[None]:
        """Run the enclosed calls as one unit: commit on exit, roll back on error."""
        ...

    @abstractmethod
    async def list_roles(self, container: RoleContainer) -> list[Role]:
        """List every role owned by a container."""
        ...

    @abstractmethod
    async def find_role(self, container: RoleContainer, name: str) -> Role | None:
        """Find a role by name within a container."""
        ...

    @abstractmethod
    async def find_role_by_id(self, role_id: str) -> Role | None:
        """Find a role by ID."""
        ...

    @abstractmethod
    async def find_roles_by_ids(self, role_ids: Iterable[str]) -> list[Role]:
        """Find the roles matching the given IDs. Unknown IDs are skipped."""
        ...

    @abstractmethod
    async def create_role(
        self, container: RoleContainer, name: str, description: str | None = None
    ) -> Role:
        """Create a non-composite role.

        Raises:
            DuplicateNameError: If the container already has a role with this name.
        """
        ...

    @abstractmethod
    async def update_role(self, role: Role) -> Role:
        """Persist a role's name and description.

        Raises:
            NotFoundError: If the role no longer exists.
            DuplicateNameError: If the new name collides within the container.
        """
        ...

    @abstractmethod
    async def delete_role(self, role: Role) -> None:
        """Delete a role together with every composite edge touching it."""
        ...

    @abstractmethod
    async def get_composite_ids(self, role_id: str) -> set[str]:
        """Get the IDs of a role's direct composite children."""
        ...

    @abstractmethod
    async def add_composite_edges(self, role_id: str, child_ids: Iterable[str]) -> None:
        """Add composite edges from a role to each child. Existing edges are kept."""
        ...

    @abstractmethod
    async def remove_composite_edges(self, role_id: str, child_ids: Iterable[str]) -> None:
        """Remove composite edges from a role. Missing edges are ignored."""
        ...

    @abstractmethod
    async def find_realm_by_name(self, name: str) -> RoleContainer | None:
        """Find a realm container by name."""
        ...

    @abstractmethod
    async def find_client_by_id(self, realm_id: str, id: str) -> RoleContainer | None:
        """Find a client container of a realm by internal ID."""
        ...

    @abstractmethod
    async def find_client_by_client_id(self, realm_id: str, client_id: str) -> RoleContainer | None:
        """Find a client container of a realm by public client ID."""
        ...
