"""Roles API routes.

The same set of endpoints serves realm roles and client roles; only the
dependency resolving the role container differs. Authorization, auditing and
error semantics all live in RoleContainerService; domain errors are mapped to
HTTP responses by the app's exception handlers.
"""

from typing import Annotated, Awaitable, Callable

from fastapi import APIRouter, Body, Depends, Request, Response, status

from rolegraph.domain.entities.role_container import RoleContainer
from rolegraph.infrastructure.api.dependencies import (
    RoleService,
    get_client_container,
    get_realm_container,
)
from rolegraph.infrastructure.api.schemas import (
    CreateRoleRequest,
    RoleReference,
    RoleResponse,
    UpdateRoleRequest,
    to_role_list,
)


def build_roles_router(
    resolve_container: Callable[..., Awaitable[RoleContainer]],
) -> APIRouter:
    """Build the role endpoints for one kind of container.

    Args:
        resolve_container: Dependency returning the container addressed by the path.
    """
    router = APIRouter()
    Container = Annotated[RoleContainer, Depends(resolve_container)]

    @router.get("", response_model=list[RoleResponse])
    async def list_roles(container: Container, service: RoleService) -> list[RoleResponse]:
        """List all roles for this realm or client."""
        return to_role_list(await service.list_roles(container))

    @router.post("", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
    async def create_role(
        request: Request,
        response: Response,
        role_data: CreateRoleRequest,
        container: Container,
        service: RoleService,
    ) -> RoleResponse:
        """Create a new role for this realm or client."""
        role = await service.create_role(container, role_data.name, role_data.description)
        response.headers["Location"] = f"{request.url.path.rstrip('/')}/{role.name}"
        return RoleResponse.from_role(role)

    @router.get("/{role_name}", response_model=RoleResponse)
    async def get_role(role_name: str, container: Container, service: RoleService) -> RoleResponse:
        """Get a role by name."""
        return RoleResponse.from_role(await service.get_role(container, role_name))

    @router.put("/{role_name}", status_code=status.HTTP_204_NO_CONTENT)
    async def update_role(
        role_name: str,
        role_data: UpdateRoleRequest,
        container: Container,
        service: RoleService,
    ) -> None:
        """Update a role by name."""
        await service.update_role(
            container, role_name, role_data.description, new_name=role_data.name
        )

    @router.delete("/{role_name}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_role(role_name: str, container: Container, service: RoleService) -> None:
        """Delete a role by name."""
        await service.delete_role(container, role_name)

    @router.post("/{role_name}/composites", status_code=status.HTTP_204_NO_CONTENT)
    async def add_composites(
        role_name: str,
        roles: Annotated[list[RoleReference], Body()],
        container: Container,
        service: RoleService,
    ) -> None:
        """Add composites to a role."""
        await service.add_composites(container, role_name, [role.id for role in roles])

    @router.get("/{role_name}/composites", response_model=list[RoleResponse])
    async def get_composites(
        role_name: str, container: Container, service: RoleService
    ) -> list[RoleResponse]:
        """List a role's direct composites."""
        return to_role_list(await service.get_composites(container, role_name))

    @router.delete("/{role_name}/composites", status_code=status.HTTP_204_NO_CONTENT)
    async def remove_composites(
        role_name: str,
        roles: Annotated[list[RoleReference], Body()],
        container: Container,
        service: RoleService,
    ) -> None:
        """Remove roles from a role's composites."""
        await service.remove_composites(container, role_name, [role.id for role in roles])

    @router.get("/{role_name}/composites/realm", response_model=list[RoleResponse])
    async def get_realm_composites(
        role_name: str, container: Container, service: RoleService
    ) -> list[RoleResponse]:
        """List a role's direct composites that are realm roles."""
        return to_role_list(await service.get_realm_composites(container, role_name))

    @router.get("/{role_name}/composites/effective", response_model=list[RoleResponse])
    async def get_effective_composites(
        role_name: str, container: Container, service: RoleService
    ) -> list[RoleResponse]:
        """List every role reachable from a role through composites."""
        return to_role_list(await service.get_effective_composites(container, role_name))

    @router.get("/{role_name}/composites/client/{client_id}", response_model=list[RoleResponse])
    async def get_client_composites(
        role_name: str, client_id: str, container: Container, service: RoleService
    ) -> list[RoleResponse]:
        """List a role's direct composites owned by a client, by public client ID."""
        return to_role_list(await service.get_client_composites(container, role_name, client_id))

    @router.get("/{role_name}/composites/client-by-id/{id}", response_model=list[RoleResponse])
    async def get_client_composites_by_id(
        role_name: str, id: str, container: Container, service: RoleService
    ) -> list[RoleResponse]:
        """List a role's direct composites owned by a client, by internal client ID."""
        return to_role_list(
            await service.get_client_composites_by_id(container, role_name, id)
        )

    return router


realm_roles_router = build_roles_router(get_realm_container)
client_roles_router = build_roles_router(get_client_container)
