"""Role API schemas for request/response validation."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rolegraph.domain.entities.role import Role


def _validate_name(v: str) -> str:
    if not v or not v.strip():
        raise ValueError("Role name cannot be empty")
    return v.strip()


class CreateRoleRequest(BaseModel):
    """Request schema for creating a role.

    Attributes:
        name: Role name (e.g., 'editor', 'viewer').
        description: Optional description of the role's purpose.
    """

    name: str = Field(..., max_length=255)
    description: str | None = Field(None, max_length=255)

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        """Validate that name is not empty."""
        return _validate_name(v)


class UpdateRoleRequest(BaseModel):
    """Request schema for updating a role.

    Omitting ``name`` keeps the current name.
    """

    name: str | None = Field(None, max_length=255)
    description: str | None = Field(None, max_length=255)

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str | None) -> str | None:
        """Validate that a submitted name is not empty."""
        if v is None:
            return v
        return _validate_name(v)


class RoleReference(BaseModel):
    """Reference to an existing role, by ID, in composite requests."""

    id: str = Field(..., min_length=1, description="Role ID")
    name: str | None = Field(None, description="Role name (informational)")


class RoleResponse(BaseModel):
    """Response schema for a role."""

    id: str
    name: str
    description: str | None = None
    composite: bool
    client_role: bool
    container_id: str

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_role(cls, role: Role) -> "RoleResponse":
        return cls(
            id=role.id,
            name=role.name,
            description=role.description,
            composite=role.composite,
            client_role=role.client_role,
            container_id=role.container_id,
        )


def to_role_list(roles: set[Role] | list[Role]) -> list[RoleResponse]:
    """Convert roles to responses ordered by name."""
    return [RoleResponse.from_role(role) for role in sorted(roles, key=lambda r: (r.name, r.id))]
