"""Exceptions raised by role and composite operations."""


class RoleGraphError(Exception):
    """Base class for all role management errors."""
    pass


class NotFoundError(RoleGraphError):
    """Raised when a role, client or realm does not exist."""
    pass


class DuplicateNameError(RoleGraphError):
    """Raised when a create or rename collides with an existing role name."""

    def __init__(self, name: str, container_name: str | None = None):
        self.name = name
        self.container_name = container_name
        message = f"Role with name {name} already exists"
        if container_name:
            message = f"{message} in {container_name}"
        super().__init__(message)


class CyclicCompositionError(RoleGraphError):
    """Raised when composite edges would make a role include itself."""

    def __init__(self, message: str, role_id: str | None = None, child_id: str | None = None):
        self.role_id = role_id
        self.child_id = child_id
        super().__init__(message)


class ForbiddenError(RoleGraphError):
    """Raised by an authorization gate when the caller lacks a capability."""
    pass


class StoreUnavailableError(RoleGraphError):
    """Raised when the role store cannot complete a call."""
    pass
