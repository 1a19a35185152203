"""Unit tests for mapping domain errors to HTTP responses."""

import pytest

from rolegraph.core.exceptions import (
    CyclicCompositionError,
    DuplicateNameError,
    ForbiddenError,
    NotFoundError,
    RoleGraphError,
    StoreUnavailableError,
)
from rolegraph.infrastructure.api.app import error_status


@pytest.mark.parametrize(
    "error, expected",
    [
        (NotFoundError("x"), 404),
        (DuplicateNameError("admin"), 409),
        (CyclicCompositionError("cycle"), 409),
        (ForbiddenError("no"), 403),
        (StoreUnavailableError("down"), 503),
        (RoleGraphError("other"), 400),
    ],
)
def test_error_status(error, expected):
    status_code, label = error_status(error)

    assert status_code == expected
    assert label


def test_duplicate_name_message():
    error = DuplicateNameError("admin", "demo")

    assert str(error) == "Role with name admin already exists in demo"
    assert error.name == "admin"
