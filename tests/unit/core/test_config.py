import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from rolegraph.core.config import Settings, get_settings


def test_settings_defaults():
    """Test that settings load with correct defaults."""
    get_settings.cache_clear()

    settings = Settings(_env_file=None)

    assert settings.app_name == "RoleGraph"
    assert settings.environment == "development"
    assert settings.api_prefix == "/admin"
    assert settings.port == 8080
    assert settings.composite_traversal_limit == 10_000
    assert settings.audit_include_representation is True
    assert settings.is_development is True
    assert settings.is_production is False


def test_settings_env_override():
    """Test that environment variables override defaults."""
    get_settings.cache_clear()

    with patch.dict(os.environ, {
        "ROLEGRAPH_ENVIRONMENT": "production",
        "ROLEGRAPH_API_PREFIX": "/api",
        "ROLEGRAPH_COMPOSITE_TRAVERSAL_LIMIT": "50",
        "ROLEGRAPH_AUDIT_INCLUDE_REPRESENTATION": "false",
    }):
        settings = Settings(_env_file=None)

        assert settings.is_production is True
        assert settings.api_prefix == "/api"
        assert settings.composite_traversal_limit == 50
        assert settings.audit_include_representation is False


def test_cors_origins_parsing():
    """Test CORS origins parsing from string."""
    settings = Settings(_env_file=None, cors_origins="http://a.test, http://b.test")

    assert settings.cors_origins == ["http://a.test", "http://b.test"]


@pytest.mark.parametrize("limit", [0, -5])
def test_traversal_limit_must_be_positive(limit):
    with pytest.raises(ValidationError) as exc_info:
        Settings(_env_file=None, composite_traversal_limit=limit)

    assert "composite_traversal_limit" in str(exc_info.value)


def test_sqlite_rejects_multiple_workers():
    with pytest.raises(ValidationError) as exc_info:
        Settings(_env_file=None, workers=4, database_url="sqlite+aiosqlite:///./x.db")

    assert "SQLite does not support multiple worker processes" in str(exc_info.value)


def test_get_settings_is_cached():
    get_settings.cache_clear()

    assert get_settings() is get_settings()
