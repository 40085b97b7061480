import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from gitbase.core.config import DEFAULT_SEED_COLLECTIONS, Settings, get_settings
from gitbase.domain.services.retry_policy import RetryPolicy


def test_settings_defaults():
    """Test that settings load with correct defaults."""
    get_settings.cache_clear()

    with patch.dict(os.environ, {}, clear=True):
        settings = Settings(_env_file=None)

    assert settings.environment == "development"
    assert settings.github_branch == "main"
    assert settings.base_path == "db"
    assert settings.file_extension == "json"
    assert settings.cache_ttl_seconds == 30
    assert settings.write_max_attempts == 3
    assert settings.session_ttl_hours == 24
    assert settings.enforce_session_expiry is False
    assert settings.seed_collections == DEFAULT_SEED_COLLECTIONS
    assert settings.is_development is True
    assert settings.is_production is False


def test_settings_env_override():
    """Test that environment variables override defaults."""
    get_settings.cache_clear()

    with patch.dict(os.environ, {
        "GITBASE_GITHUB_OWNER": "acme",
        "GITBASE_GITHUB_REPO": "sites-db",
        "GITBASE_GITHUB_BRANCH": "data",
        "GITBASE_ENVIRONMENT": "production",
        "GITBASE_WRITE_MAX_ATTEMPTS": "5",
    }):
        settings = Settings(_env_file=None)

    assert settings.github_owner == "acme"
    assert settings.github_repo == "sites-db"
    assert settings.github_branch == "data"
    assert settings.write_max_attempts == 5
    assert settings.is_production is True


def test_seed_collections_parsing():
    """Test seed collections parsing from a JSON env value and a CSV string."""
    with patch.dict(os.environ, {"GITBASE_SEED_COLLECTIONS": '["users", "pages"]'}):
        settings = Settings(_env_file=None)
        assert settings.seed_collections == ["users", "pages"]

    settings = Settings(_env_file=None, seed_collections="users, websites,,pages")
    assert settings.seed_collections == ["users", "websites", "pages"]


def test_path_normalization():
    settings = Settings(_env_file=None, base_path="/data/db/", file_extension=".json")

    assert settings.base_path == "data/db"
    assert settings.file_extension == "json"


def test_write_max_attempts_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, write_max_attempts=0)


def test_retry_policy_built_from_settings():
    settings = Settings(_env_file=None, write_max_attempts=4, write_backoff_seconds=0.25)

    policy = settings.retry_policy()

    assert policy == RetryPolicy(max_attempts=4, base_delay=0.25)
    assert policy.backoff(2) == 0.5


def test_get_settings_is_cached():
    get_settings.cache_clear()

    assert get_settings() is get_settings()
