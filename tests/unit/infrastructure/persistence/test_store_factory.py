"""Unit tests for the collection store factory."""

import pytest

from gitbase.core.config import Settings
from gitbase.infrastructure.persistence import create_collection_store, create_remote_client
from gitbase.infrastructure.remote import GitHubContentClient, InMemoryContentClient


def test_create_remote_client_from_settings(settings):
    client = create_remote_client(settings)

    assert isinstance(client, GitHubContentClient)
    assert client.settings.owner == "acme"
    assert client.settings.repo == "sites-db"
    assert client.settings.token == "test-token"


def test_create_remote_client_requires_repository():
    settings = Settings(_env_file=None, github_owner="", github_repo="")

    with pytest.raises(ValueError, match="GITBASE_GITHUB_OWNER"):
        create_remote_client(settings)


@pytest.mark.asyncio
async def test_create_collection_store_applies_settings():
    settings = Settings(
        _env_file=None,
        github_branch="content",
        base_path="/data/",
        file_extension=".json",
        cache_ttl_seconds=5,
        write_max_attempts=5,
        write_backoff_seconds=0.1,
        seed_collections=["users", "websites"],
    )
    remote = InMemoryContentClient()

    store = create_collection_store(settings, client=remote)

    assert store.client is remote
    assert store.branch == "content"
    assert store.collection_path("users") == "data/users.json"
    assert store.cache.ttl_seconds == 5
    assert store.retry_policy.max_attempts == 5
    assert store.retry_policy.base_delay == 0.1
    assert store.seed_collections == ["users", "websites"]
    await store.aclose()


@pytest.mark.asyncio
async def test_each_call_returns_independent_store(settings):
    remote = InMemoryContentClient()

    first = create_collection_store(settings, client=remote)
    second = create_collection_store(settings, client=remote)

    assert first is not second
    assert first.cache is not second.cache
    await first.aclose()
    await second.aclose()
