"""Pytest configuration for all tests."""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from argon2 import PasswordHasher

from gitbase.core.config import Settings
from gitbase.domain.services.retry_policy import RetryPolicy
from gitbase.infrastructure.auth.password_hasher import CredentialHasher
from gitbase.infrastructure.persistence.collection_store import CollectionStore
from gitbase.infrastructure.remote.memory_client import InMemoryContentClient


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from any .env file, with zero write backoff."""
    return Settings(
        _env_file=None,
        environment="testing",
        github_owner="acme",
        github_repo="sites-db",
        github_token="test-token",
        write_backoff_seconds=0,
    )


@pytest.fixture
def remote() -> InMemoryContentClient:
    return InMemoryContentClient()


@pytest.fixture
def retry_policy() -> RetryPolicy:
    return RetryPolicy(max_attempts=3, base_delay=0)


@pytest_asyncio.fixture
async def store(
    remote: InMemoryContentClient, retry_policy: RetryPolicy
) -> AsyncGenerator[CollectionStore, None]:
    """A collection store over the in-memory client."""
    collection_store = CollectionStore(remote, retry_policy=retry_policy)
    yield collection_store
    await collection_store.aclose()


@pytest.fixture
def fast_hasher() -> CredentialHasher:
    """Argon2 hasher with minimal cost parameters to keep tests fast."""
    return CredentialHasher(PasswordHasher(time_cost=1, memory_cost=8, parallelism=1))
