"""Construction of collection stores from settings."""

from gitbase.core.config import Settings, get_settings
from gitbase.core.logging import get_logger
from gitbase.infrastructure.persistence.collection_store import CollectionStore
from gitbase.infrastructure.remote.base import RemoteContentClient
from gitbase.infrastructure.remote.github_client import (
    GitHubContentClient,
    GitHubContentSettings,
)

logger = get_logger(__name__)


def create_remote_client(settings: Settings | None = None) -> GitHubContentClient:
    """Build the GitHub content client from settings.

    Raises:
        ValueError: If the repository owner or name is not configured.
    """
    settings = settings or get_settings()
    if not settings.github_owner or not settings.github_repo:
        raise ValueError(
            "GITBASE_GITHUB_OWNER and GITBASE_GITHUB_REPO must be set to use the GitHub backend"
        )

    return GitHubContentClient(
        GitHubContentSettings(
            owner=settings.github_owner,
            repo=settings.github_repo,
            token=settings.github_token,
            api_url=settings.github_api_url,
            timeout_seconds=settings.github_timeout_seconds,
        )
    )


def create_collection_store(
    settings: Settings | None = None,
    client: RemoteContentClient | None = None,
) -> CollectionStore:
    """Build a collection store.

    Args:
        settings: Settings to use. Loaded from the environment if omitted.
        client: Remote client to use. A GitHub client is built if omitted.

    Returns:
        CollectionStore: A new, independent store instance.
    """
    settings = settings or get_settings()
    client = client or create_remote_client(settings)

    logger.info(
        "Collection store created",
        backend=type(client).__name__,
        branch=settings.github_branch,
        base_path=settings.base_path,
    )
    return CollectionStore(
        client,
        branch=settings.github_branch,
        base_path=settings.base_path,
        file_extension=settings.file_extension,
        cache_ttl_seconds=settings.cache_ttl_seconds,
        retry_policy=settings.retry_policy(),
        seed_collections=settings.seed_collections,
    )

