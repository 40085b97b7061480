"""Remote content clients."""

from gitbase.infrastructure.remote.base import (
    RemoteConflictError,
    RemoteContentClient,
    RemoteFile,
    RemoteNotFoundError,
    RemoteTransientError,
)
from gitbase.infrastructure.remote.github_client import (
    GitHubContentClient,
    GitHubContentSettings,
)
from gitbase.infrastructure.remote.memory_client import InMemoryContentClient

__all__ = [
    "GitHubContentClient",
    "GitHubContentSettings",
    "InMemoryContentClient",
    "RemoteConflictError",
    "RemoteContentClient",
    "RemoteFile",
    "RemoteNotFoundError",
    "RemoteTransientError",
]
