"""Base abstractions for remote content clients.

A remote content client stores whole files at paths and offers a
compare-and-swap write: the write succeeds only if the caller's expected
version token still matches the stored document.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from gitbase.core.exceptions import ConflictError, NotFoundError, TransientError


class RemoteNotFoundError(NotFoundError):
    """Raised when a file does not exist at the requested path."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"File not found: {path}")


class RemoteConflictError(ConflictError):
    """Raised when the expected version token is stale."""

    def __init__(self, path: str, detail: str | None = None) -> None:
        self.path = path
        message = f"Version precondition failed for {path}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(path, message=message)


class RemoteTransientError(TransientError):
    """Raised for remote failures that are neither absence nor conflict."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


@dataclass(slots=True)
class RemoteFile:
    """Transport object returned by remote clients for file retrieval."""

    content: bytes
    version_token: str


class RemoteContentClient(ABC):
    """Abstract base class for remote content clients."""

    @abstractmethod
    async def get_file(self, path: str, ref: str) -> RemoteFile:
        """Fetch a file and its version token.

        Raises:
            RemoteNotFoundError: If no file exists at ``path``.
            RemoteTransientError: For any other failure.
        """
        ...

    @abstractmethod
    async def put_file(
        self,
        path: str,
        content: bytes,
        branch: str,
        expected_version_token: str | None = None,
        message: str | None = None,
    ) -> str:
        """Create or overwrite a file and return its new version token.

        When ``expected_version_token`` is given the write only succeeds if it
        matches the stored document.

        Raises:
            RemoteConflictError: If the precondition failed.
            RemoteTransientError: For any other failure.
        """
        ...

    async def aclose(self) -> None:
        """Release any network resources held by the client."""
        return None
