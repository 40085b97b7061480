"""In-memory remote content client.

Behaves like the GitHub client, including compare-and-swap writes, but keeps
files in a dictionary. Useful for tests and for running without network
access. Version tokens are SHA-1 digests of the content.
"""

import asyncio
import hashlib

from gitbase.infrastructure.remote.base import (
    RemoteConflictError,
    RemoteContentClient,
    RemoteFile,
    RemoteNotFoundError,
)


class InMemoryContentClient(RemoteContentClient):
    """Remote content client storing files in process memory.

    Attributes:
        latency: Seconds to sleep inside every call. Every call yields to the
            event loop at least once so concurrent callers interleave.
        get_calls: Paths passed to ``get_file``, in call order.
        put_calls: Paths passed to ``put_file``, in call order.
    """

    def __init__(self, latency: float = 0.0) -> None:
        self.latency = latency
        self._files: dict[tuple[str, str], RemoteFile] = {}
        self.get_calls: list[str] = []
        self.put_calls: list[str] = []
        self.messages: list[str] = []

    @staticmethod
    def compute_version_token(content: bytes) -> str:
        return hashlib.sha1(content).hexdigest()

    async def _pause(self) -> None:
        await asyncio.sleep(self.latency)

    async def get_file(self, path: str, ref: str) -> RemoteFile:
        self.get_calls.append(path)
        await self._pause()
        stored = self._files.get((ref, path))
        if stored is None:
            raise RemoteNotFoundError(path)
        return RemoteFile(content=stored.content, version_token=stored.version_token)

    async def put_file(
        self,
        path: str,
        content: bytes,
        branch: str,
        expected_version_token: str | None = None,
        message: str | None = None,
    ) -> str:
        self.put_calls.append(path)
        await self._pause()

        current = self._files.get((branch, path))
        if current is not None:
            if expected_version_token is None:
                raise RemoteConflictError(path, "sha wasn't supplied")
            if expected_version_token != current.version_token:
                raise RemoteConflictError(path, "does not match")
        elif expected_version_token is not None:
            raise RemoteConflictError(path, "file no longer exists")

        token = self.compute_version_token(content)
        self._files[(branch, path)] = RemoteFile(content=bytes(content), version_token=token)
        self.messages.append(message or f"Update {path}")
        return token

    def seed(self, path: str, content: bytes, branch: str = "main") -> str:
        """Write a file directly, bypassing the version check."""
        token = self.compute_version_token(content)
        self._files[(branch, path)] = RemoteFile(content=bytes(content), version_token=token)
        return token

    def read(self, path: str, branch: str = "main") -> bytes | None:
        """Return the stored bytes of a file without recording a call."""
        stored = self._files.get((branch, path))
        return stored.content if stored else None

    def paths(self, branch: str = "main") -> list[str]:
        return sorted(path for (ref, path) in self._files if ref == branch)
