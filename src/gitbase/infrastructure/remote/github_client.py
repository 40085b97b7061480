"""GitHub Contents API client.

Stores each file in a GitHub repository. The blob SHA returned by the API is
used as the version token; GitHub rejects a write whose ``sha`` no longer
matches the file on the branch.
"""

import base64
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ConfigDict

from gitbase.core.logging import get_logger
from gitbase.infrastructure.remote.base import (
    RemoteConflictError,
    RemoteContentClient,
    RemoteFile,
    RemoteNotFoundError,
    RemoteTransientError,
)

logger = get_logger(__name__)

GITHUB_JSON = "application/vnd.github+json"
GITHUB_RAW = "application/vnd.github.raw"
GITHUB_API_VERSION = "2022-11-28"


class GitHubContentSettings(BaseModel):
    """Configuration settings for the GitHub content client."""

    model_config = ConfigDict(from_attributes=True)

    owner: str
    repo: str
    token: str
    api_url: str = "https://api.github.com"
    timeout_seconds: float = 30.0


class GitHubContentClient(RemoteContentClient):
    """Remote content client backed by the GitHub Contents API."""

    def __init__(
        self,
        settings: GitHubContentSettings,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self._client = http_client
        self._owns_client = http_client is None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            headers = {
                "Accept": GITHUB_JSON,
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
            }
            if self.settings.token:
                headers["Authorization"] = f"Bearer {self.settings.token}"

            self._client = httpx.AsyncClient(
                base_url=self.settings.api_url.rstrip("/"),
                headers=headers,
                timeout=self.settings.timeout_seconds,
            )
        return self._client

    def _contents_url(self, path: str) -> str:
        return f"/repos/{self.settings.owner}/{self.settings.repo}/contents/{quote(path)}"

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])
        return f"HTTP {response.status_code}"

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._get_client().request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise RemoteTransientError(f"GitHub request failed: {str(e)}") from e

    async def get_file(self, path: str, ref: str) -> RemoteFile:
        url = self._contents_url(path)
        response = await self._request("GET", url, params={"ref": ref})

        if response.status_code == 404:
            raise RemoteNotFoundError(path)
        if response.status_code != 200:
            raise RemoteTransientError(
                f"Failed to fetch {path} from GitHub: {self._error_message(response)}",
                status_code=response.status_code,
            )

        data = response.json()
        if not isinstance(data, dict) or data.get("type", "file") != "file":
            raise RemoteTransientError(f"{path} is not a file")

        sha = data["sha"]
        if data.get("encoding") == "base64":
            return RemoteFile(content=base64.b64decode(data.get("content", "")), version_token=sha)

        # Files over 1MB come back without inline content
        raw = await self._request(
            "GET", url, params={"ref": ref}, headers={"Accept": GITHUB_RAW}
        )
        if raw.status_code != 200:
            raise RemoteTransientError(
                f"Failed to fetch raw content of {path}: {self._error_message(raw)}",
                status_code=raw.status_code,
            )
        return RemoteFile(content=raw.content, version_token=sha)

    async def put_file(
        self,
        path: str,
        content: bytes,
        branch: str,
        expected_version_token: str | None = None,
        message: str | None = None,
    ) -> str:
        body: dict[str, Any] = {
            "message": message or f"Update {path}",
            "content": base64.b64encode(content).decode("ascii"),
            "branch": branch,
        }
        if expected_version_token:
            body["sha"] = expected_version_token

        response = await self._request("PUT", self._contents_url(path), json=body)

        if response.status_code in (200, 201):
            return response.json()["content"]["sha"]

        detail = self._error_message(response)
        # 409 is a stale sha; 422 is a missing sha for a file that now exists
        if response.status_code == 409 or (
            response.status_code == 422 and "sha" in detail.lower()
        ):
            logger.info("GitHub rejected stale version token", path=path, status=response.status_code)
            raise RemoteConflictError(path, detail)

        raise RemoteTransientError(
            f"Failed to write {path} to GitHub: {detail}",
            status_code=response.status_code,
        )

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
