"""Unit tests for GitHubContentClient."""

import base64
import json

import httpx
import pytest

from gitbase.infrastructure.remote import (
    GitHubContentClient,
    GitHubContentSettings,
    RemoteConflictError,
    RemoteNotFoundError,
    RemoteTransientError,
)

CONTENTS_PATH = "/repos/acme/sites-db/contents/db/widgets.json"


@pytest.fixture
def github_settings():
    return GitHubContentSettings(owner="acme", repo="sites-db", token="test-token")


def make_client(github_settings, handler):
    http_client = httpx.AsyncClient(
        base_url="https://api.github.com",
        transport=httpx.MockTransport(handler),
    )
    return GitHubContentClient(github_settings, http_client=http_client)


def file_payload(content: bytes, sha: str = "abc123") -> dict:
    return {
        "type": "file",
        "encoding": "base64",
        "sha": sha,
        "content": base64.b64encode(content).decode("ascii"),
    }


class TestGetFile:
    @pytest.mark.asyncio
    async def test_decodes_base64_content(self, github_settings):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=file_payload(b'[{"id": "a"}]', sha="s1"))

        client = make_client(github_settings, handler)

        result = await client.get_file("db/widgets.json", "main")

        assert result.content == b'[{"id": "a"}]'
        assert result.version_token == "s1"
        assert seen[0].url.path == CONTENTS_PATH
        assert seen[0].url.params["ref"] == "main"

    @pytest.mark.asyncio
    async def test_large_file_fetched_raw(self, github_settings):
        def handler(request):
            if request.headers["Accept"] == "application/vnd.github.raw":
                return httpx.Response(200, content=b"[]")
            return httpx.Response(200, json={"type": "file", "encoding": "none", "sha": "big", "content": ""})

        client = make_client(github_settings, handler)

        result = await client.get_file("db/widgets.json", "main")

        assert result.content == b"[]"
        assert result.version_token == "big"

    @pytest.mark.asyncio
    async def test_404_raises_not_found(self, github_settings):
        client = make_client(github_settings, lambda request: httpx.Response(404, json={"message": "Not Found"}))

        with pytest.raises(RemoteNotFoundError):
            await client.get_file("db/widgets.json", "main")

    @pytest.mark.asyncio
    async def test_server_error_raises_transient(self, github_settings):
        client = make_client(github_settings, lambda request: httpx.Response(502, text="Bad Gateway"))

        with pytest.raises(RemoteTransientError) as exc_info:
            await client.get_file("db/widgets.json", "main")

        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_directory_raises_transient(self, github_settings):
        client = make_client(github_settings, lambda request: httpx.Response(200, json=[{"type": "file"}]))

        with pytest.raises(RemoteTransientError):
            await client.get_file("db", "main")

    @pytest.mark.asyncio
    async def test_network_error_raises_transient(self, github_settings):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(github_settings, handler)

        with pytest.raises(RemoteTransientError):
            await client.get_file("db/widgets.json", "main")


class TestPutFile:
    @pytest.mark.asyncio
    async def test_sends_content_branch_and_sha(self, github_settings):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"content": {"sha": "s2"}})

        client = make_client(github_settings, handler)

        token = await client.put_file("db/widgets.json", b"[]", "main", "s1", message="Update widgets")

        assert token == "s2"
        assert bodies[0] == {
            "message": "Update widgets",
            "content": base64.b64encode(b"[]").decode("ascii"),
            "branch": "main",
            "sha": "s1",
        }

    @pytest.mark.asyncio
    async def test_create_omits_sha(self, github_settings):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(201, json={"content": {"sha": "s1"}})

        client = make_client(github_settings, handler)

        assert await client.put_file("db/widgets.json", b"[]", "main") == "s1"
        assert "sha" not in bodies[0]

    @pytest.mark.asyncio
    async def test_409_raises_conflict(self, github_settings):
        client = make_client(
            github_settings,
            lambda request: httpx.Response(409, json={"message": "db/widgets.json does not match s1"}),
        )

        with pytest.raises(RemoteConflictError):
            await client.put_file("db/widgets.json", b"[]", "main", "s1")

    @pytest.mark.asyncio
    async def test_422_missing_sha_raises_conflict(self, github_settings):
        client = make_client(
            github_settings,
            lambda request: httpx.Response(422, json={"message": "Invalid request.\n\n\"sha\" wasn't supplied."}),
        )

        with pytest.raises(RemoteConflictError):
            await client.put_file("db/widgets.json", b"[]", "main")

    @pytest.mark.asyncio
    async def test_other_422_raises_transient(self, github_settings):
        client = make_client(
            github_settings,
            lambda request: httpx.Response(422, json={"message": "Invalid branch name"}),
        )

        with pytest.raises(RemoteTransientError):
            await client.put_file("db/widgets.json", b"[]", "main")

    @pytest.mark.asyncio
    async def test_unauthorized_raises_transient(self, github_settings):
        client = make_client(github_settings, lambda request: httpx.Response(401, json={"message": "Bad credentials"}))

        with pytest.raises(RemoteTransientError, match="Bad credentials"):
            await client.put_file("db/widgets.json", b"[]", "main")


class TestClientLifecycle:
    def test_default_client_sends_auth_headers(self, github_settings):
        client = GitHubContentClient(github_settings)

        http_client = client._get_client()

        assert http_client.headers["Authorization"] == "Bearer test-token"
        assert http_client.headers["Accept"] == "application/vnd.github+json"
        assert str(http_client.base_url).rstrip("/") == "https://api.github.com"

    def test_no_auth_header_without_token(self):
        client = GitHubContentClient(GitHubContentSettings(owner="acme", repo="sites-db", token=""))

        assert "Authorization" not in client._get_client().headers

    @pytest.mark.asyncio
    async def test_aclose_leaves_injected_client_open(self, github_settings):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
        client = GitHubContentClient(github_settings, http_client=http_client)

        await client.aclose()

        assert http_client.is_closed is False
        await http_client.aclose()

    @pytest.mark.asyncio
    async def test_aclose_closes_owned_client(self, github_settings):
        client = GitHubContentClient(github_settings)
        http_client = client._get_client()

        await client.aclose()

        assert http_client.is_closed is True
