"""Unit tests for bridge.client — the async notes REST API client."""

from __future__ import annotations

import json

import httpx
import pytest

from bridge.client import NotesApiClient, NotesApiError

BASE_URL = "http://notes-api.test"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_client(handler) -> NotesApiClient:
    """Create a NotesApiClient whose transport is served by *handler*."""
    client = NotesApiClient(BASE_URL, timeout=2)
    client._client = httpx.AsyncClient(
        base_url=BASE_URL, transport=httpx.MockTransport(handler)
    )
    return client


def _ok(data, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json={"success": True, "data": data})


def _not_found() -> httpx.Response:
    return httpx.Response(404, json={"success": False, "error": "Note not found"})


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class TestRequests:
    @pytest.mark.asyncio
    async def test_create_posts_payload(self):
        """create_note POSTs the payload and unwraps the envelope."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return _ok({"id": "n1", "title": "T"}, status_code=201)

        client = _make_client(handler)
        note = await client.create_note({"title": "T", "content": "", "tags": []})

        assert note == {"id": "n1", "title": "T"}
        assert seen == {
            "method": "POST",
            "path": "/api/notes",
            "body": {"title": "T", "content": "", "tags": []},
        }

    @pytest.mark.asyncio
    async def test_list(self):
        client = _make_client(lambda request: _ok([{"id": "a"}, {"id": "b"}]))
        assert [n["id"] for n in await client.list_notes()] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_search_sends_query_and_tags(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return _ok([])

        client = _make_client(handler)
        assert await client.search_notes("milk") == []
        assert seen == {"path": "/api/notes/search", "body": {"query": "milk", "tags": []}}

    @pytest.mark.asyncio
    async def test_update_uses_put(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["body"] = json.loads(request.content)
            return _ok({"id": "n1", "title": "New"})

        client = _make_client(handler)
        note = await client.update_note("n1", {"title": "New"})
        assert note["title"] == "New"
        assert seen == {"method": "PUT", "body": {"title": "New"}}

    @pytest.mark.asyncio
    async def test_id_is_path_escaped(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["raw_path"] = request.url.raw_path
            return _not_found()

        client = _make_client(handler)
        await client.get_note("../admin")
        assert seen["raw_path"] == b"/api/notes/..%2Fadmin"


# ---------------------------------------------------------------------------
# Not found
# ---------------------------------------------------------------------------


class TestNotFound:
    @pytest.mark.asyncio
    async def test_get_returns_none(self):
        client = _make_client(lambda request: _not_found())
        assert await client.get_note("missing") is None

    @pytest.mark.asyncio
    async def test_update_returns_none(self):
        client = _make_client(lambda request: _not_found())
        assert await client.update_note("missing", {"title": "X"}) is None

    @pytest.mark.asyncio
    async def test_delete_returns_false(self):
        client = _make_client(lambda request: _not_found())
        assert await client.delete_note("missing") is False

    @pytest.mark.asyncio
    async def test_delete_success(self):
        client = _make_client(
            lambda request: httpx.Response(200, json={"success": True, "message": "ok"})
        )
        assert await client.delete_note("n1") is True


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestFailures:
    @pytest.mark.asyncio
    async def test_server_error_raises(self):
        client = _make_client(
            lambda request: httpx.Response(500, json={"success": False, "error": "disk"})
        )
        with pytest.raises(NotesApiError) as exc_info:
            await client.list_notes()
        assert exc_info.value.status_code == 500
        assert "Failed to list notes" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_timeout_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        client = _make_client(handler)
        with pytest.raises(NotesApiError, match="Request timeout"):
            await client.get_note("n1")

    @pytest.mark.asyncio
    async def test_connection_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = _make_client(handler)
        with pytest.raises(NotesApiError, match="unreachable"):
            await client.list_notes()


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_connect_and_close(self):
        client = NotesApiClient(BASE_URL + "/")
        assert client.base_url == BASE_URL
        await client.connect()
        assert client._client is not None
        await client.close()
        assert client._client is None
