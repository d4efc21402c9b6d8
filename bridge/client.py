"""Async HTTP client the bridge uses to reach the notes REST API.

Absent notes come back as None / False; transport failures, timeouts and
unexpected status codes raise NotesApiError.
"""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

# Per-call timeouts (seconds); writes get the configured maximum.
LIST_TIMEOUT = 10.0
READ_TIMEOUT = 5.0


class NotesApiError(Exception):
    """The notes API could not be reached or returned an unexpected status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotesApiClient:
    """Thin async wrapper over the /api/notes endpoints."""

    def __init__(self, base_url: str, timeout: float = 15.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def base_url(self) -> str:
        return self._base_url

    async def connect(self) -> None:
        """Open the underlying connection pool."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url, timeout=self._timeout
            )
            logger.info("Notes API client using %s", self._base_url)

    async def close(self) -> None:
        """Close the connection pool."""
        if self._client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------
    # Notes endpoints
    # ------------------------------------------------------------------

    async def create_note(self, payload: dict[str, Any]) -> dict[str, Any]:
        resp = await self._request("POST", "/api/notes", json=payload)
        self._expect(resp, "create note")
        return resp.json()["data"]

    async def list_notes(self) -> list[dict[str, Any]]:
        resp = await self._request("GET", "/api/notes", timeout=LIST_TIMEOUT)
        self._expect(resp, "list notes")
        return resp.json()["data"]

    async def get_note(self, note_id: str) -> dict[str, Any] | None:
        resp = await self._request("GET", _note_path(note_id), timeout=READ_TIMEOUT)
        if resp.status_code == 404:
            return None
        self._expect(resp, "get note")
        return resp.json()["data"]

    async def search_notes(
        self, query: str, tags: list[str] | None = None
    ) -> list[dict[str, Any]]:
        resp = await self._request(
            "POST",
            "/api/notes/search",
            json={"query": query, "tags": tags or []},
            timeout=READ_TIMEOUT,
        )
        self._expect(resp, "search notes")
        return resp.json()["data"]

    async def update_note(
        self, note_id: str, changes: dict[str, Any]
    ) -> dict[str, Any] | None:
        resp = await self._request("PUT", _note_path(note_id), json=changes)
        if resp.status_code == 404:
            return None
        self._expect(resp, "update note")
        return resp.json()["data"]

    async def delete_note(self, note_id: str) -> bool:
        resp = await self._request("DELETE", _note_path(note_id))
        if resp.status_code == 404:
            return False
        self._expect(resp, "delete note")
        return True

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        json: Any = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        if self._client is None:
            await self.connect()
        url = f"{self._base_url}{path}"
        try:
            return await self._client.request(
                method, path, json=json, timeout=timeout or self._timeout
            )
        except httpx.TimeoutException as exc:
            raise NotesApiError(f"Request timeout: {url}") from exc
        except httpx.HTTPError as exc:
            raise NotesApiError(f"Notes API unreachable at {url}: {exc}") from exc

    @staticmethod
    def _expect(resp: httpx.Response, action: str) -> None:
        if resp.is_success:
            return
        logger.error("Notes API error on %s: %d %s", action, resp.status_code, resp.text)
        raise NotesApiError(
            f"Failed to {action}: {resp.status_code} {resp.text}",
            status_code=resp.status_code,
        )


def _note_path(note_id: str) -> str:
    return f"/api/notes/{quote(note_id, safe='')}"
