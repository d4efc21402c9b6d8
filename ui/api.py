"""Thin HTTP client for the notes REST API.

All functions unwrap the ``{"success": ..., "data": ...}`` envelope and
return parsed JSON, or raise on failure.  Uses requests (synchronous) since
Streamlit reruns are synchronous.
"""

from __future__ import annotations

import os
from typing import Any
from urllib.parse import quote

import requests

BASE_URL = os.getenv("NOTES_API_URL", "http://localhost:3000")
_TIMEOUT = 10  # seconds


def _data(resp: requests.Response) -> Any:
    resp.raise_for_status()
    return resp.json()["data"]


def _note_url(note_id: str) -> str:
    return f"{BASE_URL}/api/notes/{quote(note_id, safe='')}"


def list_notes() -> list[dict[str, Any]]:
    """GET /api/notes — metadata for every note."""
    return _data(requests.get(f"{BASE_URL}/api/notes", timeout=_TIMEOUT))


def get_note(note_id: str) -> dict[str, Any] | None:
    """GET /api/notes/{id} — a full note, or None if it does not exist."""
    resp = requests.get(_note_url(note_id), timeout=_TIMEOUT)
    if resp.status_code == 404:
        return None
    return _data(resp)


def create_note(title: str, content: str, tags: list[str]) -> dict[str, Any]:
    """POST /api/notes — create a note."""
    resp = requests.post(
        f"{BASE_URL}/api/notes",
        json={"title": title, "content": content, "tags": tags},
        timeout=_TIMEOUT,
    )
    return _data(resp)


def update_note(note_id: str, **changes: Any) -> dict[str, Any] | None:
    """PUT /api/notes/{id} — update the given fields."""
    resp = requests.put(_note_url(note_id), json=changes, timeout=_TIMEOUT)
    if resp.status_code == 404:
        return None
    return _data(resp)


def delete_note(note_id: str) -> bool:
    """DELETE /api/notes/{id} — False if the note was already gone."""
    resp = requests.delete(_note_url(note_id), timeout=_TIMEOUT)
    if resp.status_code == 404:
        return False
    resp.raise_for_status()
    return True


def search_notes(query: str, tags: list[str] | None = None) -> list[dict[str, Any]]:
    """POST /api/notes/search — full notes matching text and all tags."""
    resp = requests.post(
        f"{BASE_URL}/api/notes/search",
        json={"query": query, "tags": tags or []},
        timeout=_TIMEOUT,
    )
    return _data(resp)


def get_tags() -> list[str]:
    """GET /api/tags — every tag in use, sorted."""
    return _data(requests.get(f"{BASE_URL}/api/tags", timeout=_TIMEOUT))


def get_stats() -> dict[str, Any]:
    """GET /api/stats — totals and recently updated notes."""
    return _data(requests.get(f"{BASE_URL}/api/stats", timeout=_TIMEOUT))


def get_health() -> dict[str, Any]:
    """GET /health — API health status."""
    resp = requests.get(f"{BASE_URL}/health", timeout=_TIMEOUT)
    resp.raise_for_status()
    return resp.json()
