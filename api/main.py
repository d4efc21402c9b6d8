"""FastAPI application for the notes REST API (dashboard backend).

Endpoints:
  GET    /api/notes          — List all notes (metadata only)
  GET    /api/notes/{id}     — Get a specific note
  POST   /api/notes          — Create a new note
  PUT    /api/notes/{id}     — Update an existing note
  DELETE /api/notes/{id}     — Delete a note
  POST   /api/notes/search   — Search notes by text and/or tags
  GET    /api/tags           — All unique tags
  GET    /api/stats          — Totals and most recently updated notes
  GET    /health             — Service health
  GET    /metrics            — Prometheus metrics

Every /api response uses the envelope {"success": bool, "data" | "error" | "message"}.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from api.metrics import NOTE_OPERATIONS, NOTES_TOTAL
from api.middleware import MetricsMiddleware
from mcp_servers.notes.config import settings
from mcp_servers.notes.models import NoteCreate, NoteSearch, NoteUpdate
from mcp_servers.notes.storage import NotesStorage, StorageError

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
)
logger = logging.getLogger(__name__)

# --- Global instances ---
storage = NotesStorage(settings.notes_dir)

RECENT_NOTES = 5


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: make sure the storage directory and index exist."""
    await storage.initialize()
    logger.info("Notes API ready, storage at %s", storage.base_dir)
    yield
    logger.info("Notes API shut down.")


app = FastAPI(title="Notes API", version="1.0.0", lifespan=lifespan)

app.add_middleware(MetricsMiddleware, app_name="api")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Envelope helpers ---


def _ok(data: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": True, "data": jsonable_encoder(data)},
    )


def _fail(status_code: int, error: str, **extra: Any) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, **extra},
    )


def _not_found(operation: str, note_id: str) -> JSONResponse:
    logger.info("Note not found for %s: %s", operation, note_id)
    NOTE_OPERATIONS.labels(operation=operation, status="not_found").inc()
    return _fail(404, "Note not found")


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed request bodies are a 400 with the validation details."""
    logger.warning("Validation error on %s %s", request.method, request.url.path)
    NOTE_OPERATIONS.labels(operation="request", status="invalid").inc()
    return _fail(400, "Validation error", details=jsonable_encoder(exc.errors()))


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    """Storage failures surface as 500 with the underlying message."""
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    NOTE_OPERATIONS.labels(operation="request", status="error").inc()
    return _fail(500, str(exc))


# --- Endpoints ---


@app.get("/api/notes")
async def list_notes() -> JSONResponse:
    """List all notes (metadata only)."""
    notes = await storage.list_notes()
    NOTES_TOTAL.set(len(notes))
    NOTE_OPERATIONS.labels(operation="list", status="ok").inc()
    logger.info("Retrieved %d notes", len(notes))
    return _ok(notes)


@app.get("/api/notes/{note_id}")
async def get_note(note_id: str) -> JSONResponse:
    """Get a specific note with its content."""
    note = await storage.get_note(note_id)
    if note is None:
        return _not_found("get", note_id)
    NOTE_OPERATIONS.labels(operation="get", status="ok").inc()
    return _ok(note)


@app.post("/api/notes")
async def create_note(payload: NoteCreate) -> JSONResponse:
    """Create a new note."""
    note = await storage.create_note(payload.title, payload.content, payload.tags)
    NOTE_OPERATIONS.labels(operation="create", status="ok").inc()
    logger.info("Created note '%s' %s", note.title, note.tags)
    return _ok(note, status_code=201)


@app.put("/api/notes/{note_id}")
async def update_note(note_id: str, changes: NoteUpdate) -> JSONResponse:
    """Update the supplied fields of an existing note."""
    note = await storage.update_note(note_id, changes)
    if note is None:
        return _not_found("update", note_id)
    NOTE_OPERATIONS.labels(operation="update", status="ok").inc()
    logger.info("Updated note '%s'", note.title)
    return _ok(note)


@app.delete("/api/notes/{note_id}")
async def delete_note(note_id: str) -> JSONResponse:
    """Delete a note."""
    if not await storage.delete_note(note_id):
        return _not_found("delete", note_id)
    NOTE_OPERATIONS.labels(operation="delete", status="ok").inc()
    return JSONResponse({"success": True, "message": "Note deleted successfully"})


@app.post("/api/notes/search")
async def search_notes(params: NoteSearch) -> JSONResponse:
    """Search notes by text (title or content) and/or required tags."""
    notes = await storage.search_notes(params.query, params.tags)
    NOTE_OPERATIONS.labels(operation="search", status="ok").inc()
    logger.info("Search '%s' %s found %d notes", params.query, params.tags, len(notes))
    return _ok(notes)


@app.get("/api/tags")
async def list_tags() -> JSONResponse:
    """All unique tags, sorted."""
    tags = await storage.get_all_tags()
    NOTE_OPERATIONS.labels(operation="tags", status="ok").inc()
    return _ok(tags)


@app.get("/api/stats")
async def stats() -> JSONResponse:
    """Note and tag totals plus the most recently updated notes."""
    notes = await storage.list_notes()
    tags = await storage.get_all_tags()
    recent = sorted(notes, key=lambda n: n.updated_at, reverse=True)[:RECENT_NOTES]
    NOTES_TOTAL.set(len(notes))
    return _ok(
        {
            "totalNotes": len(notes),
            "totalTags": len(tags),
            "recentNotes": recent,
        }
    )


@app.get("/health")
async def health() -> dict[str, Any]:
    """Check that the store is readable."""
    return {
        "status": "healthy",
        "server": "notes-api",
        "total_notes": await storage.count(),
        "storage": str(storage.base_dir),
        "timestamp": datetime.now(UTC).isoformat(),
    }


@app.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


def main() -> None:
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    main()
