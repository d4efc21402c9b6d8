"""
Notes MCP Server

Exposes tools, resources and prompts for creating, reading, updating,
deleting and searching notes via the Model Context Protocol.  Runs over
stdio, so all logging goes to stderr.
"""

import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import ValidationError

from . import formatting
from .config import settings
from .models import NoteCreate, NoteSearch, NoteUpdate
from .storage import NotesStorage

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
)
logger = logging.getLogger("notes")

# ---------------------------------------------------------------------------
# MCP server + storage
# ---------------------------------------------------------------------------
storage = NotesStorage(settings.notes_dir)


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[None]:
    """Make sure the storage directory and index exist before serving."""
    await storage.initialize()
    logger.info("Notes storage ready at %s", storage.base_dir)
    yield


mcp = FastMCP("mcp-notes-server", lifespan=lifespan)


def _invalid(exc: ValidationError) -> ToolError:
    details = "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'arguments'}: {err['msg']}"
        for err in exc.errors()
    )
    return ToolError(f"Invalid arguments: {details}")


def _not_found(note_id: str) -> ToolError:
    return ToolError(f'Note with ID "{note_id}" not found.')


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


@mcp.tool()
async def create_note(title: str, content: str, tags: list[str] | None = None) -> str:
    """Create a new note with title, content, and optional tags.

    Args:
        title: The title of the note.
        content: The content of the note (supports markdown).
        tags: Optional tags to categorize the note.
    """
    try:
        payload = NoteCreate(title=title, content=content, tags=tags)
    except ValidationError as exc:
        raise _invalid(exc) from exc
    note = await storage.create_note(payload.title, payload.content, payload.tags)
    logger.info("Tool create_note invoked, id=%s", note.id)
    return formatting.format_created(note)


@mcp.tool()
async def get_note(id: str) -> str:
    """Get a specific note by ID.

    Args:
        id: The ID of the note to retrieve.
    """
    note = await storage.get_note(id)
    if note is None:
        raise _not_found(id)
    return formatting.format_note(note)


@mcp.tool()
async def update_note(
    id: str,
    title: str | None = None,
    content: str | None = None,
    tags: list[str] | None = None,
) -> str:
    """Update an existing note. Only the fields you pass are changed.

    Args:
        id: The ID of the note to update.
        title: New title (optional).
        content: New content (optional).
        tags: New tags (optional, replaces the existing list).
    """
    try:
        changes = NoteUpdate(title=title, content=content, tags=tags)
    except ValidationError as exc:
        raise _invalid(exc) from exc
    note = await storage.update_note(id, changes)
    if note is None:
        raise _not_found(id)
    logger.info("Tool update_note invoked, id=%s", id)
    return formatting.format_updated(note)


@mcp.tool()
async def delete_note(id: str) -> str:
    """Delete a note by ID.

    Args:
        id: The ID of the note to delete.
    """
    if not await storage.delete_note(id):
        raise _not_found(id)
    logger.info("Tool delete_note invoked, id=%s", id)
    return f'Note with ID "{id}" deleted successfully.'


@mcp.tool()
async def search_notes(query: str, tags: list[str] | None = None) -> str:
    """Search notes by query text and/or tags.

    The query is matched case-insensitively against titles and content;
    an empty query returns every note carrying all of the given tags.

    Args:
        query: Search query to match in title or content.
        tags: Only return notes that have all of these tags (optional).
    """
    params = NoteSearch(query=query, tags=tags)
    notes = await storage.search_notes(params.query, params.tags)
    logger.info("Tool search_notes invoked, query='%s', found=%d", query, len(notes))
    return formatting.format_search_results(notes)


@mcp.tool()
async def list_notes() -> str:
    """List all notes (titles, IDs and tags) in creation order."""
    return formatting.format_listing(await storage.list_notes())


@mcp.tool()
async def list_tags() -> str:
    """Get all unique tags used across all notes."""
    return formatting.format_tags(await storage.get_all_tags())


@mcp.tool()
async def health_check() -> dict:
    """Check whether the Notes server is healthy.

    Returns:
        Dictionary with server status, note count, and timestamp.
    """
    logger.info("Tool health_check invoked")
    return {
        "status": "healthy",
        "server": "mcp-notes-server",
        "total_notes": await storage.count(),
        "timestamp": datetime.now(UTC).isoformat(),
    }


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------


@mcp.resource(
    "notes://all",
    name="All Notes",
    description="List of all notes with metadata",
    mime_type="application/json",
)
async def all_notes_resource() -> str:
    notes = await storage.list_notes()
    return json.dumps([n.model_dump(by_alias=True) for n in notes], indent=2)


@mcp.resource("notes://{note_id}", name="Note", mime_type="text/markdown")
async def note_resource(note_id: str) -> str:
    """A single note rendered as markdown."""
    note = await storage.get_note(note_id)
    if note is None:
        raise ValueError(f'Note with ID "{note_id}" not found')
    return formatting.format_note(note, include_id=False)


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


@mcp.prompt()
def create_meeting_notes(meeting_title: str, attendees: str = "N/A") -> str:
    """Template for creating meeting notes."""
    return (
        "Create a meeting note with the following template:\n\n"
        f"Title: {meeting_title}\n\n"
        f"## Attendees\n{attendees}\n\n"
        "## Agenda\n\n## Discussion\n\n## Action Items\n\n## Next Steps"
    )


@mcp.prompt()
def create_code_snippet(language: str, description: str) -> str:
    """Template for saving a code snippet."""
    return (
        "Create a code snippet note:\n\n"
        f"Title: {description}\n\n"
        f"## Description\n{description}\n\n"
        f"## Code\n```{language}\n// Your code here\n```\n\n"
        f"Tags: code, {language}"
    )


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------


def main() -> None:
    logger.info("Starting Notes MCP server on stdio ...")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
