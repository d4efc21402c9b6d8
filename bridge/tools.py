"""Tool definitions and handlers for the HTTP/MCP bridge.

Each handler validates its arguments, calls the notes REST API and
returns an MCP ``result`` payload (a list of content blocks).  Protocol
level failures are raised as JsonRpcError.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, ValidationError

from bridge.client import NotesApiClient
from bridge.widgets import widget_url
from mcp_servers.notes.models import NoteCreate, NoteSearch, NoteUpdate

logger = logging.getLogger(__name__)

# JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
NOTE_NOT_FOUND = -32001


class JsonRpcError(Exception):
    """An error to be returned in the JSON-RPC ``error`` member."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


_TAGS_SCHEMA = {"type": "array", "items": {"type": "string"}}

TOOLS_DEFINITION: list[dict[str, Any]] = [
    {
        "name": "create_note",
        "description": "Create a new note with title, content, and optional tags",
        "inputSchema": {
            "type": "object",
            "properties": {
                "title": {"type": "string", "description": "The title of the note"},
                "content": {
                    "type": "string",
                    "description": "The content (supports markdown)",
                },
                "tags": {**_TAGS_SCHEMA, "description": "Optional tags"},
            },
            "required": ["title", "content"],
        },
    },
    {
        "name": "list_notes",
        "description": "List all notes",
        "inputSchema": {"type": "object", "properties": {}},
    },
    {
        "name": "get_note",
        "description": "Get a specific note by ID",
        "inputSchema": {
            "type": "object",
            "properties": {"id": {"type": "string", "description": "Note ID"}},
            "required": ["id"],
        },
    },
    {
        "name": "search_notes",
        "description": "Search notes by query and/or tags",
        "inputSchema": {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search query"},
                "tags": {**_TAGS_SCHEMA, "description": "Optional tags filter"},
            },
            "required": ["query"],
        },
    },
    {
        "name": "update_note",
        "description": "Update an existing note",
        "inputSchema": {
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Note ID"},
                "title": {"type": "string", "description": "New title (optional)"},
                "content": {
                    "type": "string",
                    "description": "New content (optional)",
                },
                "tags": {**_TAGS_SCHEMA, "description": "New tags (optional)"},
            },
            "required": ["id"],
        },
    },
    {
        "name": "delete_note",
        "description": "Delete a note by ID",
        "inputSchema": {
            "type": "object",
            "properties": {"id": {"type": "string", "description": "Note ID"}},
            "required": ["id"],
        },
    },
]


class ToolContext:
    """What a tool handler needs: the API client and the widget origin."""

    def __init__(self, client: NotesApiClient, widget_base_url: str | None = None) -> None:
        self.client = client
        self.widget_base_url = widget_base_url

    def content(self, text: str, widget: str | None = None, data: Any = None) -> dict:
        """Build a result with one text block and, if enabled, a widget link."""
        blocks: list[dict[str, Any]] = [{"type": "text", "text": text}]
        if widget and self.widget_base_url:
            blocks.append(
                {"type": "widget", "url": widget_url(self.widget_base_url, widget, data)}
            )
        return {"content": blocks}


def _parse(model: type[BaseModel], arguments: dict[str, Any]) -> Any:
    try:
        return model.model_validate(arguments)
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'arguments'}: {err['msg']}"
            for err in exc.errors()
        )
        raise JsonRpcError(INVALID_PARAMS, f"Invalid params: {details}") from exc


def _note_id(arguments: dict[str, Any]) -> str:
    note_id = arguments.get("id")
    if not isinstance(note_id, str) or not note_id:
        raise JsonRpcError(INVALID_PARAMS, "Invalid params: id is required")
    return note_id


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def create_note(ctx: ToolContext, arguments: dict[str, Any]) -> dict:
    payload = _parse(NoteCreate, arguments)
    note = await ctx.client.create_note(payload.model_dump(by_alias=True))
    suffix = f" ({', '.join(note['tags'])})" if note.get("tags") else ""
    return ctx.content(f'✓ Created note: "{note["title"]}"{suffix}', "note-card", note)


async def list_notes(ctx: ToolContext, arguments: dict[str, Any]) -> dict:
    notes = await ctx.client.list_notes()
    if not notes:
        return ctx.content("📭 No notes yet. Create your first note!")
    lines = "\n".join(f"- {n['title']} (ID: {n['id']})" for n in notes)
    return ctx.content(
        f"📚 Found {_plural(len(notes), 'note')}\n\n{lines}", "notes-list", notes
    )


async def get_note(ctx: ToolContext, arguments: dict[str, Any]) -> dict:
    note_id = _note_id(arguments)
    note = await ctx.client.get_note(note_id)
    if note is None:
        raise JsonRpcError(NOTE_NOT_FOUND, "Note not found")
    return ctx.content(
        f'📝 Note: "{note["title"]}"\n\n{note["content"]}', "note-detail", note
    )


async def search_notes(ctx: ToolContext, arguments: dict[str, Any]) -> dict:
    params = _parse(NoteSearch, arguments)
    notes = await ctx.client.search_notes(params.query, params.tags)
    if not notes:
        return ctx.content(f'🔍 No results found for "{params.query}"')
    lines = "\n".join(f"- {n['title']} (ID: {n['id']})" for n in notes)
    return ctx.content(
        f'🔍 Found {_plural(len(notes), "result")} for "{params.query}"\n\n{lines}',
        "notes-list",
        notes,
    )


async def update_note(ctx: ToolContext, arguments: dict[str, Any]) -> dict:
    note_id = _note_id(arguments)
    changes = _parse(NoteUpdate, {k: v for k, v in arguments.items() if k != "id"})
    note = await ctx.client.update_note(
        note_id, changes.model_dump(by_alias=True, exclude_none=True)
    )
    if note is None:
        raise JsonRpcError(NOTE_NOT_FOUND, "Note not found")
    return ctx.content(f'✓ Updated note: "{note["title"]}"', "note-card", note)


async def delete_note(ctx: ToolContext, arguments: dict[str, Any]) -> dict:
    note_id = _note_id(arguments)
    if not await ctx.client.delete_note(note_id):
        raise JsonRpcError(NOTE_NOT_FOUND, "Note not found")
    return ctx.content("✓ Note deleted successfully")


HANDLERS: dict[str, Callable[[ToolContext, dict[str, Any]], Awaitable[dict]]] = {
    "create_note": create_note,
    "list_notes": list_notes,
    "get_note": get_note,
    "search_notes": search_notes,
    "update_note": update_note,
    "delete_note": delete_note,
}


async def call_tool(ctx: ToolContext, name: str, arguments: dict[str, Any]) -> dict:
    """Dispatch a tools/call request to its handler."""
    handler = HANDLERS.get(name)
    if handler is None:
        raise JsonRpcError(METHOD_NOT_FOUND, f"Unknown tool: {name}")
    logger.info("Tool %s invoked", name)
    return await handler(ctx, arguments)
