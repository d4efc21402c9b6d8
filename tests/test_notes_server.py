"""Tests for the Notes MCP server.

Unit tests call the tool, resource and prompt functions directly against a
temp-directory store, plus integration tests that start the server as a
stdio subprocess and exercise it through the MCP client SDK.
"""

import json
import os
import sys
from pathlib import Path

import anyio
import pytest
import pytest_asyncio
from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client
from mcp.server.fastmcp.exceptions import ToolError

from mcp_servers.notes import server
from mcp_servers.notes.storage import NotesStorage

PROJECT_ROOT = Path(__file__).resolve().parent.parent
SERVER_MODULE = "mcp_servers.notes.server"


@pytest_asyncio.fixture
async def store(tmp_path: Path, monkeypatch) -> NotesStorage:
    """Point the server at a fresh store under tmp_path."""
    s = NotesStorage(tmp_path / "notes")
    await s.initialize()
    monkeypatch.setattr(server, "storage", s)
    return s


# ===================================================================
# UNIT TESTS: tools
# ===================================================================


class TestCreateNote:
    @pytest.mark.asyncio
    async def test_success(self, store: NotesStorage) -> None:
        text = await server.create_note("Python tips", "Use comprehensions", ["python"])
        assert text.startswith("Note created successfully!")
        assert "Title: Python tips" in text
        assert "Tags: python" in text
        notes = await store.list_notes()
        assert len(notes) == 1
        assert f"ID: {notes[0].id}" in text

    @pytest.mark.asyncio
    async def test_without_tags(self, store: NotesStorage) -> None:
        text = await server.create_note("Plain", "")
        assert "Tags: none" in text
        assert (await store.list_notes())[0].tags == []

    @pytest.mark.asyncio
    async def test_empty_title_rejected(self, store: NotesStorage) -> None:
        with pytest.raises(ToolError, match="Invalid arguments"):
            await server.create_note("", "body")
        assert await store.count() == 0


class TestGetNote:
    @pytest.mark.asyncio
    async def test_found(self, store: NotesStorage) -> None:
        note = await store.create_note("Title", "Body text", ["a", "b"])
        text = await server.get_note(note.id)
        assert text.startswith("# Title\n\nBody text\n\n---\n")
        assert f"ID: {note.id}" in text
        assert "Tags: a, b" in text

    @pytest.mark.asyncio
    async def test_not_found(self, store: NotesStorage) -> None:
        with pytest.raises(ToolError, match='Note with ID "missing" not found.'):
            await server.get_note("missing")


class TestUpdateNote:
    @pytest.mark.asyncio
    async def test_partial(self, store: NotesStorage) -> None:
        note = await store.create_note("Old", "keep", ["t"])
        text = await server.update_note(note.id, title="New")
        assert text.startswith("Note updated successfully!")
        assert "Title: New" in text
        stored = await store.get_note(note.id)
        assert stored.content == "keep"
        assert stored.tags == ["t"]

    @pytest.mark.asyncio
    async def test_not_found(self, store: NotesStorage) -> None:
        with pytest.raises(ToolError, match="not found"):
            await server.update_note("missing", title="X")

    @pytest.mark.asyncio
    async def test_empty_title_rejected(self, store: NotesStorage) -> None:
        note = await store.create_note("Old", "")
        with pytest.raises(ToolError, match="Invalid arguments"):
            await server.update_note(note.id, title="")


class TestDeleteNote:
    @pytest.mark.asyncio
    async def test_delete(self, store: NotesStorage) -> None:
        note = await store.create_note("Gone", "")
        text = await server.delete_note(note.id)
        assert text == f'Note with ID "{note.id}" deleted successfully.'
        with pytest.raises(ToolError):
            await server.delete_note(note.id)


class TestSearchAndList:
    @pytest.mark.asyncio
    async def test_search_results(self, store: NotesStorage) -> None:
        await store.create_note("JavaScript Tutorial", "x" * 150, ["js"])
        await store.create_note("Groceries", "milk", ["personal"])
        text = await server.search_notes("javascript")
        assert text.startswith("Found 1 note(s):")
        assert "### JavaScript Tutorial" in text
        assert "Preview: " + "x" * 100 + "..." in text

    @pytest.mark.asyncio
    async def test_search_by_tags_only(self, store: NotesStorage) -> None:
        await store.create_note("A", "", ["b", "c"])
        await store.create_note("B", "", ["b"])
        text = await server.search_notes("", ["b", "c"])
        assert text.startswith("Found 1 note(s):")
        assert "### A" in text

    @pytest.mark.asyncio
    async def test_search_no_match(self, store: NotesStorage) -> None:
        text = await server.search_notes("zzzznotfound")
        assert text == "No notes found matching your search criteria."

    @pytest.mark.asyncio
    async def test_list_notes(self, store: NotesStorage) -> None:
        assert await server.list_notes() == "No notes yet."
        note = await store.create_note("One", "", ["t"])
        text = await server.list_notes()
        assert text == f"1 note(s):\n- One (ID: {note.id}) [t]"

    @pytest.mark.asyncio
    async def test_list_tags(self, store: NotesStorage) -> None:
        assert await server.list_tags() == "No tags found."
        await store.create_note("1", "", ["zebra", "alpha"])
        await store.create_note("2", "", ["alpha"])
        assert await server.list_tags() == "Available tags: alpha, zebra"

    @pytest.mark.asyncio
    async def test_health_check(self, store: NotesStorage) -> None:
        await store.create_note("1", "")
        data = await server.health_check()
        assert data["status"] == "healthy"
        assert data["server"] == "mcp-notes-server"
        assert data["total_notes"] == 1
        assert "timestamp" in data


# ===================================================================
# UNIT TESTS: resources & prompts
# ===================================================================


class TestResources:
    @pytest.mark.asyncio
    async def test_all_notes(self, store: NotesStorage) -> None:
        note = await store.create_note("One", "body", ["t"])
        data = json.loads(await server.all_notes_resource())
        assert data == [
            {
                "id": note.id,
                "title": "One",
                "tags": ["t"],
                "createdAt": note.created_at,
                "updatedAt": note.updated_at,
            }
        ]

    @pytest.mark.asyncio
    async def test_single_note(self, store: NotesStorage) -> None:
        note = await store.create_note("One", "body", [])
        text = await server.note_resource(note.id)
        assert text.startswith("# One\n\nbody")
        assert "ID:" not in text
        assert "Tags: none" in text

    @pytest.mark.asyncio
    async def test_single_note_missing(self, store: NotesStorage) -> None:
        with pytest.raises(ValueError, match="not found"):
            await server.note_resource("missing")


class TestPrompts:
    def test_meeting_notes(self) -> None:
        text = server.create_meeting_notes("Sprint planning", "Ana, Li")
        assert "Title: Sprint planning" in text
        assert "## Attendees\nAna, Li" in text
        assert "## Action Items" in text

    def test_meeting_notes_default_attendees(self) -> None:
        assert "## Attendees\nN/A" in server.create_meeting_notes("Standup")

    def test_code_snippet(self) -> None:
        text = server.create_code_snippet("python", "Read a file")
        assert "```python\n" in text
        assert text.endswith("Tags: code, python")


# ===================================================================
# INTEGRATION TESTS: MCP client ↔ stdio server
# ===================================================================


def _server_params(notes_dir: Path) -> StdioServerParameters:
    return StdioServerParameters(
        command=sys.executable,
        args=["-m", SERVER_MODULE],
        env={**os.environ, "NOTES_DIR": str(notes_dir)},
        cwd=str(PROJECT_ROOT),
    )


@pytest.mark.integration
class TestMCPIntegration:
    """Integration tests that talk to the server over stdio."""

    def test_capabilities(self, tmp_path: Path) -> None:
        async def _run():
            async with stdio_client(_server_params(tmp_path)) as (read, write):
                async with ClientSession(read, write) as session:
                    await session.initialize()
                    tools = await session.list_tools()
                    prompts = await session.list_prompts()
                    return (
                        {t.name for t in tools.tools},
                        {p.name for p in prompts.prompts},
                    )

        tools, prompts = anyio.run(_run)
        assert tools == {
            "create_note",
            "get_note",
            "update_note",
            "delete_note",
            "search_notes",
            "list_notes",
            "list_tags",
            "health_check",
        }
        assert prompts == {"create_meeting_notes", "create_code_snippet"}

    def test_create_search_delete(self, tmp_path: Path) -> None:
        async def _run():
            async with stdio_client(_server_params(tmp_path)) as (read, write):
                async with ClientSession(read, write) as session:
                    await session.initialize()
                    await session.call_tool(
                        "create_note",
                        {"title": "MCP notes", "content": "stdio", "tags": ["mcp"]},
                    )
                    found = await session.call_tool(
                        "search_notes", {"query": "STDIO"}
                    )
                    listing = await session.read_resource("notes://all")
                    missing = await session.call_tool("get_note", {"id": "nope"})
                    return found, listing, missing

        found, listing, missing = anyio.run(_run)
        assert found.content[0].text.startswith("Found 1 note(s):")
        notes = json.loads(listing.contents[0].text)
        assert notes[0]["title"] == "MCP notes"
        assert (tmp_path / f"{notes[0]['id']}.md").read_text() == "stdio"
        assert missing.isError
        assert 'Note with ID "nope" not found.' in missing.content[0].text
