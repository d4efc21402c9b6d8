"""Unit tests for bridge.widgets and the MCP text formatting helpers."""

from __future__ import annotations

import json
from urllib.parse import parse_qs, urlparse

from bridge import widgets
from mcp_servers.notes import formatting
from mcp_servers.notes.models import Note

NOTE = {
    "id": "abc-123",
    "title": "Groceries",
    "content": "milk & eggs",
    "tags": ["personal", "<b>"],
    "createdAt": "2024-05-01T10:00:00.000000+00:00",
    "updatedAt": "2024-05-02T11:30:00.000000+00:00",
}


class TestHelpers:
    def test_widget_url_round_trips(self) -> None:
        url = urlparse(widgets.widget_url("https://x.example/", "note-card", NOTE))
        assert url.path == "/widgets/note-card"
        assert json.loads(parse_qs(url.query)["data"][0]) == NOTE

    def test_escape(self) -> None:
        assert widgets.escape('<a href="x">') == "&lt;a href=&quot;x&quot;&gt;"
        assert widgets.escape(None) == ""

    def test_format_date(self) -> None:
        assert widgets.format_date(NOTE["createdAt"]) == "2024-05-01 10:00"
        assert widgets.format_date("<garbage>") == "&lt;garbage&gt;"

    def test_render_tags_skips_non_lists(self) -> None:
        assert widgets.render_tags(None) == ""
        assert widgets.render_tags("personal") == ""


class TestRenderers:
    def test_note_card(self) -> None:
        html = widgets.render_note_card(NOTE)
        assert html.startswith("<!DOCTYPE html>")
        assert "milk &amp; eggs" in html
        assert "&lt;b&gt;" in html
        assert "Created: 2024-05-01 10:00" in html

    def test_note_detail_shows_update_and_id(self) -> None:
        html = widgets.render_note_detail(NOTE)
        assert "Updated: 2024-05-02 11:30" in html
        assert "ID: abc-123" in html

    def test_note_detail_hides_unchanged_update(self) -> None:
        html = widgets.render_note_detail({**NOTE, "updatedAt": NOTE["createdAt"]})
        assert "Updated:" not in html

    def test_untitled_fallback(self) -> None:
        assert "Untitled" in widgets.render_note_card({"content": "x"})

    def test_notes_list_empty_state(self) -> None:
        for empty in ([], None, {"not": "a list"}):
            html = widgets.render_notes_list(empty)
            assert "No notes yet" in html
            assert "Your Notes" not in html

    def test_notes_list_count(self) -> None:
        html = widgets.render_notes_list([NOTE, NOTE, NOTE])
        assert "3 notes" in html
        assert html.count('class="note"') == 3

    def test_editor(self) -> None:
        assert "Create Note" in widgets.render_note_editor(None)
        html = widgets.render_note_editor(NOTE)
        assert "Edit Note" in html
        assert 'value="Groceries"' in html
        assert "readonly" in html


class TestFormatting:
    def _note(self, **overrides) -> Note:
        fields = {
            "id": "n1",
            "title": "T",
            "content": "body",
            "tags": [],
            "created_at": "c",
            "updated_at": "u",
        }
        return Note(**{**fields, **overrides})

    def test_preview(self) -> None:
        assert formatting.preview("short") == "short"
        assert formatting.preview("x" * 101) == "x" * 100 + "..."

    def test_tag_line(self) -> None:
        assert formatting.tag_line([]) == "none"
        assert formatting.tag_line(["a", "b"]) == "a, b"

    def test_format_created(self) -> None:
        text = formatting.format_created(self._note(tags=["a"]))
        assert text == "Note created successfully!\n\nID: n1\nTitle: T\nTags: a\nCreated: c"

    def test_format_note_without_id(self) -> None:
        text = formatting.format_note(self._note(), include_id=False)
        assert text == "# T\n\nbody\n\n---\nTags: none\nCreated: c\nUpdated: u"
