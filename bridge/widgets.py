"""Self-contained HTML widgets shown inside the chat-assistant iframe.

Widgets receive the note(s) to render as URL-encoded JSON in a ``data``
query parameter, so they never call back into the store.  All note text is
HTML-escaped.
"""

from __future__ import annotations

import html
import json
from datetime import datetime
from typing import Any
from urllib.parse import quote

_BASE_CSS = (
    "body { margin: 0; padding: 16px; font-family: -apple-system, "
    "BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; background: #f5f5f5; }"
)

_TAG_STYLE = (
    "display: inline-block; background: #e3f2fd; color: #1976d2; "
    "padding: 4px 8px; border-radius: 4px; font-size: 12px; "
    "margin-right: 4px; margin-bottom: 4px;"
)


def widget_url(base_url: str, name: str, data: Any) -> str:
    """Link to a widget with *data* embedded as URL-encoded JSON."""
    encoded = quote(json.dumps(data, separators=(",", ":")), safe="")
    return f"{base_url.rstrip('/')}/widgets/{name}?data={encoded}"


def escape(text: Any) -> str:
    return html.escape("" if text is None else str(text), quote=True)


def format_date(value: str) -> str:
    """Human-friendly timestamp; unparseable input is echoed back escaped."""
    try:
        return datetime.fromisoformat(value).strftime("%Y-%m-%d %H:%M")
    except (TypeError, ValueError):
        return escape(value)


def render_tags(tags: Any) -> str:
    if not isinstance(tags, list) or not tags:
        return ""
    return "".join(f'<span style="{_TAG_STYLE}">{escape(t)}</span>' for t in tags)


def _page(css: str, body: str) -> str:
    return (
        "<!DOCTYPE html>\n<html>\n<head>\n"
        '  <meta charset="utf-8">\n'
        '  <meta name="viewport" content="width=device-width, initial-scale=1">\n'
        f"  <style>\n    {_BASE_CSS}\n    {css}\n  </style>\n"
        f"</head>\n<body>\n{body}\n</body>\n</html>"
    )


def render_note_card(note: dict[str, Any]) -> str:
    tags = render_tags(note.get("tags"))
    css = (
        ".note-card { background: white; border-radius: 8px; padding: 20px; "
        "box-shadow: 0 2px 4px rgba(0,0,0,0.1); max-width: 600px; }\n"
        "    .note-title { font-size: 20px; font-weight: 600; margin-bottom: 12px; color: #333; }\n"
        "    .note-content { color: #666; line-height: 1.6; margin-bottom: 16px; white-space: pre-wrap; }\n"
        "    .note-tags { margin-bottom: 12px; }\n"
        "    .note-meta { font-size: 12px; color: #999; }"
    )
    body = (
        '  <div class="note-card">\n'
        f'    <div class="note-title">{escape(note.get("title") or "Untitled")}</div>\n'
        f'    <div class="note-content">{escape(note.get("content", ""))}</div>\n'
        + (f'    <div class="note-tags">{tags}</div>\n' if tags else "")
        + f'    <div class="note-meta">Created: {format_date(note.get("createdAt", ""))}</div>\n'
        "  </div>"
    )
    return _page(css, body)


def render_note_detail(note: dict[str, Any]) -> str:
    tags = render_tags(note.get("tags"))
    created = note.get("createdAt", "")
    updated = note.get("updatedAt")
    meta = [f'<div class="meta-item">Created: {format_date(created)}</div>']
    if updated and updated != created:
        meta.append(f'<div class="meta-item">Updated: {format_date(updated)}</div>')
    if note.get("id"):
        meta.append(f'<div class="meta-item">ID: {escape(note["id"])}</div>')
    css = (
        ".note-detail { background: white; border-radius: 8px; padding: 24px; "
        "box-shadow: 0 2px 4px rgba(0,0,0,0.1); max-width: 800px; margin: 0 auto; }\n"
        "    .note-title { font-size: 28px; font-weight: 600; margin-bottom: 16px; color: #333; }\n"
        "    .note-content { color: #333; line-height: 1.8; margin-bottom: 24px; white-space: pre-wrap; }\n"
        "    .note-tags { margin-bottom: 16px; }\n"
        "    .note-meta { font-size: 14px; color: #999; border-top: 1px solid #e0e0e0; padding-top: 16px; }\n"
        "    .meta-item { margin-bottom: 4px; }"
    )
    body = (
        '  <div class="note-detail">\n'
        f'    <div class="note-title">{escape(note.get("title") or "Untitled")}</div>\n'
        f'    <div class="note-content">{escape(note.get("content", ""))}</div>\n'
        + (f'    <div class="note-tags">{tags}</div>\n' if tags else "")
        + '    <div class="note-meta">\n      '
        + "\n      ".join(meta)
        + "\n    </div>\n  </div>"
    )
    return _page(css, body)


def render_notes_list(notes: Any) -> str:
    items = notes if isinstance(notes, list) else []
    if not items:
        css = (
            ".empty-state { text-align: center; background: white; border-radius: 8px; "
            "padding: 40px; box-shadow: 0 2px 4px rgba(0,0,0,0.1); }\n"
            "    .empty-icon { font-size: 48px; margin-bottom: 16px; }\n"
            "    .empty-title { font-size: 20px; font-weight: 600; color: #333; margin-bottom: 8px; }\n"
            "    .empty-text { color: #666; }"
        )
        body = (
            '  <div class="empty-state">\n'
            '    <div class="empty-icon">📭</div>\n'
            '    <div class="empty-title">No notes yet</div>\n'
            '    <div class="empty-text">Create your first note to get started!</div>\n'
            "  </div>"
        )
        return _page(css, body)

    cards = []
    for note in items:
        tags = render_tags(note.get("tags"))
        cards.append(
            '    <div class="note">\n'
            f'      <h3>{escape(note.get("title") or "Untitled")}</h3>\n'
            f'      <p>{escape(note.get("content", ""))}</p>\n'
            + (f'      <div class="tags">{tags}</div>\n' if tags else "")
            + f'      <div class="meta">Created: {format_date(note.get("createdAt", ""))}</div>\n'
            "    </div>"
        )
    count = len(items)
    css = (
        ".notes-container { max-width: 800px; margin: 0 auto; }\n"
        "    .header { background: white; border-radius: 8px; padding: 20px; margin-bottom: 16px; "
        "box-shadow: 0 2px 4px rgba(0,0,0,0.1); }\n"
        "    .header h2 { margin: 0; font-size: 24px; color: #333; }\n"
        "    .count { color: #666; font-size: 14px; margin-top: 4px; }\n"
        "    .note { background: white; border-radius: 8px; padding: 16px; margin-bottom: 12px; "
        "box-shadow: 0 1px 3px rgba(0,0,0,0.1); }\n"
        "    .note h3 { margin: 0 0 8px 0; font-size: 18px; color: #1a1a1a; }\n"
        "    .note p { margin: 0 0 12px 0; color: #666; line-height: 1.5; white-space: pre-wrap; "
        "overflow: hidden; display: -webkit-box; -webkit-line-clamp: 2; -webkit-box-orient: vertical; }\n"
        "    .tags { margin-bottom: 8px; }\n"
        "    .meta { font-size: 12px; color: #999; }"
    )
    body = (
        '  <div class="notes-container">\n'
        '    <div class="header">\n'
        "      <h2>Your Notes</h2>\n"
        f'      <div class="count">{count} note{"" if count == 1 else "s"}</div>\n'
        "    </div>\n" + "\n".join(cards) + "\n  </div>"
    )
    return _page(css, body)


def render_note_editor(note: dict[str, Any] | None = None) -> str:
    """Read-only editor preview; without a note it shows an empty create form."""
    note = note or {}
    tags = render_tags(note.get("tags"))
    css = (
        ".editor { background: white; border-radius: 8px; padding: 24px; "
        "box-shadow: 0 2px 4px rgba(0,0,0,0.1); max-width: 800px; margin: 0 auto; }\n"
        "    .editor-title { font-size: 24px; font-weight: 600; margin-bottom: 20px; color: #333; }\n"
        "    .form-group { margin-bottom: 20px; }\n"
        "    label { display: block; font-weight: 500; margin-bottom: 8px; color: #333; }\n"
        "    input, textarea { width: 100%; padding: 12px; border: 1px solid #ddd; border-radius: 4px; "
        "font-family: inherit; font-size: 14px; background: #f5f5f5; cursor: not-allowed; }\n"
        "    textarea { min-height: 200px; resize: vertical; }\n"
        "    .info { font-size: 14px; color: #666; margin-top: 8px; }"
    )
    body = (
        '  <div class="editor">\n'
        f'    <div class="editor-title">{"Edit Note" if note else "Create Note"}</div>\n'
        '    <div class="form-group">\n      <label>Title</label>\n'
        f'      <input type="text" value="{escape(note.get("title", ""))}" readonly>\n'
        "    </div>\n"
        '    <div class="form-group">\n      <label>Content</label>\n'
        f'      <textarea readonly>{escape(note.get("content", ""))}</textarea>\n'
        "    </div>\n"
        + (
            f'    <div class="form-group"><label>Tags</label><div>{tags}</div></div>\n'
            if tags
            else ""
        )
        + '    <div class="info">This is a read-only preview. Ask the assistant to edit notes.</div>\n'
        "  </div>"
    )
    return _page(css, body)
