"""Notes page: browse, search, create, edit and delete notes."""

from __future__ import annotations

from typing import Any

import requests
import streamlit as st

from ui import api


def _parse_tags(raw: str) -> list[str]:
    """Comma-separated input to a tag list, blanks dropped."""
    return [t.strip() for t in raw.split(",") if t.strip()]


def _safe_fetch(fn: Any, default: Any, *args: Any) -> Any:
    """Call an API function, showing the error and returning default on failure."""
    try:
        return fn(*args)
    except requests.RequestException as e:
        st.error(f"Request failed: {e}")
        return default


def render() -> None:
    """Render the notes page."""
    st.title("📝 Notes")

    all_tags = _safe_fetch(api.get_tags, [])

    col_query, col_tags = st.columns([2, 1])
    query = col_query.text_input("Search", placeholder="Text in title or content")
    selected_tags = col_tags.multiselect("Tags (all must match)", all_tags)

    if query or selected_tags:
        results = _safe_fetch(api.search_notes, [], query, selected_tags)
        st.caption(f"{len(results)} matching note(s)")
    else:
        results = _safe_fetch(api.list_notes, [])
        st.caption(f"{len(results)} note(s)")

    _render_create_form()
    st.divider()

    if not results:
        st.info("No notes found.")
        return

    for note in results:
        _render_note(note)


def _render_create_form() -> None:
    with st.expander("➕ New note"):
        with st.form("create_note", clear_on_submit=True):
            title = st.text_input("Title")
            content = st.text_area("Content (Markdown)", height=200)
            tags = st.text_input("Tags", placeholder="work, ideas")
            if st.form_submit_button("Create"):
                if not title.strip():
                    st.warning("Title is required.")
                    return
                note = _safe_fetch(
                    api.create_note, None, title, content, _parse_tags(tags)
                )
                if note:
                    st.toast(f"Created \"{note['title']}\"")
                    st.rerun()


def _render_note(summary: dict[str, Any]) -> None:
    """One expandable note; content is fetched only when needed."""
    tags = " ".join(f"`{t}`" for t in summary.get("tags", []))
    with st.expander(f"**{summary['title']}**  {tags}"):
        note = summary
        if "content" not in summary:
            note = _safe_fetch(api.get_note, None, summary["id"])
        if note is None:
            st.warning("This note no longer exists.")
            return

        st.caption(f"Updated {note['updatedAt']} · ID {note['id']}")
        if st.toggle("Edit", key=f"edit_{note['id']}"):
            _render_edit_form(note)
        else:
            st.markdown(note.get("content") or "_(empty)_")

        if st.button("🗑️ Delete", key=f"delete_{note['id']}"):
            if _safe_fetch(api.delete_note, False, note["id"]):
                st.toast("Note deleted")
            st.rerun()


def _render_edit_form(note: dict[str, Any]) -> None:
    with st.form(f"update_{note['id']}"):
        title = st.text_input("Title", value=note["title"])
        content = st.text_area("Content (Markdown)", value=note["content"], height=200)
        tags = st.text_input("Tags", value=", ".join(note.get("tags", [])))
        if st.form_submit_button("Save"):
            if not title.strip():
                st.warning("Title is required.")
                return
            updated = _save(note["id"], title, content, _parse_tags(tags))
            if updated:
                st.toast("Note saved")
                st.rerun()


def _save(note_id: str, title: str, content: str, tags: list[str]) -> Any:
    try:
        updated = api.update_note(note_id, title=title, content=content, tags=tags)
    except requests.RequestException as e:
        st.error(f"Request failed: {e}")
        return None
    if updated is None:
        st.warning("This note no longer exists.")
    return updated
