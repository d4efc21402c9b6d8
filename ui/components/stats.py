"""Stats page: totals, tag usage chart and recently updated notes."""

from __future__ import annotations

from collections import Counter
from typing import Any

import pandas as pd
import plotly.express as px
import requests
import streamlit as st

from ui import api

_CHART_LAYOUT: dict[str, Any] = {
    "paper_bgcolor": "rgba(0,0,0,0)",
    "plot_bgcolor": "rgba(0,0,0,0)",
    "font": {"size": 12},
    "margin": {"t": 30, "b": 50, "l": 60, "r": 20},
}

_STATS_DEFAULTS: dict[str, Any] = {"totalNotes": 0, "totalTags": 0, "recentNotes": []}


def _safe_fetch(fn: Any, default: Any) -> Any:
    """Call an API function, returning default on error."""
    try:
        return fn()
    except requests.RequestException:
        return default


def tag_usage(notes: list[dict[str, Any]]) -> pd.DataFrame:
    """Number of notes carrying each tag, most used first."""
    counts = Counter(tag for note in notes for tag in note.get("tags", []))
    return pd.DataFrame(counts.most_common(), columns=["tag", "notes"])


def render() -> None:
    """Render the stats dashboard."""
    st.title("📈 Stats")

    stats = _safe_fetch(api.get_stats, _STATS_DEFAULTS)
    notes = _safe_fetch(api.list_notes, [])

    col1, col2 = st.columns(2)
    col1.metric("Notes", stats.get("totalNotes", 0))
    col2.metric("Tags", stats.get("totalTags", 0))
    st.divider()

    col_left, col_right = st.columns(2)
    with col_left:
        _render_tag_chart(notes)
    with col_right:
        _render_recent(stats.get("recentNotes", []))

    st.caption("Data refreshes on each page load.")


def _render_tag_chart(notes: list[dict[str, Any]]) -> None:
    """Bar chart of notes per tag."""
    st.subheader("Tag Usage")
    df = tag_usage(notes)
    if df.empty:
        st.info("No tagged notes yet.")
        return

    fig = px.bar(
        df,
        x="tag",
        y="notes",
        labels={"tag": "Tag", "notes": "Notes"},
        text="notes",
        height=350,
    )
    fig.update_traces(textposition="outside", marker_color="#1976d2")
    fig.update_layout(**_CHART_LAYOUT, showlegend=False)
    fig.update_yaxes(gridcolor="rgba(128,128,128,0.15)")
    st.plotly_chart(fig, use_container_width=True)


def _render_recent(data: list[dict[str, Any]]) -> None:
    """Table of the most recently updated notes."""
    st.subheader("Recently Updated")
    if not data:
        st.info("No notes yet.")
        return

    df = pd.DataFrame(data)
    df["tags"] = df["tags"].apply(", ".join)

    display_cols = {"title": "Title", "tags": "Tags", "updatedAt": "Updated"}
    available = [c for c in display_cols if c in df.columns]
    st.dataframe(
        df[available].rename(columns=display_cols),
        use_container_width=True,
        hide_index=True,
    )
