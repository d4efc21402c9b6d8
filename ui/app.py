"""Notes dashboard — Streamlit interface for the notes REST API.

Run with:
    streamlit run ui/app.py
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so `ui.*` imports resolve
# regardless of the working directory Streamlit uses.
_project_root = str(Path(__file__).resolve().parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

import requests  # noqa: E402
import streamlit as st  # noqa: E402

st.set_page_config(
    page_title="Notes",
    page_icon="📝",
    layout="wide",
    initial_sidebar_state="expanded",
)

from ui import api  # noqa: E402
from ui.components import notes, stats  # noqa: E402

# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------

page = st.navigation(
    [
        st.Page(notes.render, title="Notes", icon="📝", default=True, url_path="notes"),
        st.Page(stats.render, title="Stats", icon="📈", url_path="stats"),
    ]
)

with st.sidebar:
    st.caption(f"API: {api.BASE_URL}")
    try:
        _health = api.get_health()
        st.success(f"Connected · {_health.get('total_notes', 0)} notes")
    except requests.RequestException:
        st.error("Notes API unreachable")

page.run()

st.divider()
st.caption("Notes are stored as Markdown files with a JSON index.")
