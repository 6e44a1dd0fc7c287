"""Notepad — Streamlit browser interface.

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

import streamlit as st  # noqa: E402

st.set_page_config(
    page_title="Notepad",
    page_icon="📝",
    layout="wide",
    initial_sidebar_state="expanded",
)

from ui import api  # noqa: E402
from ui.components import editor, sidebar, text_utilities  # noqa: E402

# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------

page = st.navigation(
    [
        st.Page(editor.render, title="Editor", icon="📝", default=True, url_path="editor"),
        st.Page(
            text_utilities.render,
            title="Text Utilities",
            icon="🔤",
            url_path="utilities",
        ),
    ]
)

# Sidebar is shared across all pages
sidebar.render()

# Render the selected page
page.run()

# Footer
st.divider()
try:
    _health = api.get_health()
    _backend = _health.get("backend", "memory")
    _durable = "saved" if _health.get("durable") else "not saved — check storage"
except Exception:
    _backend, _durable = "unknown", "offline"
st.caption(f"Session storage: {_backend} | {_durable}")
