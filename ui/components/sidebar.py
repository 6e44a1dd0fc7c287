"""Sidebar: note list with search, plus create / rename / delete controls."""

from __future__ import annotations

import requests
import streamlit as st

from ui import api


def _run(action, *args) -> bool:
    """Call an API action and surface failures in the sidebar."""
    try:
        action(*args)
    except requests.ConnectionError:
        st.sidebar.error("Cannot reach the notepad API on port 8000.")
        return False
    except Exception as e:
        st.sidebar.error(f"Request failed: {e}")
        return False
    return True


def _render_note_list(data: dict) -> None:
    active_id = data["activeId"]
    if not data["notes"]:
        st.caption("No notes match your search.")
    for note in data["notes"]:
        is_active = note["id"] == active_id
        label = f"**{note['title']}**" if is_active else note["title"]
        if st.button(
            label,
            key=f"select_{note['id']}",
            use_container_width=True,
            disabled=is_active,
        ):
            if _run(api.select_note, note["id"]):
                st.rerun()


def _render_create() -> None:
    with st.form("create_note", clear_on_submit=True):
        title = st.text_input("New note", placeholder="Enter note name")
        if st.form_submit_button("Create", use_container_width=True):
            if _run(api.create_note, title):
                st.rerun()


def _render_manage(active: dict) -> None:
    with st.expander("Rename or delete"):
        new_title = st.text_input("Title", value=active["title"], key=f"rename_{active['id']}")
        if st.button("Rename", use_container_width=True):
            if _run(api.rename_note, active["id"], new_title):
                st.rerun()

        confirm = st.checkbox(
            f"Delete '{active['title']}' permanently", key=f"confirm_{active['id']}"
        )
        if st.button("Delete", type="primary", disabled=not confirm, use_container_width=True):
            if _run(api.delete_note, active["id"]):
                st.rerun()


def render() -> None:
    """Render the shared sidebar."""
    with st.sidebar:
        st.header("📝 Notes")
        query = st.text_input("Search notes", placeholder="Search by title")
        try:
            data = api.list_notes(query or None)
            active = api.get_active_note()
        except Exception as e:
            st.error(f"Cannot load notes: {e}")
            return

        _render_note_list(data)
        st.divider()
        _render_create()
        _render_manage(active)
