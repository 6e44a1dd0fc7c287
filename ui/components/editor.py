"""Editor page: the editing surface, saving indicator, status bar and export."""

from __future__ import annotations

import requests
import streamlit as st

from notepad.normalizer import to_editable
from ui import api


def _push_edit(key: str) -> None:
    """Forward the text area's content to the edit session as surface markup."""
    try:
        api.send_edit(to_editable(st.session_state[key]))
    except requests.RequestException as e:
        st.session_state.edit_error = str(e)


def _render_status_bar(note_id: str) -> None:
    try:
        stats = api.get_stats(note_id)
    except Exception:
        return
    cols = st.columns([1, 1, 1, 2])
    cols[0].caption(f"Words: {stats['words']}")
    cols[1].caption(f"Characters: {stats['characters']}")
    cols[2].caption(f"Lines: {stats['lines']}")
    cols[3].caption(stats["readingLabel"])


def _render_export(note: dict) -> None:
    col_txt, col_pdf, col_docx = st.columns(3)
    with col_txt:
        try:
            body = api.export_note(note["id"], "txt")
        except Exception as e:
            st.error(f"Export failed: {e}")
        else:
            st.download_button(
                "Export .txt",
                data=body,
                file_name=f"{note['title']}.txt",
                mime="text/plain",
                use_container_width=True,
            )
    for col, fmt in ((col_pdf, "pdf"), (col_docx, "docx")):
        with col:
            if st.button(f"Export .{fmt}", use_container_width=True):
                try:
                    api.export_note(note["id"], fmt)
                except requests.HTTPError as e:
                    st.info(e.response.json().get("detail", str(e)))


def render() -> None:
    """Render the editor page."""
    try:
        note = api.get_active_note()
        session = api.get_session()
    except requests.ConnectionError:
        st.error(
            "Cannot reach the notepad API. "
            "Make sure the FastAPI server is running on port 8000."
        )
        return

    st.title(note["title"])

    if "edit_error" in st.session_state:
        st.error(f"Edit not sent: {st.session_state.pop('edit_error')}")

    key = f"editor_{note['id']}"
    st.text_area(
        "Note",
        value=note["content"],
        key=key,
        height=480,
        placeholder="Start typing your notes here...",
        label_visibility="collapsed",
        on_change=_push_edit,
        args=(key,),
    )

    if session["hasPending"] or session["isSaving"]:
        st.caption("⏳ Saving...")

    _render_status_bar(note["id"])

    with st.expander("Copy to clipboard"):
        st.code(note["content"] or " ", language=None)

    _render_export(note)
