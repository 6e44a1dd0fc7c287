"""Text utilities page: preview a transform on the active note and apply it."""

from __future__ import annotations

import streamlit as st

from ui import api

_CASE_OPERATIONS: dict[str, str] = {
    "UPPERCASE": "uppercase",
    "lowercase": "lowercase",
    "Title Case": "titleCase",
}

_FORMAT_OPERATIONS: dict[str, str] = {
    "Remove Line Breaks": "removeLineBreaks",
    "Remove Extra Spaces": "removeExtraSpaces",
    "Remove Duplicate Lines": "removeDuplicateLines",
}


def _operation_buttons(operations: dict[str, str]) -> None:
    cols = st.columns(len(operations))
    for col, (label, operation) in zip(cols, operations.items()):
        if col.button(label, use_container_width=True):
            st.session_state.utility_operation = operation


def render() -> None:
    """Render the text utilities page."""
    st.title("🔤 Text Utilities")
    st.caption("Transform your text with these utilities.")

    if "utility_warning" in st.session_state:
        st.warning(st.session_state.pop("utility_warning"))

    try:
        note = api.get_active_note()
    except Exception as e:
        st.error(f"Cannot load the active note: {e}")
        return

    tab_case, tab_format = st.tabs(["Case Conversion", "Text Formatting"])
    with tab_case:
        _operation_buttons(_CASE_OPERATIONS)
    with tab_format:
        _operation_buttons(_FORMAT_OPERATIONS)

    operation = st.session_state.get("utility_operation")
    if not operation:
        st.text_area("Preview", value=note["content"], height=240, disabled=True)
        return

    try:
        preview = api.transform_note(note["id"], operation)["text"]
    except Exception as e:
        st.error(f"Transform failed: {e}")
        return
    st.text_area("Preview", value=preview, height=240, disabled=True)

    col_apply, col_cancel = st.columns(2)
    if col_apply.button("Apply", type="primary", use_container_width=True):
        result = api.transform_note(note["id"], operation, apply=True)
        st.session_state.pop("utility_operation", None)
        st.session_state.pop(f"editor_{note['id']}", None)
        if not result.get("durable", True):
            st.session_state.utility_warning = (
                "Applied, but the change could not be saved to session storage."
            )
        st.rerun()
    if col_cancel.button("Cancel", use_container_width=True):
        st.session_state.pop("utility_operation", None)
        st.rerun()
