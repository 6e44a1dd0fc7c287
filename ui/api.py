"""Thin HTTP client for the notepad API.

All functions return parsed JSON (dicts/lists) or raise on failure.
Uses requests (synchronous) since Streamlit reruns are synchronous.
"""

from __future__ import annotations

import os
from typing import Any, Optional

import requests

BASE_URL = os.getenv("NOTEPAD_API_URL", "http://localhost:8000")
_TIMEOUT = 10  # seconds


def list_notes(query: Optional[str] = None) -> dict[str, Any]:
    """GET /notes — all notes, or title matches when *query* is given."""
    params = {"q": query} if query else None
    resp = requests.get(f"{BASE_URL}/notes", params=params, timeout=_TIMEOUT)
    resp.raise_for_status()
    return resp.json()


def get_active_note() -> dict[str, Any]:
    """GET /notes/active — the note shown in the editor."""
    resp = requests.get(f"{BASE_URL}/notes/active", timeout=_TIMEOUT)
    resp.raise_for_status()
    return resp.json()


def create_note(title: str = "") -> dict[str, Any]:
    """POST /notes — create a note and make it active."""
    resp = requests.post(f"{BASE_URL}/notes", json={"title": title}, timeout=_TIMEOUT)
    resp.raise_for_status()
    return resp.json()


def select_note(note_id: str) -> dict[str, Any]:
    """POST /notes/{id}/select — switch the active note."""
    resp = requests.post(f"{BASE_URL}/notes/{note_id}/select", timeout=_TIMEOUT)
    resp.raise_for_status()
    return resp.json()


def rename_note(note_id: str, title: str) -> dict[str, Any]:
    """PATCH /notes/{id} — rename a note."""
    resp = requests.patch(
        f"{BASE_URL}/notes/{note_id}", json={"title": title}, timeout=_TIMEOUT
    )
    resp.raise_for_status()
    return resp.json()


def delete_note(note_id: str) -> dict[str, Any]:
    """DELETE /notes/{id} — delete a note."""
    resp = requests.delete(f"{BASE_URL}/notes/{note_id}", timeout=_TIMEOUT)
    resp.raise_for_status()
    return resp.json()


def get_stats(note_id: str) -> dict[str, Any]:
    """GET /notes/{id}/stats — word/character/line counts."""
    resp = requests.get(f"{BASE_URL}/notes/{note_id}/stats", timeout=_TIMEOUT)
    resp.raise_for_status()
    return resp.json()


def export_note(note_id: str, fmt: str = "txt") -> bytes:
    """GET /notes/{id}/export — file body for download."""
    resp = requests.get(
        f"{BASE_URL}/notes/{note_id}/export", params={"format": fmt}, timeout=_TIMEOUT
    )
    resp.raise_for_status()
    return resp.content


def transform_text(text: str, operation: str) -> dict[str, Any]:
    """POST /transform — preview a text utility."""
    resp = requests.post(
        f"{BASE_URL}/transform",
        json={"text": text, "operation": operation},
        timeout=_TIMEOUT,
    )
    resp.raise_for_status()
    return resp.json()


def transform_note(note_id: str, operation: str, apply: bool = False) -> dict[str, Any]:
    """POST /notes/{id}/transform — run a text utility, saving it when *apply*."""
    resp = requests.post(
        f"{BASE_URL}/notes/{note_id}/transform",
        json={"operation": operation, "apply": apply},
        timeout=_TIMEOUT,
    )
    resp.raise_for_status()
    return resp.json()


def get_session() -> dict[str, Any]:
    """GET /session — edit session state."""
    resp = requests.get(f"{BASE_URL}/session", timeout=_TIMEOUT)
    resp.raise_for_status()
    return resp.json()


def send_edit(rich_content: str) -> dict[str, Any]:
    """POST /session/edits — push the editor's current content."""
    resp = requests.post(
        f"{BASE_URL}/session/edits", json={"content": rich_content}, timeout=_TIMEOUT
    )
    resp.raise_for_status()
    return resp.json()


def get_health() -> dict[str, Any]:
    """GET /health — service health."""
    resp = requests.get(f"{BASE_URL}/health", timeout=_TIMEOUT)
    resp.raise_for_status()
    return resp.json()
