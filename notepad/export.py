"""Export of a note's plaintext as a downloadable file.

Only ``.txt`` is produced; PDF and DOCX are accepted as format names but
not generated.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from notepad.models import Note

_UNSAFE_FILENAME_RE = re.compile(r'[\\/:*?"<>|\x00-\x1f]')


class ExportFormat(str, Enum):
    TXT = "txt"
    PDF = "pdf"
    DOCX = "docx"


class ExportNotSupportedError(Exception):
    """Raised for export formats that have no generator."""


@dataclass(frozen=True)
class ExportedFile:
    filename: str
    media_type: str
    body: str


def _safe_filename(title: str) -> str:
    cleaned = _UNSAFE_FILENAME_RE.sub("_", title).strip()
    return cleaned or "note"


def export_note(note: Note, fmt: ExportFormat | str = ExportFormat.TXT) -> ExportedFile:
    """Package *note* for download; the note itself is never modified."""
    fmt = ExportFormat(fmt)
    if fmt is not ExportFormat.TXT:
        raise ExportNotSupportedError(
            f"{fmt.value.upper()} export is not available; export as .txt instead."
        )
    return ExportedFile(
        filename=f"{_safe_filename(note.title)}.txt",
        media_type="text/plain",
        body=note.content,
    )
