"""Conversion between the editing surface and canonical plaintext, plus text utilities.

The editing surface works on markup whose only meaningful element is the
``<br>`` line break. Only plaintext is ever stored, so any other styling the
surface produces is dropped on the way in.

Every function here is pure: same input, same output, no shared state.
"""

from __future__ import annotations

import html
import re
import warnings
from dataclasses import dataclass
from enum import Enum

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning

LINE_BREAK_MARKER = "<br>"
WORDS_PER_MINUTE = 200

_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_LINE_TERMINATOR_RE = re.compile(r"\r\n|\n|\r")
_WHITESPACE_RE = re.compile(r"\s+")

# Short plaintext fragments such as "notes.txt" look like file names to bs4.
warnings.filterwarnings("ignore", category=MarkupResemblesLocatorWarning)


class TextOperation(str, Enum):
    """Text utilities offered on a note's plaintext."""

    UPPERCASE = "uppercase"
    LOWERCASE = "lowercase"
    TITLE_CASE = "titleCase"
    REMOVE_LINE_BREAKS = "removeLineBreaks"
    REMOVE_EXTRA_SPACES = "removeExtraSpaces"
    REMOVE_DUPLICATE_LINES = "removeDuplicateLines"


@dataclass(frozen=True)
class DocumentStats:
    """Counts shown in the editor status bar."""

    words: int
    characters: int
    lines: int
    reading_minutes: int

    @property
    def reading_label(self) -> str:
        if self.reading_minutes == 0:
            return "Less than a minute read"
        suffix = "" if self.reading_minutes == 1 else "s"
        return f"{self.reading_minutes} min{suffix} read"


# ---------------------------------------------------------------------------
# Surface conversion
# ---------------------------------------------------------------------------


def to_editable(plaintext: str) -> str:
    """Render stored plaintext for the editing surface.

    Newlines become ``<br>`` markers. ``&``, ``<`` and ``>`` are escaped so the
    surface shows them literally instead of parsing them as markup.
    """
    if not plaintext:
        return ""
    return html.escape(plaintext, quote=False).replace("\n", LINE_BREAK_MARKER)


def to_plaintext(rich_content: str) -> str:
    """Reduce surface markup to canonical plaintext.

    ``<br>`` variants become newlines, every other tag is stripped and
    entities are decoded. Formatting is not preserved.
    """
    if not rich_content:
        return ""
    with_newlines = _BR_RE.sub("\n", rich_content)
    return BeautifulSoup(with_newlines, "html.parser").get_text()


# ---------------------------------------------------------------------------
# Transforms
# ---------------------------------------------------------------------------


def _title_case(text: str) -> str:
    # str.split() drops the empty tokens produced by leading/trailing whitespace
    return " ".join(word[0].upper() + word[1:].lower() for word in text.split())


def _remove_line_breaks(text: str) -> str:
    return _LINE_TERMINATOR_RE.sub(" ", text)


def _remove_extra_spaces(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def _remove_duplicate_lines(text: str) -> str:
    lines = _LINE_TERMINATOR_RE.split(text)
    return "\n".join(dict.fromkeys(lines))


_TRANSFORMS = {
    TextOperation.UPPERCASE: str.upper,
    TextOperation.LOWERCASE: str.lower,
    TextOperation.TITLE_CASE: _title_case,
    TextOperation.REMOVE_LINE_BREAKS: _remove_line_breaks,
    TextOperation.REMOVE_EXTRA_SPACES: _remove_extra_spaces,
    TextOperation.REMOVE_DUPLICATE_LINES: _remove_duplicate_lines,
}


def transform(plaintext: str, operation: TextOperation | str) -> str:
    """Apply one text utility and return the new text.

    Raises:
        ValueError: If *operation* is not a known :class:`TextOperation`.
    """
    return _TRANSFORMS[TextOperation(operation)](plaintext)


def document_stats(plaintext: str) -> DocumentStats:
    """Word, character and line counts plus an estimated reading time."""
    words = len(plaintext.split())
    lines = len(_LINE_TERMINATOR_RE.split(plaintext)) if plaintext else 0
    return DocumentStats(
        words=words,
        characters=len(plaintext),
        lines=lines,
        reading_minutes=words // WORDS_PER_MINUTE,
    )
