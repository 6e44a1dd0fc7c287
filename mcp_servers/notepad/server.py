"""
Notepad MCP Server

Exposes the note store and text utilities as tools via the Model Context
Protocol.  Runs on port 8001 with SSE transport.
"""

import logging
from datetime import UTC, datetime

from mcp.server.fastmcp import FastMCP

from notepad.config import settings
from notepad.normalizer import TextOperation, document_stats, transform
from notepad.persistence import PersistenceAdapter, build_key_value_store
from notepad.store import NoteStore

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
)
logger = logging.getLogger("notepad_mcp")

# ---------------------------------------------------------------------------
# MCP server + store
# ---------------------------------------------------------------------------
mcp = FastMCP("notepad", host=settings.mcp_host, port=settings.mcp_port)
store = NoteStore(
    PersistenceAdapter(
        build_key_value_store(settings),
        notes_key=settings.notes_key,
        active_key=settings.active_key,
    )
)
store.initialize()

_OPERATIONS = ", ".join(op.value for op in TextOperation)


def _not_found(note_id: str) -> dict:
    return {"note_id": note_id, "error": f"Note {note_id} not found."}


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


@mcp.tool()
def list_notes(query: str | None = None) -> dict:
    """List the user's notes, optionally filtered by title.

    Use this tool when the user wants to browse their notes or find one by
    name.  Without a query notes come back in tab order; with a query only
    titles containing it (case-insensitive) are returned, newest first.

    Args:
        query: Optional title substring to filter by.

    Returns:
        Dictionary with the active note id, the count, and the notes.
    """
    notes = store.search(query) if query else store.notes
    logger.info("Tool list_notes invoked — query=%r, found=%d", query, len(notes))
    return {
        "active_id": store.active_id,
        "count": len(notes),
        "notes": [n.model_dump(by_alias=True) for n in notes],
    }


@mcp.tool()
def create_note(title: str = "") -> dict:
    """Create a new empty note and make it the active note.

    Args:
        title: Optional title; a blank title becomes "Untitled Note N".

    Returns:
        Dictionary with the new note_id, its title and a confirmation message.
    """
    note = store.create(title)
    logger.info("Tool create_note invoked — id=%s", note.id)
    return {
        "note_id": note.id,
        "title": note.title,
        "durable": store.durable,
        "message": f"Note '{note.title}' created.",
    }


@mcp.tool()
def select_note(note_id: str) -> dict:
    """Make an existing note the active note.

    Args:
        note_id: Id of the note to activate.

    Returns:
        Dictionary with the active note id, or an error if the note is unknown.
    """
    logger.info("Tool select_note invoked — id=%s", note_id)
    if not store.select(note_id):
        return _not_found(note_id)
    return {"active_id": store.active_id, "durable": store.durable}


@mcp.tool()
def rename_note(note_id: str, title: str) -> dict:
    """Rename a note.  A blank title leaves the current title in place.

    Args:
        note_id: Id of the note to rename.
        title: New title (surrounding whitespace is trimmed).

    Returns:
        Dictionary with the note's resulting title.
    """
    logger.info("Tool rename_note invoked — id=%s", note_id)
    note = store.rename(note_id, title)
    if note is None:
        return _not_found(note_id)
    return {"note_id": note.id, "title": note.title, "durable": store.durable}


@mcp.tool()
def write_note(note_id: str, content: str) -> dict:
    """Replace the plaintext body of a note.

    Args:
        note_id: Id of the note to overwrite.
        content: The full new body, as plain text.

    Returns:
        Dictionary with the note id and its update timestamp.
    """
    logger.info("Tool write_note invoked — id=%s, chars=%d", note_id, len(content))
    note = store.update_content(note_id, content)
    if note is None:
        return _not_found(note_id)
    return {"note_id": note.id, "updated_at": note.updated_at, "durable": store.durable}


@mcp.tool()
def delete_note(note_id: str) -> dict:
    """Delete a note.  Deleting the last note leaves a fresh empty one.

    Args:
        note_id: Id of the note to delete.

    Returns:
        Dictionary with the remaining note count and the active note id.
    """
    logger.info("Tool delete_note invoked — id=%s", note_id)
    if not store.delete(note_id):
        return _not_found(note_id)
    return {
        "deleted": note_id,
        "active_id": store.active_id,
        "total_notes": store.count,
        "durable": store.durable,
    }


@mcp.tool()
def read_active_note() -> dict:
    """Return the active note with word, character and line counts.

    Use this tool when the user refers to "my note" or "the current note".

    Returns:
        Dictionary with the note fields and its statistics.
    """
    note = store.active_note()
    stats = document_stats(note.content)
    logger.info("Tool read_active_note invoked — id=%s", note.id)
    return {
        "note": note.model_dump(by_alias=True),
        "stats": {
            "words": stats.words,
            "characters": stats.characters,
            "lines": stats.lines,
            "reading_time": stats.reading_label,
        },
    }


@mcp.tool()
def transform_text(text: str, operation: str) -> dict:
    """Apply a text utility to the given text.  Nothing is stored.

    Args:
        text: The text to transform.
        operation: One of uppercase, lowercase, titleCase, removeLineBreaks,
            removeExtraSpaces, removeDuplicateLines.

    Returns:
        Dictionary with the operation and the transformed text.
    """
    logger.info("Tool transform_text invoked — operation=%s", operation)
    try:
        result = transform(text, operation)
    except ValueError:
        return {
            "operation": operation,
            "text": text,
            "error": f"Unknown operation '{operation}'. Use one of: {_OPERATIONS}.",
        }
    return {"operation": operation, "text": result}


@mcp.tool()
def health_check() -> dict:
    """Check whether the Notepad server is healthy.

    Returns:
        Dictionary with server status, note count, and timestamp.
    """
    logger.info("Tool health_check invoked")
    return {
        "status": "healthy",
        "server": "notepad",
        "total_notes": store.count,
        "durable": store.durable,
        "timestamp": datetime.now(UTC).isoformat(),
    }


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    logger.info("Starting Notepad MCP server on port %d ...", settings.mcp_port)
    mcp.run(transport="sse")
