"""Pydantic models for notes and the persisted note collection."""

from datetime import UTC, datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_TITLE = "Untitled Note"


def utc_now() -> str:
    """Current time as an ISO-8601 UTC timestamp."""
    return datetime.now(UTC).isoformat()


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys, accepting snake_case on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Note(CamelModel):
    """A single note: plaintext body plus metadata."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str = Field(default=DEFAULT_TITLE, min_length=1, description="Display title")
    content: str = Field(default="", description="Canonical plaintext body")
    created_at: str = Field(
        default_factory=utc_now,
        description="ISO-8601 creation timestamp",
    )
    updated_at: str = Field(
        default_factory=utc_now,
        description="ISO-8601 timestamp of the last title or content change",
    )


class NoteSnapshot(CamelModel):
    """Everything the persistence layer mirrors: the ordered notes and the active id."""

    notes: list[Note] = Field(default_factory=list)
    active_id: str = ""
