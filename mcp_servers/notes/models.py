"""Pydantic models for the Notes MCP server."""

from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

NOTE_ID_PATTERN = r"^[A-Za-z0-9_-]+$"


def _none_to_empty(value):
    return [] if value is None else value


# Tags are never null; an explicit null normalises to an empty list.
TagList = Annotated[list[str], BeforeValidator(_none_to_empty)]


class _CamelModel(BaseModel):
    """snake_case in Python, camelCase on disk and over HTTP."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NoteMetadata(_CamelModel):
    """Index entry: everything about a note except its body."""

    id: str = Field(..., pattern=NOTE_ID_PATTERN, description="Note id")
    title: str = Field(..., min_length=1, description="Note title")
    tags: TagList = Field(default_factory=list, description="List of tags")
    created_at: str = Field(..., description="ISO-8601 creation timestamp")
    updated_at: str = Field(..., description="ISO-8601 last update timestamp")


class Note(NoteMetadata):
    """A single note with metadata and content."""

    content: str = Field("", description="Note content (markdown)")

    def metadata(self) -> NoteMetadata:
        """Project the note onto its index entry."""
        return NoteMetadata.model_validate(self.model_dump(exclude={"content"}))


class NoteCreate(_CamelModel):
    """Arguments for creating a note."""

    title: str = Field(..., min_length=1, description="Note title")
    content: str = Field(..., description="Note content (supports markdown)")
    tags: TagList = Field(default_factory=list, description="Optional tags")


class NoteUpdate(_CamelModel):
    """Partial update. A field left as None keeps its previous value."""

    title: str | None = Field(None, min_length=1, description="New title")
    content: str | None = Field(None, description="New content")
    tags: list[str] | None = Field(None, description="New tags")


class NoteSearch(_CamelModel):
    """Search arguments. An empty query matches every note."""

    query: str = Field("", description="Text to match in title or content")
    tags: TagList = Field(default_factory=list, description="Required tags")

