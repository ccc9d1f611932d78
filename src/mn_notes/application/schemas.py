"""Pydantic schemas for mn_notes requests and responses."""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints

from src.mn_common.pagination import Pagination
from src.mn_notes.domain.models import Note

Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
Body = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=5000)]
Tag = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=20)]


class NoteCreateRequest(BaseModel):
    title: Title
    text: Body
    tags: list[Tag] = Field(default_factory=list)
    is_pinned: bool = False
    is_archived: bool = False


class NoteUpdateRequest(BaseModel):
    """Partial update: omitted (or null) fields keep their current value."""

    title: Title | None = None
    text: Body | None = None
    tags: list[Tag] | None = None
    is_pinned: bool | None = None
    is_archived: bool | None = None


class NoteOut(BaseModel):
    id: int
    title: str
    text: str
    tags: list[str]
    is_pinned: bool
    is_archived: bool
    user_id: int
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_domain(cls, note: Note) -> "NoteOut":
        return cls(
            id=note.id,
            title=note.title,
            text=note.text,
            tags=list(note.tags),
            is_pinned=note.is_pinned,
            is_archived=note.is_archived,
            user_id=note.user_id,
            created_at=note.created_at,
            updated_at=note.updated_at,
        )


class NoteListResponse(BaseModel):
    notes: list[NoteOut]
    pagination: Pagination
