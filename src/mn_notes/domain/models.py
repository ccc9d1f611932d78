"""Domain models for mn_notes — pure dataclasses, no business logic."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Note:
    id: int
    user_id: int
    title: str
    text: str
    tags: list[str] = field(default_factory=list)
    is_pinned: bool = False
    is_archived: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class NoteFilter:
    """List filters. archived defaults to False: the archive is opt-in."""

    search: str | None = None
    archived: bool = False
    pinned: bool | None = None
