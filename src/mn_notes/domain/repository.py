"""Repository Protocol — dependency inversion for testability.

Every method is scoped by owner: a note that exists but belongs to another
account behaves exactly like a missing one.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mn_notes.domain.models import Note, NoteFilter


class NoteRepositoryProtocol(Protocol):
    async def list_notes(
        self,
        db: AsyncSession,
        user_id: int,
        filters: NoteFilter,
        limit: int,
        offset: int,
    ) -> tuple[list[Note], int]:
        """Return one page of notes plus the total matching count."""
        ...

    async def get_note(self, db: AsyncSession, user_id: int, note_id: int) -> Note | None: ...

    async def create_note(
        self,
        db: AsyncSession,
        user_id: int,
        title: str,
        text: str,
        tags: list[str],
        is_pinned: bool,
        is_archived: bool,
    ) -> Note: ...

    async def update_note(self, db: AsyncSession, note: Note) -> Note | None:
        """Persist every mutable field of `note`; None if it vanished meanwhile."""
        ...

    async def delete_note(self, db: AsyncSession, user_id: int, note_id: int) -> bool: ...
