"""NoteApplicationService — owner-scoped CRUD over NoteRepositoryProtocol.

Writes commit inside the service (`try: ... commit / except: rollback`).
Cache invalidation is not done here: CacheInvalidationMiddleware clears the
owner's cached note reads once a write has returned 2xx.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.mn_common.errors import NoteNotFoundError
from src.mn_common.pagination import Pagination, page_offset
from src.mn_notes.application.schemas import (
    NoteCreateRequest,
    NoteListResponse,
    NoteOut,
    NoteUpdateRequest,
)
from src.mn_notes.domain.models import Note, NoteFilter
from src.mn_notes.domain.repository import NoteRepositoryProtocol
from src.mn_notes.infrastructure.persistence import NoteRepository


class NoteApplicationService:
    def __init__(self, repo: NoteRepositoryProtocol | None = None) -> None:
        self._repo: NoteRepositoryProtocol = repo or NoteRepository()

    async def list_notes(
        self,
        db: AsyncSession,
        user_id: int,
        filters: NoteFilter,
        page: int,
        limit: int,
    ) -> NoteListResponse:
        notes, total = await self._repo.list_notes(
            db, user_id, filters, limit, page_offset(page, limit)
        )
        return NoteListResponse(
            notes=[NoteOut.from_domain(n) for n in notes],
            pagination=Pagination.build(page, limit, total),
        )

    async def get_note(self, db: AsyncSession, user_id: int, note_id: int) -> NoteOut:
        return NoteOut.from_domain(await self._load(db, user_id, note_id))

    async def create_note(
        self, db: AsyncSession, user_id: int, body: NoteCreateRequest
    ) -> NoteOut:
        try:
            note = await self._repo.create_note(
                db,
                user_id,
                body.title,
                body.text,
                body.tags,
                body.is_pinned,
                body.is_archived,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return NoteOut.from_domain(note)

    async def update_note(
        self, db: AsyncSession, user_id: int, note_id: int, body: NoteUpdateRequest
    ) -> NoteOut:
        note = await self._load(db, user_id, note_id)
        for field, value in body.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(note, field, value)
        return await self._save(db, note)

    async def toggle_pin(self, db: AsyncSession, user_id: int, note_id: int) -> NoteOut:
        note = await self._load(db, user_id, note_id)
        note.is_pinned = not note.is_pinned
        return await self._save(db, note)

    async def delete_note(self, db: AsyncSession, user_id: int, note_id: int) -> None:
        try:
            deleted = await self._repo.delete_note(db, user_id, note_id)
            if not deleted:
                raise NoteNotFoundError(note_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    async def _load(self, db: AsyncSession, user_id: int, note_id: int) -> Note:
        note = await self._repo.get_note(db, user_id, note_id)
        if note is None:
            raise NoteNotFoundError(note_id)
        return note

    async def _save(self, db: AsyncSession, note: Note) -> NoteOut:
        try:
            saved = await self._repo.update_note(db, note)
            if saved is None:
                raise NoteNotFoundError(note.id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return NoteOut.from_domain(saved)
