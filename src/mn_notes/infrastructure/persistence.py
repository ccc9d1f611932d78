"""NoteRepository — concrete implementation of NoteRepositoryProtocol.

All queries use raw text() SQL (no ORM); the notes table is owned by
alembic/versions/003_create_notes.py.
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mn_notes.domain.models import Note, NoteFilter

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_COLUMNS = "id, user_id, title, text, tags, is_pinned, is_archived, created_at, updated_at"

_FILTER = """
    WHERE user_id = :user_id
      AND is_archived = :archived
      AND (CAST(:pinned AS BOOLEAN) IS NULL OR is_pinned = CAST(:pinned AS BOOLEAN))
      AND (
          CAST(:search AS TEXT) IS NULL
          OR title ILIKE CAST(:search AS TEXT)
          OR text ILIKE CAST(:search AS TEXT)
      )
"""

_LIST_NOTES_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM notes
    {_FILTER}
    ORDER BY is_pinned DESC, created_at DESC, id DESC
    LIMIT :limit OFFSET :offset
""")

_COUNT_NOTES_SQL = text(f"""
    SELECT COUNT(*) FROM notes
    {_FILTER}
""")

_GET_NOTE_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM notes
    WHERE id = :note_id AND user_id = :user_id
""")

_INSERT_NOTE_SQL = text(f"""
    INSERT INTO notes (user_id, title, text, tags, is_pinned, is_archived)
    VALUES (:user_id, :title, :text, CAST(:tags AS TEXT[]), :is_pinned, :is_archived)
    RETURNING {_COLUMNS}
""")

_UPDATE_NOTE_SQL = text(f"""
    UPDATE notes
    SET title = :title,
        text = :text,
        tags = CAST(:tags AS TEXT[]),
        is_pinned = :is_pinned,
        is_archived = :is_archived
    WHERE id = :note_id AND user_id = :user_id
    RETURNING {_COLUMNS}
""")

_DELETE_NOTE_SQL = text("""
    DELETE FROM notes WHERE id = :note_id AND user_id = :user_id
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_note(row: object) -> Note:
    return Note(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        title=row.title,  # type: ignore[attr-defined]
        text=row.text,  # type: ignore[attr-defined]
        tags=list(row.tags or []),  # type: ignore[attr-defined]
        is_pinned=row.is_pinned,  # type: ignore[attr-defined]
        is_archived=row.is_archived,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _like(term: str | None) -> str | None:
    if not term:
        return None
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class NoteRepository:
    async def list_notes(
        self,
        db: AsyncSession,
        user_id: int,
        filters: NoteFilter,
        limit: int,
        offset: int,
    ) -> tuple[list[Note], int]:
        params = {
            "user_id": user_id,
            "archived": filters.archived,
            "pinned": filters.pinned,
            "search": _like(filters.search),
        }
        rows = await db.execute(_LIST_NOTES_SQL, {**params, "limit": limit, "offset": offset})
        total = await db.execute(_COUNT_NOTES_SQL, params)
        return [_row_to_note(r) for r in rows.fetchall()], int(total.scalar_one())

    async def get_note(self, db: AsyncSession, user_id: int, note_id: int) -> Note | None:
        result = await db.execute(_GET_NOTE_SQL, {"note_id": note_id, "user_id": user_id})
        row = result.fetchone()
        return _row_to_note(row) if row is not None else None

    async def create_note(
        self,
        db: AsyncSession,
        user_id: int,
        title: str,
        text: str,
        tags: list[str],
        is_pinned: bool,
        is_archived: bool,
    ) -> Note:
        result = await db.execute(
            _INSERT_NOTE_SQL,
            {
                "user_id": user_id,
                "title": title,
                "text": text,
                "tags": tags,
                "is_pinned": is_pinned,
                "is_archived": is_archived,
            },
        )
        return _row_to_note(result.fetchone())

    async def update_note(self, db: AsyncSession, note: Note) -> Note | None:
        result = await db.execute(
            _UPDATE_NOTE_SQL,
            {
                "note_id": note.id,
                "user_id": note.user_id,
                "title": note.title,
                "text": note.text,
                "tags": note.tags,
                "is_pinned": note.is_pinned,
                "is_archived": note.is_archived,
            },
        )
        row = result.fetchone()
        return _row_to_note(row) if row is not None else None

    async def delete_note(self, db: AsyncSession, user_id: int, note_id: int) -> bool:
        result = await db.execute(_DELETE_NOTE_SQL, {"note_id": note_id, "user_id": user_id})
        return bool(result.rowcount)
