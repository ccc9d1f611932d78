"""TodoRepository — concrete implementation of TodoRepositoryProtocol.

All queries use raw text() SQL (no ORM); the todos table is owned by
alembic/versions/004_create_todos.py.
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.
"""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mn_common.enums import TodoPriority
from src.mn_todos.domain.models import GroupCount, Todo, TodoFilter, TodoStats, TodoSummary

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_COLUMNS = (
    "id, user_id, text, completed, completed_at, priority, due_date, category, "
    "created_at, updated_at"
)

_FILTER = """
    WHERE user_id = :user_id
      AND (CAST(:completed AS BOOLEAN) IS NULL OR completed = CAST(:completed AS BOOLEAN))
      AND (CAST(:priority AS TEXT) IS NULL OR priority = CAST(:priority AS TEXT))
      AND (CAST(:category AS TEXT) IS NULL OR category = CAST(:category AS TEXT))
"""

_LIST_TODOS_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM todos
    {_FILTER}
    ORDER BY completed ASC, created_at DESC, id DESC
    LIMIT :limit OFFSET :offset
""")

_COUNT_TODOS_SQL = text(f"""
    SELECT COUNT(*) FROM todos
    {_FILTER}
""")

_STATS_SQL = text("""
    SELECT COUNT(*)                                AS total,
           COUNT(*) FILTER (WHERE completed)       AS completed,
           COUNT(*) FILTER (WHERE NOT completed)   AS pending
    FROM todos
    WHERE user_id = :user_id
""")

_BY_PRIORITY_SQL = text("""
    SELECT priority AS key,
           COUNT(*) AS total,
           COUNT(*) FILTER (WHERE completed) AS completed
    FROM todos
    WHERE user_id = :user_id
    GROUP BY priority
    ORDER BY priority
""")

_BY_CATEGORY_SQL = text("""
    SELECT category AS key,
           COUNT(*) AS total,
           COUNT(*) FILTER (WHERE completed) AS completed
    FROM todos
    WHERE user_id = :user_id AND category IS NOT NULL
    GROUP BY category
    ORDER BY category
""")

_GET_TODO_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM todos
    WHERE id = :todo_id AND user_id = :user_id
""")

_INSERT_TODO_SQL = text(f"""
    INSERT INTO todos (user_id, text, priority, due_date, category)
    VALUES (:user_id, :text, :priority, :due_date, :category)
    RETURNING {_COLUMNS}
""")

_UPDATE_TODO_SQL = text(f"""
    UPDATE todos
    SET text = :text,
        completed = :completed,
        completed_at = :completed_at,
        priority = :priority,
        due_date = :due_date,
        category = :category
    WHERE id = :todo_id AND user_id = :user_id
    RETURNING {_COLUMNS}
""")

_DELETE_TODO_SQL = text("""
    DELETE FROM todos WHERE id = :todo_id AND user_id = :user_id
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_todo(row: object) -> Todo:
    return Todo(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        text=row.text,  # type: ignore[attr-defined]
        completed=row.completed,  # type: ignore[attr-defined]
        completed_at=row.completed_at,  # type: ignore[attr-defined]
        priority=TodoPriority(row.priority),  # type: ignore[attr-defined]
        due_date=row.due_date,  # type: ignore[attr-defined]
        category=row.category,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_group(row: object) -> GroupCount:
    return GroupCount(
        key=row.key,  # type: ignore[attr-defined]
        count=int(row.total),  # type: ignore[attr-defined]
        completed=int(row.completed),  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class TodoRepository:
    async def list_todos(
        self,
        db: AsyncSession,
        user_id: int,
        filters: TodoFilter,
        limit: int,
        offset: int,
    ) -> tuple[list[Todo], int]:
        params = {
            "user_id": user_id,
            "completed": filters.completed,
            "priority": filters.priority.value if filters.priority else None,
            "category": filters.category,
        }
        rows = await db.execute(_LIST_TODOS_SQL, {**params, "limit": limit, "offset": offset})
        total = await db.execute(_COUNT_TODOS_SQL, params)
        return [_row_to_todo(r) for r in rows.fetchall()], int(total.scalar_one())

    async def get_stats(self, db: AsyncSession, user_id: int) -> TodoStats:
        row = (await db.execute(_STATS_SQL, {"user_id": user_id})).fetchone()
        if row is None:
            return TodoStats()
        return TodoStats(total=int(row.total), completed=int(row.completed), pending=int(row.pending))

    async def get_summary(self, db: AsyncSession, user_id: int) -> TodoSummary:
        general = await self.get_stats(db, user_id)
        by_priority = await db.execute(_BY_PRIORITY_SQL, {"user_id": user_id})
        by_category = await db.execute(_BY_CATEGORY_SQL, {"user_id": user_id})
        return TodoSummary(
            general=general,
            by_priority=[_row_to_group(r) for r in by_priority.fetchall()],
            by_category=[_row_to_group(r) for r in by_category.fetchall()],
        )

    async def get_todo(self, db: AsyncSession, user_id: int, todo_id: int) -> Todo | None:
        result = await db.execute(_GET_TODO_SQL, {"todo_id": todo_id, "user_id": user_id})
        row = result.fetchone()
        return _row_to_todo(row) if row is not None else None

    async def create_todo(
        self,
        db: AsyncSession,
        user_id: int,
        text: str,
        priority: TodoPriority,
        due_date: datetime | None,
        category: str | None,
    ) -> Todo:
        result = await db.execute(
            _INSERT_TODO_SQL,
            {
                "user_id": user_id,
                "text": text,
                "priority": priority.value,
                "due_date": due_date,
                "category": category,
            },
        )
        return _row_to_todo(result.fetchone())

    async def update_todo(self, db: AsyncSession, todo: Todo) -> Todo | None:
        result = await db.execute(
            _UPDATE_TODO_SQL,
            {
                "todo_id": todo.id,
                "user_id": todo.user_id,
                "text": todo.text,
                "completed": todo.completed,
                "completed_at": todo.completed_at,
                "priority": todo.priority.value,
                "due_date": todo.due_date,
                "category": todo.category,
            },
        )
        row = result.fetchone()
        return _row_to_todo(row) if row is not None else None

    async def delete_todo(self, db: AsyncSession, user_id: int, todo_id: int) -> bool:
        result = await db.execute(_DELETE_TODO_SQL, {"todo_id": todo_id, "user_id": user_id})
        return bool(result.rowcount)
