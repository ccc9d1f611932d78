"""TodoApplicationService — owner-scoped CRUD over TodoRepositoryProtocol.

completed_at is maintained here, never taken from the client: it is stamped
when `completed` flips to true and cleared when it flips back.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.mn_common.datetime_utils import utc_now
from src.mn_common.errors import TodoNotFoundError
from src.mn_common.pagination import Pagination, page_offset
from src.mn_todos.application.schemas import (
    TodoCreateRequest,
    TodoListResponse,
    TodoOut,
    TodoStatsOut,
    TodoSummaryResponse,
    TodoUpdateRequest,
)
from src.mn_todos.domain.models import Todo, TodoFilter
from src.mn_todos.domain.repository import TodoRepositoryProtocol
from src.mn_todos.infrastructure.persistence import TodoRepository

_NULLABLE_FIELDS = ("due_date", "category")


def set_completed(todo: Todo, completed: bool) -> None:
    if todo.completed == completed:
        return
    todo.completed = completed
    todo.completed_at = utc_now() if completed else None


class TodoApplicationService:
    def __init__(self, repo: TodoRepositoryProtocol | None = None) -> None:
        self._repo: TodoRepositoryProtocol = repo or TodoRepository()

    async def list_todos(
        self,
        db: AsyncSession,
        user_id: int,
        filters: TodoFilter,
        page: int,
        limit: int,
    ) -> TodoListResponse:
        todos, total = await self._repo.list_todos(
            db, user_id, filters, limit, page_offset(page, limit)
        )
        stats = await self._repo.get_stats(db, user_id)
        return TodoListResponse(
            todos=[TodoOut.from_domain(t) for t in todos],
            stats=TodoStatsOut.from_domain(stats),
            pagination=Pagination.build(page, limit, total),
        )

    async def get_summary(self, db: AsyncSession, user_id: int) -> TodoSummaryResponse:
        return TodoSummaryResponse.from_domain(await self._repo.get_summary(db, user_id))

    async def get_todo(self, db: AsyncSession, user_id: int, todo_id: int) -> TodoOut:
        return TodoOut.from_domain(await self._load(db, user_id, todo_id))

    async def create_todo(
        self, db: AsyncSession, user_id: int, body: TodoCreateRequest
    ) -> TodoOut:
        try:
            todo = await self._repo.create_todo(
                db, user_id, body.text, body.priority, body.due_date, body.category
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return TodoOut.from_domain(todo)

    async def update_todo(
        self, db: AsyncSession, user_id: int, todo_id: int, body: TodoUpdateRequest
    ) -> TodoOut:
        todo = await self._load(db, user_id, todo_id)
        changes = body.model_dump(exclude_unset=True)

        completed = changes.pop("completed", None)
        for field, value in changes.items():
            if value is not None or field in _NULLABLE_FIELDS:
                setattr(todo, field, value)
        if completed is not None:
            set_completed(todo, completed)
        return await self._save(db, todo)

    async def toggle(self, db: AsyncSession, user_id: int, todo_id: int) -> TodoOut:
        todo = await self._load(db, user_id, todo_id)
        set_completed(todo, not todo.completed)
        return await self._save(db, todo)

    async def delete_todo(self, db: AsyncSession, user_id: int, todo_id: int) -> None:
        try:
            deleted = await self._repo.delete_todo(db, user_id, todo_id)
            if not deleted:
                raise TodoNotFoundError(todo_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    async def _load(self, db: AsyncSession, user_id: int, todo_id: int) -> Todo:
        todo = await self._repo.get_todo(db, user_id, todo_id)
        if todo is None:
            raise TodoNotFoundError(todo_id)
        return todo

    async def _save(self, db: AsyncSession, todo: Todo) -> TodoOut:
        try:
            saved = await self._repo.update_todo(db, todo)
            if saved is None:
                raise TodoNotFoundError(todo.id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return TodoOut.from_domain(saved)
