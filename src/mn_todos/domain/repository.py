"""Repository Protocol for todos. Every method is scoped by owner."""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mn_common.enums import TodoPriority
from src.mn_todos.domain.models import Todo, TodoFilter, TodoStats, TodoSummary


class TodoRepositoryProtocol(Protocol):
    async def list_todos(
        self,
        db: AsyncSession,
        user_id: int,
        filters: TodoFilter,
        limit: int,
        offset: int,
    ) -> tuple[list[Todo], int]: ...

    async def get_stats(self, db: AsyncSession, user_id: int) -> TodoStats:
        """Counts over all of the owner's todos, ignoring list filters."""
        ...

    async def get_summary(self, db: AsyncSession, user_id: int) -> TodoSummary: ...

    async def get_todo(self, db: AsyncSession, user_id: int, todo_id: int) -> Todo | None: ...

    async def create_todo(
        self,
        db: AsyncSession,
        user_id: int,
        text: str,
        priority: TodoPriority,
        due_date: datetime | None,
        category: str | None,
    ) -> Todo: ...

    async def update_todo(self, db: AsyncSession, todo: Todo) -> Todo | None: ...

    async def delete_todo(self, db: AsyncSession, user_id: int, todo_id: int) -> bool: ...
