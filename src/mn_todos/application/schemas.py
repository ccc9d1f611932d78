"""Pydantic schemas for mn_todos requests and responses."""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, StringConstraints, field_validator

from src.mn_common.enums import TodoPriority
from src.mn_common.pagination import Pagination
from src.mn_todos.domain.models import GroupCount, Todo, TodoStats, TodoSummary

TodoText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
Category = Annotated[str, StringConstraints(strip_whitespace=True, max_length=30)]


class TodoCreateRequest(BaseModel):
    text: TodoText
    priority: TodoPriority = TodoPriority.MEDIUM
    due_date: datetime | None = None
    category: Category | None = None

    @field_validator("category")
    @classmethod
    def blank_category_is_none(cls, v: str | None) -> str | None:
        return v or None


class TodoUpdateRequest(BaseModel):
    """Partial update.

    text/priority/completed: omitted or null keeps the current value.
    due_date/category: an explicit null clears the value.
    """

    text: TodoText | None = None
    priority: TodoPriority | None = None
    due_date: datetime | None = None
    category: Category | None = None
    completed: bool | None = None

    @field_validator("category")
    @classmethod
    def blank_category_is_none(cls, v: str | None) -> str | None:
        return v or None


class TodoOut(BaseModel):
    id: int
    text: str
    completed: bool
    completed_at: datetime | None
    priority: TodoPriority
    due_date: datetime | None
    category: str | None
    user_id: int
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_domain(cls, todo: Todo) -> "TodoOut":
        return cls(
            id=todo.id,
            text=todo.text,
            completed=todo.completed,
            completed_at=todo.completed_at,
            priority=todo.priority,
            due_date=todo.due_date,
            category=todo.category,
            user_id=todo.user_id,
            created_at=todo.created_at,
            updated_at=todo.updated_at,
        )


class TodoStatsOut(BaseModel):
    total: int
    completed: int
    pending: int

    @classmethod
    def from_domain(cls, stats: TodoStats) -> "TodoStatsOut":
        return cls(total=stats.total, completed=stats.completed, pending=stats.pending)


class GroupCountOut(BaseModel):
    key: str
    count: int
    completed: int

    @classmethod
    def from_domain(cls, group: GroupCount) -> "GroupCountOut":
        return cls(key=group.key, count=group.count, completed=group.completed)


class TodoListResponse(BaseModel):
    todos: list[TodoOut]
    stats: TodoStatsOut
    pagination: Pagination


class TodoSummaryResponse(BaseModel):
    general: TodoStatsOut
    by_priority: list[GroupCountOut]
    by_category: list[GroupCountOut]

    @classmethod
    def from_domain(cls, summary: TodoSummary) -> "TodoSummaryResponse":
        return cls(
            general=TodoStatsOut.from_domain(summary.general),
            by_priority=[GroupCountOut.from_domain(g) for g in summary.by_priority],
            by_category=[GroupCountOut.from_domain(g) for g in summary.by_category],
        )
