"""Domain models for mn_todos — pure dataclasses, no business logic."""

from dataclasses import dataclass, field
from datetime import datetime

from src.mn_common.enums import TodoPriority


@dataclass
class Todo:
    id: int
    user_id: int
    text: str
    completed: bool = False
    completed_at: datetime | None = None
    priority: TodoPriority = TodoPriority.MEDIUM
    due_date: datetime | None = None
    category: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class TodoFilter:
    completed: bool | None = None
    priority: TodoPriority | None = None
    category: str | None = None


@dataclass
class TodoStats:
    total: int = 0
    completed: int = 0
    pending: int = 0


@dataclass
class GroupCount:
    """Todo counts for one priority or category value."""

    key: str
    count: int
    completed: int


@dataclass
class TodoSummary:
    general: TodoStats
    by_priority: list[GroupCount] = field(default_factory=list)
    by_category: list[GroupCount] = field(default_factory=list)
