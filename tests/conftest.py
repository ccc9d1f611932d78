"""Shared test fixtures.

Environment defaults are set before anything imports config.settings:
JWT_SECRET has no default, and unit tests never talk to Redis.
"""

import os

os.environ.setdefault("JWT_SECRET", "unit-test-secret-not-for-production")
os.environ.setdefault("CACHE_BACKEND", "memory")

from dataclasses import dataclass  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from src.main import create_app  # noqa: E402
from src.mn_cache.infrastructure.memory_store import InMemoryStore  # noqa: E402
from src.mn_common.database import get_db_session  # noqa: E402
from src.mn_gateway.auth.dependencies import get_account_repository  # noqa: E402
from src.mn_notes.api.router import get_note_service  # noqa: E402
from src.mn_notes.application.service import NoteApplicationService  # noqa: E402
from src.mn_todos.api.router import get_todo_service  # noqa: E402
from src.mn_todos.application.service import TodoApplicationService  # noqa: E402
from tests.fakes import (  # noqa: E402
    FakeSession,
    InMemoryAccountRepository,
    InMemoryNoteRepository,
    InMemoryTodoRepository,
)


@dataclass
class Repos:
    accounts: InMemoryAccountRepository
    notes: InMemoryNoteRepository
    todos: InMemoryTodoRepository


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def repos() -> Repos:
    return Repos(
        accounts=InMemoryAccountRepository(),
        notes=InMemoryNoteRepository(),
        todos=InMemoryTodoRepository(),
    )


@pytest.fixture
def app(store: InMemoryStore, repos: Repos) -> FastAPI:
    """Full application wired to in-memory storage (no PostgreSQL, no Redis)."""
    application = create_app(store)
    application.dependency_overrides[get_db_session] = FakeSession
    application.dependency_overrides[get_account_repository] = lambda: repos.accounts
    application.dependency_overrides[get_note_service] = lambda: NoteApplicationService(repos.notes)
    application.dependency_overrides[get_todo_service] = lambda: TodoApplicationService(repos.todos)
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

