"""Integration-test fixtures.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool and the Redis pool stay valid across the
entire test session.

Pre-condition: PostgreSQL and Redis running, `alembic upgrade head` applied.
Run: pytest -m integration
"""

import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.main import create_app
from src.mn_cache.infrastructure.redis_store import RedisStore
from src.mn_common.redis_client import create_redis


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def redis_store() -> RedisStore:
    store = RedisStore(create_redis())
    yield store
    await store.close()


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def app(redis_store: RedisStore) -> FastAPI:  # type: ignore[override]
    return create_app(redis_store)


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client(app: FastAPI) -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client — keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

