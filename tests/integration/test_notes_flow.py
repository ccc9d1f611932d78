"""Integration tests for notes + the Redis read-through cache.

Run: pytest -m integration tests/integration/test_notes_flow.py -v
Pre-condition: alembic upgrade head
"""

import pytest
from httpx import AsyncClient

from config.settings import settings
from src.mn_cache.domain.keys import invalidation_pattern
from src.mn_cache.infrastructure.redis_store import RedisStore
from tests.helpers import bearer, register_unique

pytestmark = [pytest.mark.integration, pytest.mark.asyncio(loop_scope="session")]


async def _headers(client: AsyncClient) -> tuple[dict[str, str], int]:
    _, data = await register_unique(client)
    return bearer(data["access_token"]), data["user"]["id"]


class TestNotesCrud:
    async def test_create_list_update_cycle(self, client: AsyncClient) -> None:
        headers, _ = await _headers(client)
        created = await client.post(
            "/api/notes", json={"title": "A", "text": "B", "tags": ["x", "y"]}, headers=headers
        )
        assert created.status_code == 201
        note = created.json()["data"]["note"]
        assert note["tags"] == ["x", "y"]

        first = await client.get("/api/notes", headers=headers)
        second = await client.get("/api/notes", headers=headers)
        assert first.headers["X-Cache"] == "MISS"
        assert second.headers["X-Cache"] == "HIT"

        await client.put(f"/api/notes/{note['id']}", json={"title": "C"}, headers=headers)
        after = await client.get("/api/notes", headers=headers)
        assert after.headers["X-Cache"] == "MISS"
        assert after.json()["data"]["notes"][0]["title"] == "C"

    async def test_search_escapes_wildcards(self, client: AsyncClient) -> None:
        headers, _ = await _headers(client)
        await client.post("/api/notes", json={"title": "100% done", "text": "t"}, headers=headers)
        await client.post("/api/notes", json={"title": "1000 things", "text": "t"}, headers=headers)

        resp = await client.get("/api/notes", params={"search": "100%"}, headers=headers)

        titles = [n["title"] for n in resp.json()["data"]["notes"]]
        assert titles == ["100% done"]

    async def test_pinned_first(self, client: AsyncClient) -> None:
        headers, _ = await _headers(client)
        await client.post("/api/notes", json={"title": "plain", "text": "t"}, headers=headers)
        await client.post("/api/notes", json={"title": "pinned", "text": "t", "is_pinned": True}, headers=headers)
        await client.post("/api/notes", json={"title": "newest", "text": "t"}, headers=headers)

        resp = await client.get("/api/notes", headers=headers)

        assert [n["title"] for n in resp.json()["data"]["notes"]] == ["pinned", "newest", "plain"]

    async def test_other_accounts_note_is_not_found(self, client: AsyncClient) -> None:
        alice, _ = await _headers(client)
        bob, _ = await _headers(client)
        created = await client.post("/api/notes", json={"title": "A", "text": "B"}, headers=alice)
        note_id = created.json()["data"]["note"]["id"]

        resp = await client.get(f"/api/notes/{note_id}", headers=bob)

        assert resp.status_code == 404


class TestCacheEntries:
    async def test_entries_live_under_account_namespace(
        self, client: AsyncClient, redis_store: RedisStore
    ) -> None:
        headers, account_id = await _headers(client)
        pattern = invalidation_pattern(settings.CACHE_KEY_PREFIX, "notes", str(account_id))

        await client.get("/api/notes", headers=headers)
        await client.get("/api/notes", params={"page": 2}, headers=headers)
        keys = await redis_store.scan(pattern)
        assert len(keys) == 2
        for key in keys:
            ttl = await redis_store.ttl(key)
            assert ttl is not None and ttl <= settings.CACHE_TTL_SECONDS

        await client.post("/api/notes", json={"title": "A", "text": "B"}, headers=headers)
        assert await redis_store.scan(pattern) == []
