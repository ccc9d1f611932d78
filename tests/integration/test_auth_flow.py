"""Integration tests for the auth flow (requires running PG + Redis).

Run: pytest -m integration tests/integration/test_auth_flow.py -v
Pre-condition: alembic upgrade head
"""

import pytest
from httpx import AsyncClient

from src.mn_cache.infrastructure.redis_store import RedisStore
from src.mn_gateway.auth.token_store import blacklist_key, refresh_key
from tests.helpers import bearer, register_unique, unique_user

# All tests in this module share the session-scoped event loop so that the
# module-level SQLAlchemy async engine pool stays alive across tests.
pytestmark = [pytest.mark.integration, pytest.mark.asyncio(loop_scope="session")]


class TestRegister:
    async def test_register_success(self, client: AsyncClient, redis_store: RedisStore) -> None:
        user, data = await register_unique(client)
        assert data["user"]["username"] == user["username"]
        assert data["user"]["email"] == user["email"]
        assert await redis_store.get(refresh_key(data["user"]["id"])) == data["refresh_token"]

    async def test_register_duplicate_username(self, client: AsyncClient) -> None:
        user, _ = await register_unique(client)
        resp = await client.post(
            "/api/auth/register",
            json={**user, "email": f"other_{user['username']}@example.com"},
        )
        assert resp.status_code == 400
        assert resp.json()["code"] == 1001

    async def test_register_duplicate_email(self, client: AsyncClient) -> None:
        user, _ = await register_unique(client)
        resp = await client.post(
            "/api/auth/register",
            json={**user, "username": f"x{user['username'][:15]}"},
        )
        assert resp.status_code == 400
        assert resp.json()["code"] == 1002

    async def test_register_weak_password(self, client: AsyncClient) -> None:
        resp = await client.post("/api/auth/register", json={**unique_user(), "password": "weak"})
        assert resp.status_code == 400
        assert resp.json()["errors"][0]["field"] == "password"


class TestLogin:
    async def test_login_success(self, client: AsyncClient) -> None:
        user, _ = await register_unique(client)
        resp = await client.post(
            "/api/auth/login",
            json={"username": user["username"], "password": user["password"]},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["code"] == 0
        assert body["data"]["token_type"] == "Bearer"

    async def test_login_wrong_password(self, client: AsyncClient) -> None:
        user, _ = await register_unique(client)
        resp = await client.post(
            "/api/auth/login",
            json={"username": user["username"], "password": "WrongPass1"},
        )
        assert resp.status_code == 401
        assert resp.json()["code"] == 1003

    async def test_second_login_supersedes_first(self, client: AsyncClient) -> None:
        user, _ = await register_unique(client)
        credentials = {"username": user["email"], "password": user["password"]}
        first = (await client.post("/api/auth/login", json=credentials)).json()["data"]
        second = (await client.post("/api/auth/login", json=credentials)).json()["data"]

        stale = await client.post("/api/auth/refresh", json={"refresh_token": first["refresh_token"]})
        fresh = await client.post("/api/auth/refresh", json={"refresh_token": second["refresh_token"]})

        assert stale.status_code == 401
        assert stale.json()["code"] == 1005
        assert fresh.status_code == 200


class TestLogout:
    async def test_logout_blacklists_token_with_ttl(
        self, client: AsyncClient, redis_store: RedisStore
    ) -> None:
        _, data = await register_unique(client)
        token = data["access_token"]

        resp = await client.post("/api/auth/logout", headers=bearer(token))
        me = await client.get("/api/auth/me", headers=bearer(token))

        assert resp.status_code == 200
        assert me.status_code == 401
        assert me.json()["code"] == 1006
        ttl = await redis_store.ttl(blacklist_key(token))
        assert ttl is not None and 0 < ttl <= 30 * 60
        assert await redis_store.exists(refresh_key(data["user"]["id"])) is False


class TestAccount:
    async def test_change_password_then_login(self, client: AsyncClient) -> None:
        user, data = await register_unique(client)
        resp = await client.put(
            "/api/auth/me/password",
            json={"current_password": user["password"], "new_password": "NewPass22"},
            headers=bearer(data["access_token"]),
        )
        assert resp.status_code == 200

        login = await client.post(
            "/api/auth/login", json={"username": user["username"], "password": "NewPass22"}
        )
        assert login.status_code == 200

    async def test_delete_account_removes_notes(self, client: AsyncClient) -> None:
        user, data = await register_unique(client)
        headers = bearer(data["access_token"])
        await client.post("/api/notes", json={"title": "A", "text": "B"}, headers=headers)

        resp = await client.request(
            "DELETE", "/api/auth/me", json={"password": user["password"]}, headers=headers
        )
        login = await client.post(
            "/api/auth/login", json={"username": user["username"], "password": user["password"]}
        )

        assert resp.status_code == 200
        assert login.status_code == 401


class TestHealth:
    async def test_health(self, client: AsyncClient) -> None:
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["database"] == "connected"
        assert resp.json()["store"] == "connected"
