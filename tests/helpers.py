"""HTTP helpers shared by the API-level tests."""

import uuid

from httpx import AsyncClient


async def register(client: AsyncClient, username: str = "alice", password: str = "secret1") -> dict:
    """Register an account and return the response `data` (user + tokens)."""
    resp = await client.post(
        "/api/auth/register",
        json={
            "name": username.title(),
            "email": f"{username}@example.com",
            "username": username,
            "password": password,
        },
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


async def login(client: AsyncClient, username: str = "alice", password: str = "secret1") -> dict:
    resp = await client.post("/api/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def unique_user() -> dict[str, str]:
    """Generate unique credentials to avoid test pollution in a shared database."""
    uid = uuid.uuid4().hex[:8]
    return {
        "name": f"Test {uid}",
        "username": f"user_{uid}",
        "email": f"test_{uid}@example.com",
        "password": "TestPass1",
    }


async def register_unique(client: AsyncClient) -> tuple[dict[str, str], dict]:
    """Register a fresh account; returns (credentials, response data)."""
    user = unique_user()
    resp = await client.post("/api/auth/register", json=user)
    assert resp.status_code == 201, resp.text
    return user, resp.json()["data"]
