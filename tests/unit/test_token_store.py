"""Unit tests for TokenStore (refresh tokens + access-token blacklist)."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest
from jose import jwt

from config.settings import settings
from src.mn_cache.domain.store import StoreUnavailableError
from src.mn_cache.infrastructure.memory_store import InMemoryStore
from src.mn_common.errors import SessionStoreUnavailableError
from src.mn_gateway.auth.jwt_handler import (
    ACCESS_TOKEN_TTL_SECONDS,
    create_access_token,
    create_refresh_token,
)
from src.mn_gateway.auth.token_store import TokenStore, blacklist_key, refresh_key


def _expired_access_token() -> str:
    past = datetime.now(UTC) - timedelta(minutes=5)
    payload = {"sub": "1", "type": "access", "jti": "x", "iat": past - timedelta(minutes=30), "exp": past}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


@pytest.fixture
def kv() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def tokens(kv: InMemoryStore) -> TokenStore:
    return TokenStore(kv)


@pytest.fixture
def broken_tokens() -> TokenStore:
    store = AsyncMock()
    for method in ("get", "set", "delete", "exists", "ttl"):
        setattr(store, method, AsyncMock(side_effect=StoreUnavailableError("down")))
    return TokenStore(store)


class TestRefreshTokens:
    async def test_stored_token_validates_with_remaining_ttl(self, tokens: TokenStore) -> None:
        token = create_refresh_token(1)
        await tokens.store_refresh_token(1, token, 3600)

        check = await tokens.validate_refresh_token(1, token)

        assert check.valid is True
        assert check.remaining_ttl is not None
        assert 0 < check.remaining_ttl <= 3600

    async def test_superseded_token_is_rejected(self, tokens: TokenStore) -> None:
        first = create_refresh_token(1)
        second = create_refresh_token(1)
        await tokens.store_refresh_token(1, first, 3600)
        await tokens.store_refresh_token(1, second, 3600)

        assert (await tokens.validate_refresh_token(1, first)).valid is False
        assert (await tokens.validate_refresh_token(1, second)).valid is True

    async def test_unknown_account_is_rejected(self, tokens: TokenStore) -> None:
        check = await tokens.validate_refresh_token(99, create_refresh_token(99))
        assert check.valid is False
        assert check.remaining_ttl is None

    async def test_revoke(self, tokens: TokenStore, kv: InMemoryStore) -> None:
        token = create_refresh_token(1)
        await tokens.store_refresh_token(1, token, 3600)

        assert await tokens.revoke_refresh_token(1) is True
        assert await kv.exists(refresh_key(1)) is False
        assert (await tokens.validate_refresh_token(1, token)).valid is False


class TestBlacklist:
    async def test_blacklisted_immediately(self, tokens: TokenStore) -> None:
        token = create_access_token(1)
        assert await tokens.is_blacklisted(token) is False

        assert await tokens.blacklist_access_token(token) is True
        assert await tokens.is_blacklisted(token) is True

    async def test_ttl_never_exceeds_token_lifetime(self, tokens: TokenStore, kv: InMemoryStore) -> None:
        token = create_access_token(1)
        await tokens.blacklist_access_token(token)

        ttl = await kv.ttl(blacklist_key(token))
        assert ttl is not None
        assert 0 < ttl <= ACCESS_TOKEN_TTL_SECONDS

    async def test_expired_token_is_a_noop(self, tokens: TokenStore, kv: InMemoryStore) -> None:
        token = _expired_access_token()

        assert await tokens.blacklist_access_token(token) is False
        assert await kv.exists(blacklist_key(token)) is False


class TestStoreUnavailable:
    async def test_blacklist_check_fails_closed(self, broken_tokens: TokenStore) -> None:
        with pytest.raises(SessionStoreUnavailableError):
            await broken_tokens.is_blacklisted(create_access_token(1))

    async def test_refresh_validation_fails_closed(self, broken_tokens: TokenStore) -> None:
        with pytest.raises(SessionStoreUnavailableError):
            await broken_tokens.validate_refresh_token(1, create_refresh_token(1))

    async def test_store_and_blacklist_raise(self, broken_tokens: TokenStore) -> None:
        with pytest.raises(SessionStoreUnavailableError):
            await broken_tokens.store_refresh_token(1, "t", 10)
        with pytest.raises(SessionStoreUnavailableError):
            await broken_tokens.blacklist_access_token(create_access_token(1))
