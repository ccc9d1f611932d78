"""Session store: refresh tokens and the access-token blacklist.

Keys:
    refresh_token:{account_id}  → the account's current refresh token
    blacklist:{access_token}    → "revoked", expires together with the token

One refresh token per account: storing a new one supersedes the previous
token, so only the most recent login can refresh.

Every backend failure is raised as SessionStoreUnavailableError. Callers that
may proceed without the store (login, registration) catch it; revocation
checks and refresh validation let it propagate, so the request is rejected
with 503 instead of being treated as valid.
"""

import logging
from dataclasses import dataclass

from src.mn_cache.domain.store import KeyValueStore, StoreUnavailableError
from src.mn_common.datetime_utils import seconds_until
from src.mn_common.errors import SessionStoreUnavailableError
from src.mn_gateway.auth.jwt_handler import token_expiry

logger = logging.getLogger(__name__)

REFRESH_KEY_PREFIX = "refresh_token"
BLACKLIST_KEY_PREFIX = "blacklist"
_REVOKED = "revoked"


def refresh_key(account_id: int | str) -> str:
    return f"{REFRESH_KEY_PREFIX}:{account_id}"


def blacklist_key(token: str) -> str:
    return f"{BLACKLIST_KEY_PREFIX}:{token}"


@dataclass(frozen=True)
class RefreshTokenCheck:
    valid: bool
    remaining_ttl: int | None = None


class TokenStore:
    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    async def store_refresh_token(self, account_id: int | str, token: str, ttl_seconds: int) -> None:
        try:
            await self._store.set(refresh_key(account_id), token, ttl_seconds)
        except StoreUnavailableError as e:
            logger.error("Failed to store refresh token for account %s: %s", account_id, e)
            raise SessionStoreUnavailableError() from e

    async def validate_refresh_token(self, account_id: int | str, token: str) -> RefreshTokenCheck:
        key = refresh_key(account_id)
        try:
            stored = await self._store.get(key)
            if stored is None or stored != token:
                return RefreshTokenCheck(valid=False)
            remaining = await self._store.ttl(key)
        except StoreUnavailableError as e:
            logger.error("Refresh token check failed for account %s: %s", account_id, e)
            raise SessionStoreUnavailableError() from e
        return RefreshTokenCheck(valid=True, remaining_ttl=remaining)

    async def revoke_refresh_token(self, account_id: int | str) -> bool:
        try:
            return await self._store.delete(refresh_key(account_id)) > 0
        except StoreUnavailableError as e:
            logger.error("Failed to revoke refresh token for account %s: %s", account_id, e)
            raise SessionStoreUnavailableError() from e

    async def blacklist_access_token(self, token: str) -> bool:
        """Revoke an access token until its own expiry.

        Returns False (and writes nothing) if the token has already expired.
        The TTL is derived from the token's `exp` claim, never from a fixed
        duration, so blacklisting twice cannot extend the entry.
        """
        ttl = seconds_until(token_expiry(token))
        if ttl <= 0:
            return False
        try:
            await self._store.set(blacklist_key(token), _REVOKED, ttl)
        except StoreUnavailableError as e:
            logger.error("Failed to blacklist access token: %s", e)
            raise SessionStoreUnavailableError() from e
        return True

    async def is_blacklisted(self, token: str) -> bool:
        try:
            return await self._store.exists(blacklist_key(token))
        except StoreUnavailableError as e:
            logger.error("Blacklist check failed: %s", e)
            raise SessionStoreUnavailableError() from e
