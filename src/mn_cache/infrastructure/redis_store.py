"""RedisStore — KeyValueStore backed by redis.asyncio.

Pattern enumeration uses a SCAN cursor loop instead of KEYS so a large
keyspace never blocks the server.
"""

import logging

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from src.mn_cache.domain.store import StoreUnavailableError

logger = logging.getLogger(__name__)

_SCAN_BATCH = 100


class RedisStore:
    def __init__(self, client: aioredis.Redis) -> None:
        self._redis = client

    async def get(self, key: str) -> str | None:
        try:
            return await self._redis.get(key)
        except RedisError as e:
            raise StoreUnavailableError(f"GET {key}: {e}") from e

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            await self._redis.set(key, value, ex=ttl_seconds)
        except RedisError as e:
            raise StoreUnavailableError(f"SET {key}: {e}") from e

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        try:
            return int(await self._redis.delete(*keys))
        except RedisError as e:
            raise StoreUnavailableError(f"DEL ({len(keys)} keys): {e}") from e

    async def scan(self, pattern: str) -> list[str]:
        found: list[str] = []
        cursor = 0
        try:
            while True:
                cursor, keys = await self._redis.scan(cursor, match=pattern, count=_SCAN_BATCH)
                found.extend(keys)
                if cursor == 0:
                    break
        except RedisError as e:
            raise StoreUnavailableError(f"SCAN {pattern}: {e}") from e
        return found

    async def exists(self, key: str) -> bool:
        try:
            return bool(await self._redis.exists(key))
        except RedisError as e:
            raise StoreUnavailableError(f"EXISTS {key}: {e}") from e

    async def ttl(self, key: str) -> int | None:
        """Remaining TTL in seconds; None if the key is absent or has no expiry."""
        try:
            remaining = await self._redis.ttl(key)
        except RedisError as e:
            raise StoreUnavailableError(f"TTL {key}: {e}") from e
        # -2: key missing, -1: key without expiry
        return remaining if remaining >= 0 else None

    async def ping(self) -> bool:
        try:
            return bool(await self._redis.ping())
        except RedisError as e:
            logger.warning("Redis ping failed: %s", e)
            return False

    async def close(self) -> None:
        try:
            await self._redis.aclose()
            logger.info("Redis connection closed")
        except RedisError as e:
            logger.error("Error closing Redis: %s", e)
