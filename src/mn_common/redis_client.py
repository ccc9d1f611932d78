"""Redis client factory — backs the response cache and the session store.

The client is created once by the application factory and handed to
RedisStore; request code never reaches for it directly.
"""

import redis.asyncio as aioredis

from config.settings import settings


def create_redis(url: str | None = None) -> aioredis.Redis:
    """Create a Redis client with its own connection pool."""
    return aioredis.from_url(
        url or settings.REDIS_URL,
        decode_responses=True,
        socket_connect_timeout=5,
        health_check_interval=30,
    )
