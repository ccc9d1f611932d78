"""ResponseCache — read-through storage and write invalidation over a KeyValueStore.

Every method is best-effort: a store failure is logged and reported as a
miss (lookup), ignored (save) or as zero keys removed (invalidate). The
request path never fails because the cache is down.
"""

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from src.mn_cache.domain.keys import invalidation_pattern
from src.mn_cache.domain.store import KeyValueStore, StoreUnavailableError

logger = logging.getLogger(__name__)


@dataclass
class CachedResponse:
    status_code: int
    body: Any


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    stores: int = 0
    invalidated: int = 0
    errors: int = 0


class ResponseCache:
    def __init__(self, store: KeyValueStore, ttl_seconds: int, prefix: str) -> None:
        self._store = store
        self.ttl_seconds = ttl_seconds
        self.prefix = prefix
        self._stats = CacheStats()

    async def lookup(self, key: str) -> CachedResponse | None:
        try:
            raw = await self._store.get(key)
        except StoreUnavailableError as e:
            self._stats.errors += 1
            logger.warning("Cache lookup failed for %s: %s", key, e)
            return None
        if raw is None:
            self._stats.misses += 1
            return None
        try:
            entry = json.loads(raw)
            cached = CachedResponse(status_code=int(entry["status_code"]), body=entry["body"])
        except (ValueError, KeyError, TypeError):
            # Unreadable entry: treat as a miss, the next store overwrites it
            self._stats.errors += 1
            logger.warning("Discarding malformed cache entry %s", key)
            return None
        self._stats.hits += 1
        return cached

    async def save(self, key: str, status_code: int, body: Any) -> None:
        raw = json.dumps({"status_code": status_code, "body": body}, separators=(",", ":"))
        try:
            await self._store.set(key, raw, self.ttl_seconds)
        except StoreUnavailableError as e:
            self._stats.errors += 1
            logger.warning("Cache store failed for %s: %s", key, e)
            return
        self._stats.stores += 1

    async def invalidate(self, identity: str, resource: str) -> int:
        """Delete every cached read of `resource` made by `identity`."""
        pattern = invalidation_pattern(self.prefix, resource, identity)
        try:
            keys = await self._store.scan(pattern)
            removed = await self._store.delete(*keys) if keys else 0
        except StoreUnavailableError as e:
            self._stats.errors += 1
            logger.error("Cache invalidation failed for %s: %s", pattern, e)
            return 0
        self._stats.invalidated += removed
        logger.debug("Invalidated %d key(s) matching %s", removed, pattern)
        return removed

    async def invalidate_identity(self, identity: str, resources: Iterable[str]) -> int:
        removed = 0
        for resource in resources:
            removed += await self.invalidate(identity, resource)
        return removed

    def stats(self) -> dict[str, int]:
        return {
            "hits": self._stats.hits,
            "misses": self._stats.misses,
            "stores": self._stats.stores,
            "invalidated": self._stats.invalidated,
            "errors": self._stats.errors,
        }
