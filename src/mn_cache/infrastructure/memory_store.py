"""InMemoryStore — process-local KeyValueStore.

Used when CACHE_BACKEND=memory (single worker, local development) and as the
test double. Expiry is evaluated lazily against an injectable monotonic clock,
so tests can advance time without sleeping. Every SWEEP_EVERY writes the
whole dict is purged of expired entries, so keys that are never read again
(one-off query variants, blacklisted tokens) do not accumulate.
"""

import fnmatch
import math
import time
from collections.abc import Callable

SWEEP_EVERY = 256


class InMemoryStore:
    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._data: dict[str, tuple[str, float | None]] = {}
        self._writes = 0

    def _live(self, key: str) -> tuple[str, float | None] | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        _, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._data[key]
            return None
        return entry

    async def get(self, key: str) -> str | None:
        entry = self._live(key)
        return entry[0] if entry else None

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._data[key] = (value, self._clock() + ttl_seconds)
        self._writes += 1
        if self._writes % SWEEP_EVERY == 0:
            self.purge_expired()

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self._live(key) is not None:
                del self._data[key]
                removed += 1
        return removed

    async def scan(self, pattern: str) -> list[str]:
        return [k for k in list(self._data) if self._live(k) and fnmatch.fnmatchcase(k, pattern)]

    async def exists(self, key: str) -> bool:
        return self._live(key) is not None

    async def ttl(self, key: str) -> int | None:
        entry = self._live(key)
        if entry is None or entry[1] is None:
            return None
        return math.ceil(entry[1] - self._clock())

    def purge_expired(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        now = self._clock()
        expired = [k for k, (_, exp) in self._data.items() if exp is not None and now >= exp]
        for key in expired:
            del self._data[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._data)

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self._data.clear()
