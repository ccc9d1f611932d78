"""Key-value store Protocol — the only surface the cache and session code use.

Each operation is atomic on its own; callers never rely on multi-key
transactions. Implementations raise StoreUnavailableError for any backend
failure so callers can decide per call site whether to swallow or propagate.
"""

from typing import Protocol


class StoreUnavailableError(Exception):
    """The key-value backend could not complete an operation."""


class KeyValueStore(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str, ttl_seconds: int) -> None: ...

    async def delete(self, *keys: str) -> int: ...

    async def scan(self, pattern: str) -> list[str]: ...

    async def exists(self, key: str) -> bool: ...

    async def ttl(self, key: str) -> int | None: ...

    async def ping(self) -> bool: ...

    async def close(self) -> None: ...
