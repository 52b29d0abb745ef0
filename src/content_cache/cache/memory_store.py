from __future__ import annotations

import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


class MemoryCacheStore:
    """Non-persistent ``CacheStore`` living for the lifetime of the process.

    Useful as a per-request object cache or in tests. Expired entries are
    dropped when they are next read.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._entries: dict[tuple[str, str], tuple[str, float]] = {}

    def get(self, namespace: str, key: str) -> str | None:
        entry = self._entries.get((namespace, key))
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[(namespace, key)]
            return None
        return value

    def put(self, namespace: str, key: str, value: str, ttl_seconds: int) -> bool:
        self._entries[(namespace, key)] = (value, self._clock() + ttl_seconds)
        return True

    def invalidate(self, namespace: str, key: str | None = None) -> bool:
        if key is not None:
            return self._entries.pop((namespace, key), None) is not None
        to_remove = [k for k in self._entries if k[0] == namespace]
        for k in to_remove:
            del self._entries[k]
        return bool(to_remove)

    def __len__(self) -> int:
        return len(self._entries)
