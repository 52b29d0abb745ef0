from __future__ import annotations

from typing import Protocol


class CacheStore(Protocol):
    """Namespaced key/value store with per-entry TTL.

    Values are serialized strings, so ``get`` returning ``None`` always means
    "not found" and a found entry may still hold a falsy payload.
    Implementations raise ``StoreUnavailableError`` when the backend fails.
    """

    def get(self, namespace: str, key: str) -> str | None: ...

    def put(self, namespace: str, key: str, value: str, ttl_seconds: int) -> bool: ...

    def invalidate(self, namespace: str, key: str | None = None) -> bool: ...
