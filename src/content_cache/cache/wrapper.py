"""Read-through (cache-aside) wrappers over a CacheStore.

A lookup asks the store first. On a miss the producer runs, and its result is
stored only when the cache's ``is_cacheable`` predicate accepts it, so empty
or failed results are retried on every call until a real value exists.

Usage:
    permalinks = ReadThroughCache(
        store,
        namespace="mytheme.permalinks",
        ttl_seconds=86400,
        serializer=StringSerializer(),
    )
    url = permalinks.get(post_id, lambda key: source.get_permalink(key))

    # Content changed
    permalinks.invalidate(post_id)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypeVar, cast

from content_cache.cache.serialization import JsonSerializer
from content_cache.exceptions import ConfigurationError, StoreUnavailableError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from content_cache.cache.protocol import CacheStore
    from content_cache.cache.serialization import Serializer

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M")

DEFAULT_TTL_SECONDS = 86400

CacheKey = str | int


def is_cacheable_result(value: object) -> bool:
    """Default cacheability: reject ``None``, ``False`` and empty strings or containers."""
    if value is None or value is False:
        return False
    if isinstance(value, (str, bytes, list, tuple, dict, set, frozenset)):
        return len(value) > 0
    return True


def always_cacheable(value: object) -> bool:
    """Cacheability for results where an empty value is a legitimate answer."""
    return True


def _require_namespace(namespace: str | None) -> str:
    if not namespace:
        raise ConfigurationError("Cannot use the cache: no cache namespace was set")
    return namespace


def _lookup(
    store: CacheStore,
    namespace: str,
    cache_key: str,
    serializer: Serializer[T],
    is_hit: Callable[[T], bool] | None,
    *,
    strict: bool = False,
) -> tuple[T | None, bool]:
    """Return ``(value, found)``. Store failures and undecodable payloads count as misses.

    With ``strict`` a store failure raises ``StoreUnavailableError`` instead.
    """
    try:
        cached = store.get(namespace, cache_key)
    except StoreUnavailableError as e:
        if strict:
            raise
        logger.warning("Cache read failed for %s [key=%s], treating as miss: %s", namespace, cache_key, e)
        return None, False
    if cached is None:
        return None, False
    try:
        value = serializer.deserialize(cached)
    except Exception as e:
        # Invalid cache data - log and refetch
        logger.warning("Failed to deserialize cached %s [key=%s]: %s", namespace, cache_key, e)
        return None, False
    if is_hit is not None and not is_hit(value):
        logger.debug("Cached %s [key=%s] rejected by hit policy", namespace, cache_key)
        return None, False
    return value, True


def _store(
    store: CacheStore,
    namespace: str,
    cache_key: str,
    value: T,
    ttl_seconds: int,
    serializer: Serializer[T],
) -> bool:
    """Best-effort write. Failures are logged, never raised."""
    try:
        written = store.put(namespace, cache_key, serializer.serialize(value), ttl_seconds)
    except StoreUnavailableError as e:
        logger.warning("Cache write failed for %s [key=%s]: %s", namespace, cache_key, e)
        return False
    except Exception as e:
        # Serialization failure shouldn't break the data flow
        logger.warning("Failed to cache %s [key=%s]: %s", namespace, cache_key, e)
        return False
    logger.debug("Cached %s [key=%s, ttl=%ds]", namespace, cache_key, ttl_seconds)
    return written


def _delete(store: CacheStore, namespace: str, cache_key: str | None) -> bool:
    try:
        removed = store.invalidate(namespace, cache_key)
    except StoreUnavailableError as e:
        logger.warning("Cache invalidation failed for %s [key=%s]: %s", namespace, cache_key, e)
        return False
    logger.debug("Invalidated %s [key=%s]", namespace, "*" if cache_key is None else cache_key)
    return removed


def cached_call(
    fetch_fn: Callable[[], T],
    *,
    store: CacheStore,
    namespace: str,
    cache_key: str,
    ttl_seconds: int,
    serializer: Serializer[T],
    is_cacheable: Callable[[T], bool] = is_cacheable_result,
    is_hit: Callable[[T], bool] | None = None,
) -> T:
    """Return the cached value for (namespace, cache_key), calling ``fetch_fn`` on a miss.

    Args:
        fetch_fn: Producer invoked on a miss. Its exceptions propagate unchanged.
        store: Backing store.
        namespace: Cache namespace (e.g. ``"mytheme.menus"``).
        cache_key: Key within the namespace.
        ttl_seconds: Time-to-live applied when the produced value is stored.
        serializer: Converts values to/from the store's string payloads.
        is_cacheable: Decides whether a produced value is written.
        is_hit: Optional extra check a found value must pass to count as a hit.

    Raises:
        ConfigurationError: If ``namespace`` is empty.
    """
    namespace = _require_namespace(namespace)
    value, found = _lookup(store, namespace, cache_key, serializer, is_hit)
    if found:
        logger.debug("Cache hit for %s [key=%s]", namespace, cache_key)
        return cast("T", value)

    logger.debug("Cache miss for %s [key=%s], calling producer", namespace, cache_key)
    result = fetch_fn()
    if is_cacheable(result):
        _store(store, namespace, cache_key, result, ttl_seconds, serializer)
    else:
        logger.debug("Not caching empty result for %s [key=%s]", namespace, cache_key)
    return result


class ReadThroughCache[T]:
    """A cache-aside helper bound to one namespace.

    Args:
        store: Backing store shared with other caches.
        namespace: Unique cache group for this cache's keys.
        ttl_seconds: Time-to-live applied to every entry written (default 24h).
        serializer: Converts values to/from strings (default JSON).
        is_cacheable: Decides whether a produced value is written.
        is_hit: Optional extra check a found value must pass to count as a hit.

    Raises:
        ConfigurationError: If ``namespace`` is empty or ``ttl_seconds`` is not positive.
    """

    def __init__(
        self,
        store: CacheStore,
        namespace: str,
        *,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        serializer: Serializer[T] | None = None,
        is_cacheable: Callable[[T], bool] = is_cacheable_result,
        is_hit: Callable[[T], bool] | None = None,
    ) -> None:
        if ttl_seconds <= 0:
            raise ConfigurationError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self._store = store
        self._namespace = _require_namespace(namespace)
        self._ttl_seconds = ttl_seconds
        self._serializer: Serializer[T] = serializer if serializer is not None else JsonSerializer()
        self._is_cacheable = is_cacheable
        self._is_hit = is_hit

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def get[K: CacheKey](self, key: K, producer: Callable[[K], T]) -> T:
        """Return the cached value for ``key``, calling ``producer(key)`` on a miss."""
        return cached_call(
            lambda: producer(key),
            store=self._store,
            namespace=self._namespace,
            cache_key=str(key),
            ttl_seconds=self._ttl_seconds,
            serializer=self._serializer,
            is_cacheable=self._is_cacheable,
            is_hit=self._is_hit,
        )

    def peek(self, key: CacheKey, *, strict: bool = False) -> tuple[T | None, bool]:
        """Look ``key`` up without producing. Returns ``(value, found)``.

        A store failure is a miss, unless ``strict`` is set, in which case
        ``StoreUnavailableError`` propagates so callers can tell the two apart.
        """
        return _lookup(self._store, self._namespace, str(key), self._serializer, self._is_hit, strict=strict)

    def put(self, key: CacheKey, value: T) -> bool:
        """Write ``value`` regardless of the cacheability predicate. Best-effort."""
        return _store(self._store, self._namespace, str(key), value, self._ttl_seconds, self._serializer)

    def invalidate(self, key: CacheKey) -> bool:
        """Delete ``key``. Idempotent; returns whether an entry was removed."""
        return _delete(self._store, self._namespace, str(key))

    def invalidate_all(self, keys: Iterable[CacheKey]) -> int:
        """Delete each of ``keys``. Returns how many entries were removed."""
        return sum(1 for key in keys if self.invalidate(key))

    def clear(self) -> bool:
        """Delete every entry in this cache's namespace."""
        return _delete(self._store, self._namespace, None)


def _is_list(value: object) -> bool:
    return isinstance(value, list)


class CacheIndex[M]:
    """A cached list of identifiers, maintained incrementally.

    The producer is a full scan (e.g. "list all menu ids") and only runs when
    the index is absent. ``add`` and ``remove`` rewrite the cached list in
    place so lifecycle events never force a rescan. An empty index is a valid,
    cacheable answer.
    """

    def __init__(
        self,
        store: CacheStore,
        namespace: str,
        key: str,
        producer: Callable[[], list[M]],
        *,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ) -> None:
        self._key = key
        self._producer = producer
        self._cache: ReadThroughCache[list[M]] = ReadThroughCache(
            store,
            namespace,
            ttl_seconds=ttl_seconds,
            is_cacheable=always_cacheable,
            is_hit=_is_list,
        )

    def members(self) -> list[M]:
        return list(self._cache.get(self._key, lambda _key: self._producer()))

    def add(self, member: M) -> list[M]:
        members = self.members()
        if member not in members:
            members.append(member)
        self._cache.put(self._key, members)
        return members

    def remove(self, member: M) -> list[M]:
        members = [m for m in self.members() if m != member]
        self._cache.put(self._key, members)
        return members

    def invalidate(self) -> bool:
        return self._cache.invalidate(self._key)
