"""Cached post permalinks.

Permalinks are stored without their scheme (``//example.org/post/`` rather
than ``https://example.org/post/``) so the host can pick the scheme at
render time. Once a permalink is cached, no host-side filtering is applied to
it again until the post is saved.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Protocol

from content_cache.cache.serialization import StringSerializer
from content_cache.cache.wrapper import DEFAULT_TTL_SECONDS, ReadThroughCache, is_cacheable_result
from content_cache.exceptions import InvalidKeyError
from content_cache.hooks import LifecycleEvent
from content_cache.models import Post, post_id_from

if TYPE_CHECKING:
    from content_cache.cache.protocol import CacheStore
    from content_cache.hooks import LifecycleHooks

logger = logging.getLogger(__name__)

_SCHEME_RE = re.compile(r"^[^:/?#]+:(//.+)$")


class PermalinkSource(Protocol):
    """Host framework permalink generation. Returns ``None`` on failure."""

    def get_permalink(self, post: Post | int, leave_name: bool) -> str | None: ...


def strip_scheme(url: str) -> str:
    """Remove the scheme from ``url`` if it has one (``http://a/`` -> ``//a/``).

    Only the leading scheme goes. A URL carried further along, as in
    ``http://a/?u=https://b/``, is part of the permalink and is kept intact.
    """
    if "://" not in url:
        return url
    match = _SCHEME_RE.match(url)
    return match.group(1) if match else url


class PermalinkCache:
    """Post permalinks cached per post id.

    Any found entry is a hit, even an empty string. A failed lookup
    (``None`` or ``""`` from the source) returns ``""`` and is not cached.

    Args:
        store: Backing cache store.
        source: Host framework permalink generation.
        namespace: Unique cache group, e.g. ``"mytheme.permalinks"``.
        ttl_seconds: TTL for every entry (default 24h).
    """

    def __init__(
        self,
        store: CacheStore,
        source: PermalinkSource,
        namespace: str,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ) -> None:
        self._source = source
        self._permalinks: ReadThroughCache[str | None] = ReadThroughCache(
            store,
            namespace,
            ttl_seconds=ttl_seconds,
            serializer=StringSerializer(),  # type: ignore[arg-type]
            is_cacheable=is_cacheable_result,
        )

    @property
    def namespace(self) -> str:
        return self._permalinks.namespace

    def get_permalink(self, post: Post | int | str, leave_name: bool = False) -> str:
        try:
            post_id = post_id_from(post)
        except InvalidKeyError as e:
            logger.debug("No permalink: %s", e)
            return ""

        def produce(_key: int) -> str | None:
            permalink = self._source.get_permalink(post if isinstance(post, Post) else post_id, leave_name)
            return strip_scheme(permalink) if permalink is not None else None

        permalink = self._permalinks.get(post_id, produce)
        return permalink if permalink is not None else ""

    def clear_post_cache(self, post_id: int) -> None:
        """Content was saved: drop the post's cached permalink."""
        self._permalinks.invalidate(int(post_id))

    def register(self, hooks: LifecycleHooks) -> None:
        hooks.subscribe(LifecycleEvent.CONTENT_SAVED, self.clear_post_cache)
