"""Cached attachment image tags.

Each post has a single cache entry mapping a size id (``"thumbnail"``,
``"300x200"``) to the rendered tag, so every size of a post is dropped
together when the post is saved.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Protocol

from content_cache.cache.wrapper import DEFAULT_TTL_SECONDS, ReadThroughCache
from content_cache.exceptions import InvalidKeyError, StoreUnavailableError
from content_cache.hooks import LifecycleEvent
from content_cache.models import Post, post_id_from

if TYPE_CHECKING:
    from content_cache.cache.protocol import CacheStore
    from content_cache.hooks import LifecycleHooks

logger = logging.getLogger(__name__)

ATTACHMENT_POST_TYPE = "attachment"

ImageSize = str | Sequence[int]


class ThumbnailSource(Protocol):
    """Host framework access to posts and their attachment images."""

    def get_post(self, post_id: int) -> Post | None: ...

    def has_post_thumbnail(self, post: Post) -> bool: ...

    def get_post_thumbnail_id(self, post: Post) -> int: ...

    def attachment_url_to_post_id(self, url: str) -> int: ...

    def get_attachment_image(self, attachment_id: int, size: ImageSize, attrs: Mapping[str, str]) -> str: ...


def _is_size_map(value: object) -> bool:
    return isinstance(value, dict)


def size_id_from(size: object) -> str:
    """Return ``size`` for a named size, or ``"WxH"`` for a dimension sequence.

    Raises:
        InvalidKeyError: For anything else.
    """
    if isinstance(size, str):
        return size
    if isinstance(size, Sequence) and size and all(isinstance(part, int) for part in size):
        return "x".join(str(part) for part in size)
    raise InvalidKeyError(f"Not an image size: {size!r}")


class CachedThumbTag:
    """Post thumbnail tags cached per post and size.

    Args:
        store: Backing cache store.
        source: Host framework image access.
        namespace: Unique cache group, e.g. ``"mytheme.thumbs"``.
        ttl_seconds: TTL for every entry (default 24h).
    """

    def __init__(
        self,
        store: CacheStore,
        source: ThumbnailSource,
        namespace: str,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ) -> None:
        self._source = source
        self._tags: ReadThroughCache[dict[str, str]] = ReadThroughCache(
            store, namespace, ttl_seconds=ttl_seconds, is_hit=_is_size_map
        )

    @property
    def namespace(self) -> str:
        return self._tags.namespace

    def get_tag(
        self,
        post: Post | int | str,
        size: ImageSize,
        fallback: str = "",
        attrs: Mapping[str, str] | None = None,
    ) -> str:
        """Return the image tag for ``post`` at ``size``.

        Attachments render themselves; other posts render their thumbnail,
        or the attachment behind the ``fallback`` URL. Returns ``""`` (and
        caches nothing) when there is no image to show or when ``post`` or
        ``size`` are not usable. An empty tag from the source is returned
        but not cached. When the cached sizes cannot be read, the tag is
        rendered but not written, so the other sizes of the post survive.
        """
        try:
            post_id = post_id_from(post)
            size_id = size_id_from(size)
        except InvalidKeyError as e:
            logger.debug("No thumbnail: %s", e)
            return ""

        readable = True
        try:
            cached_tags, found = self._tags.peek(post_id, strict=True)
        except StoreUnavailableError as e:
            logger.warning("Thumbnail cache read failed for post %d, rendering without caching: %s", post_id, e)
            cached_tags, found, readable = None, False, False
        if found and cached_tags is not None and size_id in cached_tags:
            logger.debug("Thumbnail hit for post %d [%s]", post_id, size_id)
            return cached_tags[size_id]

        resolved = post if isinstance(post, Post) else self._source.get_post(post_id)
        attachment_id = self._attachment_id_for(resolved, fallback)
        if attachment_id is None:
            return ""

        tag = self._source.get_attachment_image(attachment_id, size, attrs or {})
        if not tag or not readable:
            return tag
        tags = dict(cached_tags or {})
        tags[size_id] = tag
        self._tags.put(post_id, tags)
        return tag

    def _attachment_id_for(self, post: Post | None, fallback: str) -> int | None:
        if post is not None and post.post_type == ATTACHMENT_POST_TYPE:
            return post.id
        if post is not None and self._source.has_post_thumbnail(post):
            return self._source.get_post_thumbnail_id(post)
        if fallback:
            return self._source.attachment_url_to_post_id(fallback) or None
        return None

    def clear_post_cache(self, post_id: int) -> None:
        """Content was saved: drop every cached size for the post."""
        self._tags.invalidate(int(post_id))

    def register(self, hooks: LifecycleHooks) -> None:
        hooks.subscribe(LifecycleEvent.CONTENT_SAVED, self.clear_post_cache)
