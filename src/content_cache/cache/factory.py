from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from content_cache.cache.memory_store import MemoryCacheStore
from content_cache.cache.sqlite_store import SqliteCacheStore
from content_cache.exceptions import ConfigurationError

if TYPE_CHECKING:
    from content_cache.cache.protocol import CacheStore
    from content_cache.config import AppConfig
    from content_cache.menus import CachedMenu, MenuSource
    from content_cache.permalinks import PermalinkCache, PermalinkSource
    from content_cache.thumbnails import CachedThumbTag, ThumbnailSource


def _resolve(config: AppConfig | None) -> AppConfig:
    if config is None:
        from content_cache.config import create_config

        config = create_config()
    return config


def create_cache_store(config: AppConfig | None = None) -> CacheStore:
    """Build the store named by ``cache.backend`` (``sqlite`` or ``memory``)."""
    config = _resolve(config)
    backend = str(config["cache.backend"]).lower()
    if backend == "sqlite":
        return SqliteCacheStore(Path(str(config["cache.db_path"])).expanduser())
    if backend == "memory":
        return MemoryCacheStore()
    raise ConfigurationError(f"Unknown cache backend: {backend!r}")


def cache_settings(section: str, config: AppConfig | None = None) -> tuple[str, int]:
    """Return ``(namespace, ttl_seconds)`` for a config section such as ``"menus"``."""
    config = _resolve(config)
    namespace = str(config[f"{section}.namespace"] or "")
    if not namespace:
        raise ConfigurationError(f"No cache namespace configured for {section!r} ({section}.namespace)")
    try:
        ttl_seconds = int(str(config[f"{section}.ttl"]))
    except ValueError:
        raise ConfigurationError(f"{section}.ttl must be an integer number of seconds") from None
    return namespace, ttl_seconds


def create_menu_cache(source: MenuSource, store: CacheStore, config: AppConfig | None = None) -> CachedMenu:
    from content_cache.menus import CachedMenu

    namespace, ttl_seconds = cache_settings("menus", config)
    return CachedMenu(store, source, namespace, ttl_seconds)


def create_thumbnail_cache(
    source: ThumbnailSource, store: CacheStore, config: AppConfig | None = None
) -> CachedThumbTag:
    from content_cache.thumbnails import CachedThumbTag

    namespace, ttl_seconds = cache_settings("thumbnails", config)
    return CachedThumbTag(store, source, namespace, ttl_seconds)


def create_permalink_cache(
    source: PermalinkSource, store: CacheStore, config: AppConfig | None = None
) -> PermalinkCache:
    from content_cache.permalinks import PermalinkCache

    namespace, ttl_seconds = cache_settings("permalinks", config)
    return PermalinkCache(store, source, namespace, ttl_seconds)
