from content_cache.cache.memory_store import MemoryCacheStore
from content_cache.cache.protocol import CacheStore
from content_cache.cache.sqlite_store import SqliteCacheStore
from content_cache.cache.wrapper import CacheIndex, ReadThroughCache, cached_call

__all__ = ["CacheIndex", "CacheStore", "MemoryCacheStore", "ReadThroughCache", "SqliteCacheStore", "cached_call"]
