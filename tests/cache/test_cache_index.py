from __future__ import annotations

from content_cache.cache.memory_store import MemoryCacheStore
from content_cache.cache.wrapper import CacheIndex


class FullScan:
    def __init__(self, members: list[int]) -> None:
        self.members = members
        self.calls = 0

    def __call__(self) -> list[int]:
        self.calls += 1
        return list(self.members)


class TestCacheIndex:
    def test_members_scan_once(self, memory_store: MemoryCacheStore) -> None:
        scan = FullScan([1, 2, 3])
        index = CacheIndex(memory_store, "menus", "ids", scan, ttl_seconds=1234)

        assert index.members() == [1, 2, 3]
        assert index.members() == [1, 2, 3]
        assert scan.calls == 1

    def test_empty_index_is_cached(self, memory_store: MemoryCacheStore) -> None:
        scan = FullScan([])
        index = CacheIndex(memory_store, "menus", "ids", scan)

        assert index.members() == []
        assert index.members() == []
        assert scan.calls == 1

    def test_add_is_incremental(self, memory_store: MemoryCacheStore) -> None:
        scan = FullScan([1, 2])
        index = CacheIndex(memory_store, "menus", "ids", scan)
        index.members()

        assert index.add(3) == [1, 2, 3]
        assert index.members() == [1, 2, 3]
        assert scan.calls == 1

    def test_add_existing_member_is_noop(self, memory_store: MemoryCacheStore) -> None:
        index = CacheIndex(memory_store, "menus", "ids", FullScan([1, 2]))

        assert index.add(2) == [1, 2]

    def test_add_primes_absent_index(self, memory_store: MemoryCacheStore) -> None:
        scan = FullScan([1])
        index = CacheIndex(memory_store, "menus", "ids", scan)

        assert index.add(5) == [1, 5]
        assert scan.calls == 1

    def test_remove_is_incremental(self, memory_store: MemoryCacheStore) -> None:
        scan = FullScan([1, 2, 3])
        index = CacheIndex(memory_store, "menus", "ids", scan)

        assert index.remove(2) == [1, 3]
        assert index.members() == [1, 3]
        assert scan.calls == 1

    def test_invalidate_forces_rescan(self, memory_store: MemoryCacheStore) -> None:
        scan = FullScan([1])
        index = CacheIndex(memory_store, "menus", "ids", scan)
        index.members()

        scan.members = [1, 4]
        assert index.invalidate() is True

        assert index.members() == [1, 4]
        assert scan.calls == 2

    def test_non_list_payload_triggers_rescan(self, memory_store: MemoryCacheStore) -> None:
        memory_store.put("menus", "ids", '{"1": true}', ttl_seconds=60)
        scan = FullScan([1])
        index = CacheIndex(memory_store, "menus", "ids", scan)

        assert index.members() == [1]
        assert scan.calls == 1
