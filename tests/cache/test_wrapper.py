"""Tests for the cache wrapper module."""

from __future__ import annotations

import logging

import pytest

from content_cache.cache.memory_store import MemoryCacheStore
from content_cache.cache.serialization import JsonSerializer, StringSerializer
from content_cache.cache.wrapper import (
    ReadThroughCache,
    always_cacheable,
    cached_call,
    is_cacheable_result,
)
from content_cache.exceptions import ConfigurationError, StoreUnavailableError
from tests.fakes.stores import FailingCacheStore, FakeClock, RecordingCacheStore


class CountingProducer:
    """Producer that records the keys it was called with."""

    def __init__(self, value: object) -> None:
        self.value = value
        self.keys: list[object] = []

    def __call__(self, key: object) -> object:
        self.keys.append(key)
        return self.value


class TestIsCacheableResult:
    @pytest.mark.parametrize("value", [None, False, "", [], {}, (), set()])
    def test_rejects_empty_and_failure(self, value: object) -> None:
        assert is_cacheable_result(value) is False

    @pytest.mark.parametrize("value", ["x", [0], {"a": 1}, 0, True, 3.5])
    def test_accepts_real_values(self, value: object) -> None:
        assert is_cacheable_result(value) is True

    def test_always_cacheable_accepts_empty(self) -> None:
        assert always_cacheable([]) is True


class TestCachedCall:
    def test_cache_miss_delegates_and_stores(self) -> None:
        store = RecordingCacheStore()
        calls: list[int] = []

        def fetch() -> list[int]:
            calls.append(1)
            return [1, 2, 3]

        result = cached_call(
            fetch,
            store=store,
            namespace="menus",
            cache_key="ids",
            ttl_seconds=1234,
            serializer=JsonSerializer(),
        )

        assert result == [1, 2, 3]
        assert len(calls) == 1
        assert store.puts == [("menus", "ids", "[1, 2, 3]", 1234)]

    def test_cache_hit_returns_without_delegating(self) -> None:
        store = RecordingCacheStore()
        calls: list[int] = []

        def fetch() -> list[int]:
            calls.append(1)
            return [1, 2, 3]

        for _ in range(2):
            result = cached_call(
                fetch,
                store=store,
                namespace="menus",
                cache_key="ids",
                ttl_seconds=1234,
                serializer=JsonSerializer(),
            )

        assert result == [1, 2, 3]
        assert len(calls) == 1
        assert len(store.puts) == 1

    def test_requires_namespace(self) -> None:
        with pytest.raises(ConfigurationError):
            cached_call(
                lambda: "x",
                store=MemoryCacheStore(),
                namespace="",
                cache_key="k",
                ttl_seconds=60,
                serializer=StringSerializer(),
            )


class TestReadThroughCache:
    def test_rejects_empty_namespace(self) -> None:
        with pytest.raises(ConfigurationError, match="namespace"):
            ReadThroughCache(MemoryCacheStore(), "")

    def test_rejects_non_positive_ttl(self) -> None:
        with pytest.raises(ConfigurationError, match="ttl_seconds"):
            ReadThroughCache(MemoryCacheStore(), "ns", ttl_seconds=0)

    def test_default_ttl_is_one_day(self) -> None:
        assert ReadThroughCache(MemoryCacheStore(), "ns").ttl_seconds == 86400

    def test_miss_invokes_producer_exactly_once(self, recording_store: RecordingCacheStore) -> None:
        cache: ReadThroughCache[object] = ReadThroughCache(recording_store, "ns", ttl_seconds=60)
        producer = CountingProducer({"a": 1})

        assert cache.get(5, producer) == {"a": 1}
        assert producer.keys == [5]
        assert recording_store.puts == [("ns", "5", '{"a": 1}', 60)]

    def test_hit_invokes_producer_zero_times(self, recording_store: RecordingCacheStore) -> None:
        recording_store.put("ns", "5", '"stored"', ttl_seconds=60)
        cache: ReadThroughCache[object] = ReadThroughCache(recording_store, "ns")
        producer = CountingProducer("fresh")

        assert cache.get(5, producer) == "stored"
        assert producer.keys == []

    def test_found_falsy_value_is_a_hit(self, memory_store: MemoryCacheStore) -> None:
        memory_store.put("ns", "k", "[]", ttl_seconds=60)
        cache: ReadThroughCache[object] = ReadThroughCache(memory_store, "ns")
        producer = CountingProducer(["fresh"])

        assert cache.get("k", producer) == []
        assert producer.keys == []

    @pytest.mark.parametrize("empty", [None, False, "", [], {}])
    def test_empty_result_is_returned_but_never_cached(
        self, recording_store: RecordingCacheStore, empty: object
    ) -> None:
        cache: ReadThroughCache[object] = ReadThroughCache(recording_store, "ns")
        producer = CountingProducer(empty)

        assert cache.get("k", producer) == empty
        assert cache.get("k", producer) == empty
        assert producer.keys == ["k", "k"]
        assert recording_store.puts == []

    def test_custom_cacheability_predicate(self, memory_store: MemoryCacheStore) -> None:
        cache: ReadThroughCache[object] = ReadThroughCache(memory_store, "ns", is_cacheable=always_cacheable)
        producer = CountingProducer([])

        cache.get("k", producer)
        cache.get("k", producer)

        assert producer.keys == ["k"]

    def test_hit_policy_rejects_wrong_shape(self, memory_store: MemoryCacheStore) -> None:
        memory_store.put("ns", "k", '"not a list"', ttl_seconds=60)
        cache: ReadThroughCache[object] = ReadThroughCache(
            memory_store, "ns", is_hit=lambda value: isinstance(value, list)
        )
        producer = CountingProducer([1])

        assert cache.get("k", producer) == [1]
        assert producer.keys == ["k"]

    def test_expired_entry_is_a_miss(self, memory_store: MemoryCacheStore, clock: FakeClock) -> None:
        cache: ReadThroughCache[object] = ReadThroughCache(memory_store, "ns", ttl_seconds=100)
        producer = CountingProducer("v")

        cache.get("k", producer)
        clock.advance(99)
        cache.get("k", producer)
        assert producer.keys == ["k"]

        clock.advance(1)
        cache.get("k", producer)
        assert producer.keys == ["k", "k"]

    def test_producer_exception_propagates_and_is_not_cached(self, recording_store: RecordingCacheStore) -> None:
        cache: ReadThroughCache[object] = ReadThroughCache(recording_store, "ns")

        def broken(key: str) -> object:
            raise RuntimeError("database is gone")

        with pytest.raises(RuntimeError, match="database is gone"):
            cache.get("k", broken)
        assert recording_store.puts == []

    def test_undecodable_payload_is_a_miss(
        self, memory_store: MemoryCacheStore, caplog: pytest.LogCaptureFixture
    ) -> None:
        memory_store.put("ns", "k", "{not json", ttl_seconds=60)
        cache: ReadThroughCache[object] = ReadThroughCache(memory_store, "ns")

        with caplog.at_level(logging.WARNING, logger="content_cache.cache.wrapper"):
            assert cache.get("k", CountingProducer("fresh")) == "fresh"

        assert "Failed to deserialize" in caplog.text
        assert memory_store.get("ns", "k") == '"fresh"'

    def test_unavailable_store_degrades_to_producer(self, caplog: pytest.LogCaptureFixture) -> None:
        store = FailingCacheStore()
        cache: ReadThroughCache[object] = ReadThroughCache(store, "ns")
        producer = CountingProducer("value")

        with caplog.at_level(logging.WARNING, logger="content_cache.cache.wrapper"):
            assert cache.get("k", producer) == "value"
            assert cache.get("k", producer) == "value"

        assert producer.keys == ["k", "k"]
        assert "Cache read failed" in caplog.text
        assert "Cache write failed" in caplog.text

    def test_unavailable_store_invalidation_is_ignored(self) -> None:
        cache: ReadThroughCache[object] = ReadThroughCache(FailingCacheStore(), "ns")

        assert cache.invalidate("k") is False
        assert cache.clear() is False

    def test_unserializable_value_is_returned_uncached(self, recording_store: RecordingCacheStore) -> None:
        cache: ReadThroughCache[object] = ReadThroughCache(recording_store, "ns")
        value = {"when": object()}

        assert cache.get("k", CountingProducer(value)) is value
        assert recording_store.puts == []

    def test_peek_reports_found_flag(self, memory_store: MemoryCacheStore) -> None:
        cache: ReadThroughCache[object] = ReadThroughCache(memory_store, "ns")

        assert cache.peek("k") == (None, False)
        cache.put("k", "")
        assert cache.peek("k") == ("", True)

    def test_peek_treats_store_failure_as_miss_unless_strict(self) -> None:
        cache: ReadThroughCache[object] = ReadThroughCache(FailingCacheStore(), "ns")

        assert cache.peek("k") == (None, False)
        with pytest.raises(StoreUnavailableError):
            cache.peek("k", strict=True)

    def test_put_bypasses_cacheability(self, memory_store: MemoryCacheStore) -> None:
        cache: ReadThroughCache[object] = ReadThroughCache(memory_store, "ns")

        assert cache.put("k", []) is True
        assert cache.peek("k") == ([], True)

    def test_invalidate_is_idempotent(self, memory_store: MemoryCacheStore) -> None:
        cache: ReadThroughCache[object] = ReadThroughCache(memory_store, "ns")
        cache.put("k", "v")

        assert cache.invalidate("k") is True
        assert cache.invalidate("k") is False
        assert cache.peek("k") == (None, False)

    def test_invalidate_all_counts_removed_entries(self, memory_store: MemoryCacheStore) -> None:
        cache: ReadThroughCache[object] = ReadThroughCache(memory_store, "ns")
        cache.put(1, "a")
        cache.put(2, "b")
        cache.put(3, "c")

        assert cache.invalidate_all([1, 2, 99]) == 2
        assert cache.peek(3) == ("c", True)

    def test_clear_drops_only_own_namespace(self, memory_store: MemoryCacheStore) -> None:
        mine: ReadThroughCache[object] = ReadThroughCache(memory_store, "mine")
        theirs: ReadThroughCache[object] = ReadThroughCache(memory_store, "theirs")
        mine.put("k", "1")
        theirs.put("k", "2")

        mine.clear()

        assert mine.peek("k") == (None, False)
        assert theirs.peek("k") == ("2", True)

    def test_int_and_str_keys_share_an_entry(self, memory_store: MemoryCacheStore) -> None:
        cache: ReadThroughCache[object] = ReadThroughCache(memory_store, "ns")
        cache.put(42, "v")

        assert cache.peek("42") == ("v", True)
