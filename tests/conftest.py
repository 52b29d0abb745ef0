"""Shared pytest fixtures for test modules."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from content_cache.cache.memory_store import MemoryCacheStore
from content_cache.cache.sqlite_store import SqliteCacheStore
from tests.fakes.stores import FakeClock, RecordingCacheStore

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture
def clock() -> FakeClock:
    """A controllable clock starting at t=1000."""
    return FakeClock()


@pytest.fixture
def memory_store(clock: FakeClock) -> MemoryCacheStore:
    return MemoryCacheStore(clock=clock)


@pytest.fixture
def sqlite_store(tmp_path: Path, clock: FakeClock) -> Iterator[SqliteCacheStore]:
    store = SqliteCacheStore(tmp_path / "cache.db", clock=clock)
    yield store
    store.close()


@pytest.fixture
def recording_store(clock: FakeClock) -> RecordingCacheStore:
    """In-memory store that records gets, puts and invalidations."""
    return RecordingCacheStore(clock)
