"""Tests for ExternalCacheAdapter over the in-memory store."""

import threading
from datetime import timedelta
from typing import Any

import pytest

from acp.domain.exceptions import PatternDeletionUnsupportedError, StoreError
from acp.domain.policy import CacheOptions
from acp.infrastructure.cache import ExternalCacheAdapter, MemoryCacheStore

KEY = "acp:1.0/user::7::admin/Post::42::2024-01-01/PostPolicy/show?"


class _Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class _ExactStore:
    """Store without pattern deletion; records what the adapter passes."""

    supports_pattern_deletion = False

    def __init__(self) -> None:
        self.calls: list[tuple[str, int | None, dict[str, Any]]] = []

    def fetch(self, key, compute_fn, *, expires_in=None, **options):
        self.calls.append((key, expires_in, options))
        return compute_fn()

    def delete_matched(self, pattern: str) -> int:
        raise AssertionError("must not be called")


@pytest.fixture
def clock() -> _Clock:
    return _Clock()


@pytest.fixture
def store(clock: _Clock) -> MemoryCacheStore:
    return MemoryCacheStore(clock=clock)


@pytest.fixture
def adapter(store: MemoryCacheStore) -> ExternalCacheAdapter:
    return ExternalCacheAdapter(store, default_ttl=300)


class TestFetch:
    """Fetch-or-compute: compute at most once per key while the entry lives."""

    def test_second_fetch_returns_stored_value(self, adapter: ExternalCacheAdapter) -> None:
        answers = iter([True, False])
        calls = []

        def compute() -> bool:
            calls.append(1)
            return next(answers)

        assert adapter.fetch(KEY, CacheOptions(expires_in=60), compute) is True
        assert adapter.fetch(KEY, CacheOptions(expires_in=60), compute) is True
        assert len(calls) == 1

    def test_falsy_and_none_values_are_cached(self, adapter: ExternalCacheAdapter) -> None:
        calls = []
        for value in (False, None):
            key = f"k/{value}"
            for _ in range(2):
                assert adapter.fetch(key, CacheOptions(), lambda v=value: calls.append(1) or v) is value
        assert len(calls) == 2

    def test_compute_error_propagates_and_stores_nothing(
        self, adapter: ExternalCacheAdapter, store: MemoryCacheStore
    ) -> None:
        def compute() -> bool:
            raise PermissionError("rule exploded")

        with pytest.raises(PermissionError, match="rule exploded"):
            adapter.fetch(KEY, CacheOptions(), compute)
        assert KEY not in store
        assert adapter.fetch(KEY, CacheOptions(), lambda: True) is True

    def test_entry_expires(self, adapter: ExternalCacheAdapter, clock: _Clock) -> None:
        calls = []

        def compute() -> int:
            calls.append(1)
            return len(calls)

        assert adapter.fetch(KEY, CacheOptions(expires_in=timedelta(minutes=1)), compute) == 1
        clock.now += 59
        assert adapter.fetch(KEY, CacheOptions(expires_in=60), compute) == 1
        clock.now += 2
        assert adapter.fetch(KEY, CacheOptions(expires_in=60), compute) == 2

    def test_default_ttl_applies_when_unset(self, clock: _Clock) -> None:
        store = _ExactStore()
        ExternalCacheAdapter(store, default_ttl=300).fetch(KEY, CacheOptions(), lambda: True)
        ExternalCacheAdapter(store, default_ttl=None).fetch(KEY, CacheOptions(), lambda: True)
        assert [c[1] for c in store.calls] == [300, None]

    def test_default_ttl_from_settings(self) -> None:
        assert ExternalCacheAdapter(_ExactStore()).default_ttl == 3600

    def test_options_passed_to_store(self) -> None:
        store = _ExactStore()
        options = CacheOptions(expires_in=1.2, extra={"nx": True})
        ExternalCacheAdapter(store).fetch(KEY, options, lambda: True)
        assert store.calls == [(KEY, 2, {"nx": True})]

    def test_store_error_propagates(self) -> None:
        class _Broken(_ExactStore):
            def fetch(self, key, compute_fn, *, expires_in=None, **options):
                raise StoreError("get", "connection refused", key=key)

        with pytest.raises(StoreError) as exc_info:
            ExternalCacheAdapter(_Broken()).fetch(KEY, CacheOptions(), lambda: True)
        assert exc_info.value.details["key"] == KEY


class TestDeleteMatched:
    """Pattern deletion for manual invalidation."""

    def test_deletes_matching_keys_only(self, adapter: ExternalCacheAdapter, store: MemoryCacheStore) -> None:
        for key in ("acp:1.0/posts/Post::42/show", "acp:1.0/posts/Post::42/update", "acp:1.0/posts/Post::43/show"):
            adapter.fetch(key, CacheOptions(), lambda: True)
        assert adapter.delete_matched("acp:1.0/posts/Post::42/*") == 2
        assert "acp:1.0/posts/Post::43/show" in store
        assert len(store) == 1

    def test_no_match_returns_zero(self, adapter: ExternalCacheAdapter) -> None:
        assert adapter.delete_matched("nothing/*") == 0

    def test_unsupported_store_says_so(self) -> None:
        with pytest.raises(PatternDeletionUnsupportedError) as exc_info:
            ExternalCacheAdapter(_ExactStore()).delete_matched("acp:1.0/*")
        assert isinstance(exc_info.value, StoreError)
        assert exc_info.value.details["pattern"] == "acp:1.0/*"


class TestConcurrency:
    """Independent threads share one MemoryCacheStore."""

    def test_concurrent_fetch_returns_own_values(self) -> None:
        store = MemoryCacheStore()
        workers = 8
        barrier = threading.Barrier(workers)
        results: dict[str, object] = {}
        errors: list[Exception] = []

        def worker(n: int) -> None:
            try:
                barrier.wait()
                for i in range(200):
                    key = f"acp:1.0/User::{n}/Post::{i}/PostPolicy/show"
                    results[key] = store.fetch(key, lambda key=key: f"computed:{key}", expires_in=60)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(results) == workers * 200
        assert all(value == f"computed:{key}" for key, value in results.items())
        assert len(store) == workers * 200

    def test_delete_matched_alongside_fetches(self) -> None:
        store = MemoryCacheStore()
        fetchers = 6
        barrier = threading.Barrier(fetchers + 1)
        errors: list[Exception] = []

        def fetcher(n: int) -> None:
            try:
                barrier.wait()
                for i in range(300):
                    key = f"acp:1.0/User::{n}/Post::{i}/PostPolicy/show"
                    assert store.fetch(key, lambda key=key: key) == key
            except Exception as e:
                errors.append(e)

        def deleter() -> None:
            try:
                barrier.wait()
                for _ in range(100):
                    store.delete_matched("acp:1.0/User::*/Post::*")
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=fetcher, args=(n,)) for n in range(fetchers)]
        threads.append(threading.Thread(target=deleter))
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        store.delete_matched("acp:1.0/*")
        assert len(store) == 0


class TestCacheOptions:
    def test_ttl_rounds_up(self) -> None:
        assert CacheOptions(expires_in=0.2).ttl_seconds() == 1
        assert CacheOptions(expires_in=timedelta(hours=1)).ttl_seconds() == 3600

    def test_rejects_non_positive(self) -> None:
        with pytest.raises(ValueError):
            CacheOptions(expires_in=0)
        with pytest.raises(ValueError):
            CacheOptions(expires_in=timedelta(seconds=-5))
