"""Tests for the in-memory result cache."""

from __future__ import annotations

import threading

from flipscan.cache import ResultCache
from flipscan.config import CacheConfig
from flipscan.matcher import AnalysisResult


def make_result(summary: str = "r") -> AnalysisResult:
    return AnalysisResult(detections=(), summary=summary)


class TestResultCache:
    """Tests for ResultCache."""

    def test_miss_then_hit(self) -> None:
        cache = ResultCache()
        result = make_result()

        assert cache.get("1:00000031") is None
        cache.set("1:00000031", result)
        assert cache.get("1:00000031") is result

        stats = cache.stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["entries"] == 1
        assert stats["hit_rate_percent"] == 50.0

    def test_last_writer_wins(self) -> None:
        cache = ResultCache()
        cache.set("k", make_result("first"))
        cache.set("k", make_result("second"))

        assert cache.get("k").summary == "second"
        assert len(cache) == 1

    def test_clear_returns_count_and_resets_stats(self) -> None:
        cache = ResultCache()
        cache.set("a", make_result())
        cache.set("b", make_result())
        cache.get("a")

        assert cache.clear() == 2
        assert len(cache) == 0
        assert cache.stats()["hits"] == 0
        assert cache.clear() == 0

    def test_disabled_cache_never_stores(self) -> None:
        cache = ResultCache(enabled=False)
        cache.set("k", make_result())

        assert cache.get("k") is None
        assert "k" not in cache
        assert cache.stats()["misses"] == 0

    def test_bounded_cache_evicts_oldest(self) -> None:
        cache = ResultCache(max_entries=2)
        cache.set("a", make_result())
        cache.set("b", make_result())
        cache.set("c", make_result())

        assert "a" not in cache
        assert "b" in cache
        assert "c" in cache

    def test_from_config(self) -> None:
        cache = ResultCache.from_config(CacheConfig(enabled=False, max_entries=10))

        assert cache.enabled is False
        assert cache.max_entries == 10

    def test_empty_stats(self) -> None:
        stats = ResultCache().stats()
        assert stats["hit_rate_percent"] == 0.0
        assert stats["enabled"] is True

    def test_concurrent_writers(self) -> None:
        cache = ResultCache()

        def write(prefix: str) -> None:
            for i in range(200):
                cache.set(f"{prefix}{i}", make_result())
                cache.get(f"{prefix}{i}")

        threads = [threading.Thread(target=write, args=(p,)) for p in "abcd"]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(cache) == 800
        assert cache.stats()["hits"] == 800
