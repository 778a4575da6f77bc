"""Tests for cache invalidation on file changes."""

from __future__ import annotations

import threading
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from watchfiles import Change

from flipscan.cache import ResultCache
from flipscan.matcher import ContentMatcher
from flipscan.watcher import CacheInvalidator


@pytest.fixture
def warm_cache() -> ResultCache:
    """Create a cache holding one analysis result."""
    cache = ResultCache()
    ContentMatcher(cache=cache).analyze("svc.flipperEnabled('beta')")
    return cache


class TestCacheInvalidator:
    """Tests for CacheInvalidator."""

    @pytest.mark.asyncio
    async def test_source_change_clears_cache(self, tmp_path: Path, warm_cache: ResultCache) -> None:
        callback = MagicMock()
        invalidator = CacheInvalidator([tmp_path], warm_cache, on_invalidate=callback)

        cleared = await invalidator.handle_changes([(Change.modified, str(tmp_path / "app.ts"))])

        assert cleared == 1
        assert len(warm_cache) == 0
        callback.assert_called_once_with()

    @pytest.mark.asyncio
    async def test_template_change_clears_cache(self, tmp_path: Path, warm_cache: ResultCache) -> None:
        invalidator = CacheInvalidator([tmp_path], warm_cache)

        await invalidator.handle_changes([(Change.added, str(tmp_path / "view.component.HTML"))])
        assert len(warm_cache) == 0

    @pytest.mark.asyncio
    async def test_unrelated_change_keeps_cache(self, tmp_path: Path, warm_cache: ResultCache) -> None:
        callback = MagicMock()
        invalidator = CacheInvalidator([tmp_path], warm_cache, on_invalidate=callback)

        cleared = await invalidator.handle_changes([(Change.modified, str(tmp_path / "README.md"))])

        assert cleared == 0
        assert len(warm_cache) == 1
        callback.assert_not_called()

    @pytest.mark.asyncio
    async def test_skipped_directories(self, tmp_path: Path, warm_cache: ResultCache) -> None:
        invalidator = CacheInvalidator([tmp_path], warm_cache)
        changes = [
            (Change.modified, str(tmp_path / "node_modules" / "lib" / "index.js")),
            (Change.modified, str(tmp_path / "dist" / "main.js")),
        ]

        assert await invalidator.handle_changes(changes) == 0
        assert len(warm_cache) == 1

    @pytest.mark.asyncio
    async def test_custom_extensions(self, tmp_path: Path, warm_cache: ResultCache) -> None:
        invalidator = CacheInvalidator([tmp_path], warm_cache, extensions=[".vue"])

        assert await invalidator.handle_changes([(Change.modified, str(tmp_path / "a.ts"))]) == 0
        assert await invalidator.handle_changes([(Change.modified, str(tmp_path / "a.vue"))]) == 1

    @pytest.mark.asyncio
    async def test_callback_runs_off_the_event_loop(self, tmp_path: Path) -> None:
        threads: list[int] = []
        invalidator = CacheInvalidator(
            [tmp_path],
            ResultCache(),
            on_invalidate=lambda: threads.append(threading.get_ident()),
        )

        await invalidator.handle_changes([(Change.modified, str(tmp_path / "a.ts"))])

        assert len(threads) == 1
        assert threads[0] != threading.get_ident()

    def test_not_running_initially(self, tmp_path: Path) -> None:
        invalidator = CacheInvalidator([tmp_path], ResultCache())
        assert invalidator.is_running is False

    @pytest.mark.asyncio
    async def test_start_and_stop(self, tmp_path: Path) -> None:
        invalidator = CacheInvalidator([tmp_path], ResultCache())

        await invalidator.start()
        assert invalidator.is_running is True

        await invalidator.stop()
        assert invalidator.is_running is False

    @pytest.mark.asyncio
    async def test_stop_without_start(self, tmp_path: Path) -> None:
        invalidator = CacheInvalidator([tmp_path], ResultCache())
        await invalidator.stop()
        assert invalidator.is_running is False
