"""Cache invalidation on filesystem changes.

Watches paths with watchfiles and clears a ResultCache whenever a source or
template file changes. The cache has no TTL, so anything that keeps a matcher
alive across edits should run one of these.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from pathlib import Path

from watchfiles import Change, awatch

from flipscan.cache import ResultCache
from flipscan.config import DEFAULT_EXTENSIONS

logger = logging.getLogger(__name__)

# Directories to skip during file watching
SKIP_DIRECTORIES = {
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    "__pycache__",
    ".venv",
    "venv",
    "dist",
    "build",
    ".angular",
    ".nx",
    "coverage",
}


class CacheInvalidator:
    """Async filesystem watcher that clears a result cache.

    Attributes:
        paths: Paths being watched
        cache: Cache cleared on relevant changes
    """

    def __init__(
        self,
        paths: list[Path],
        cache: ResultCache,
        extensions: list[str] | None = None,
        on_invalidate: Callable[[], None] | None = None,
    ) -> None:
        """Initialize the invalidator.

        Args:
            paths: Paths to watch
            cache: Cache to clear
            extensions: File extensions whose changes invalidate the cache
            on_invalidate: Called after each clear (e.g. to re-run an analysis)
        """
        self.paths = [p.resolve() for p in paths]
        self.cache = cache
        self.on_invalidate = on_invalidate
        self.extensions = tuple(
            ext.lower() for ext in (DEFAULT_EXTENSIONS if extensions is None else extensions)
        )
        self._task: asyncio.Task[None] | None = None
        self._stop_event = asyncio.Event()

    async def start(self) -> None:
        """Start watching in a background task."""
        if self._task is not None:
            logger.warning("CacheInvalidator already running")
            return

        self._stop_event.clear()
        self._task = asyncio.create_task(self._watch())
        logger.info(f"Watching {len(self.paths)} paths for changes")

    async def stop(self) -> None:
        """Stop watching and wait for the background task to finish."""
        if self._task is None:
            return

        self._stop_event.set()
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Stopped watching for changes")

    async def handle_changes(self, changes: Iterable[tuple[Change, str]]) -> int:
        """Clear the cache if any change touches an analyzed file.

        on_invalidate runs in a worker thread so a slow re-analysis does not
        stall the event loop.

        Returns:
            Number of cache entries dropped
        """
        if not any(self._should_process(Path(path)) for _, path in changes):
            return 0
        cleared = self.cache.clear()
        logger.debug(f"File change detected, cleared {cleared} cached results")
        if self.on_invalidate is not None:
            await asyncio.to_thread(self.on_invalidate)
        return cleared

    async def _watch(self) -> None:
        try:
            async for changes in awatch(
                *self.paths,
                stop_event=self._stop_event,
                watch_filter=self._watch_filter,
            ):
                await self.handle_changes(changes)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Watcher error: {e}")
            raise

    def _watch_filter(self, change: Change, path: str) -> bool:
        return self._should_process(Path(path))

    def _should_process(self, path: Path) -> bool:
        if not path.name.lower().endswith(self.extensions):
            return False

        for part in path.parts:
            if part in SKIP_DIRECTORIES:
                return False

        return True

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()


__all__ = ["CacheInvalidator", "SKIP_DIRECTORIES"]
