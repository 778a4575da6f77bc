"""flipscan watch command - Re-run diff analysis as files change."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from flipscan.cli import FlipscanContext


@click.command("watch")
@click.option(
    "--path",
    "-p",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=Path("."),
    help="Repository path (default: current directory)",
)
@click.pass_obj
def watch(ctx: FlipscanContext, path: Path) -> None:
    """Watch the working tree and report flipper changes on every edit.

    Cached results are dropped whenever a source or template file changes,
    then the uncommitted diff is analyzed again.
    """
    from flipscan.analyzer import FileChangeAnalyzer
    from flipscan.cache import ResultCache
    from flipscan.config import FlipscanConfig
    from flipscan.diff.git_utils import get_diff, get_repo_root
    from flipscan.errors import ExitCode, GitError
    from flipscan.logging import print_error, print_info
    from flipscan.sources import WorkspaceContentSource
    from flipscan.watcher import CacheInvalidator

    if ctx.config is None:
        ctx.config = FlipscanConfig()
    config = ctx.config

    try:
        root = get_repo_root(path)
    except GitError as e:
        print_error(e.message)
        sys.exit(ExitCode.GIT_ERROR)

    cache = ResultCache.from_config(config.cache)
    analyzer = FileChangeAnalyzer.from_config(
        config, content_source=WorkspaceContentSource(root), cache=cache
    )

    def report() -> None:
        try:
            result = analyzer.analyze_diff(get_diff(root))
        except GitError as e:
            print_error(e.message)
            return
        flags = ", ".join(result.unique_flag_names) or "none"
        print_info(f"{result.summary} (flags: {flags})")

    invalidator = CacheInvalidator(
        [root],
        cache,
        extensions=config.analyzer.extensions,
        on_invalidate=report,
    )

    async def run() -> None:
        await invalidator.start()
        try:
            while invalidator.is_running:
                await asyncio.sleep(0.5)
        finally:
            await invalidator.stop()

    report()
    print_info(f"Watching {root} (Ctrl+C to stop)")
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


__all__ = ["watch"]
