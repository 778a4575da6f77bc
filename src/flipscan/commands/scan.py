"""flipscan scan command - Find flipper usages in files."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from flipscan.cli import FlipscanContext


@click.command("scan")
@click.argument(
    "paths",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["text", "json"]),
    default=None,
    help="Output format (default: from config)",
)
@click.pass_obj
def scan(ctx: FlipscanContext, paths: tuple[Path, ...], output_format: str | None) -> None:
    """Scan files for flipper usages.

    Every file is analyzed as-is, regardless of extension.

    \b
    Examples:
        flipscan scan src/app/billing.service.ts
        flipscan scan src/app/*.ts -f json
    """
    from flipscan.cache import ResultCache
    from flipscan.config import FlipscanConfig
    from flipscan.errors import ExitCode
    from flipscan.logging import print_error
    from flipscan.matcher import AnalysisResult, ContentMatcher
    from flipscan.report import DiffReporter

    if ctx.config is None:
        ctx.config = FlipscanConfig()
    config = ctx.config

    matcher = ContentMatcher(
        cache=ResultCache.from_config(config.cache),
        context_radius=config.analyzer.context_radius,
    )

    results: dict[str, AnalysisResult] = {}
    failed = False
    for path in paths:
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            print_error(f"Failed to read {path}: {e}")
            failed = True
            continue
        results[str(path)] = matcher.analyze(text)

    reporter = DiffReporter()
    fmt = output_format or ("json" if config.output.format == "json" else "text")
    if fmt == "json":
        click.echo(reporter.report_scan_json(results))
    else:
        click.echo(reporter.report_scan_text(results, no_color=ctx.no_color))

    if failed:
        sys.exit(ExitCode.FATAL_ERROR)


__all__ = ["scan"]
