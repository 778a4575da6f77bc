"""flipscan diff command - Flipper review sections for a change set."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

import click

if TYPE_CHECKING:
    from flipscan.cli import FlipscanContext


@click.command("diff")
@click.argument("base_ref", required=False)
@click.argument("target_ref", required=False)
@click.option(
    "--input",
    "-i",
    "input_file",
    type=click.File("r", encoding="utf-8"),
    help="Read a unified diff from a file ('-' for stdin) instead of git",
)
@click.option("--staged", is_flag=True, help="Diff staged changes (git diff --cached)")
@click.option(
    "--path",
    "-p",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=Path("."),
    help="Repository path (default: current directory)",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["text", "json", "markdown"]),
    default=None,
    help="Output format (default: from config)",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    help="Output file (default: stdout)",
)
@click.option(
    "--fail-on-flags",
    is_flag=True,
    help="Exit with code 2 when the change touches flippers",
)
@click.pass_obj
def diff(
    ctx: FlipscanContext,
    base_ref: str | None,
    target_ref: str | None,
    input_file: TextIO | None,
    staged: bool,
    path: Path,
    output_format: str | None,
    output: Path | None,
    fail_on_flags: bool,
) -> None:
    """Detect flipper changes in a diff and render PR review sections.

    Without --input the diff comes from git: the working tree by default,
    the index with --staged, or BASE_REF..TARGET_REF when refs are given.

    \b
    Examples:
        flipscan diff                       # Uncommitted changes
        flipscan diff main                  # Working tree vs main
        flipscan diff main feature-branch   # Between two refs
        git diff main | flipscan diff -i - -f markdown
    """
    from flipscan.analyzer import Availability, FileChangeAnalyzer
    from flipscan.config import FlipscanConfig
    from flipscan.diff.git_utils import get_diff, get_repo_root
    from flipscan.errors import ExitCode, GitError
    from flipscan.logging import print_error, print_success, print_warning
    from flipscan.report import DiffReporter
    from flipscan.sources import WorkspaceContentSource

    if ctx.config is None:
        ctx.config = FlipscanConfig()
    config = ctx.config

    try:
        if input_file is not None:
            diff_text = input_file.read()
            root = path
        else:
            root = get_repo_root(path)
            diff_text = get_diff(root, base_ref, target_ref, staged=staged)
    except GitError as e:
        print_error(e.message)
        sys.exit(ExitCode.GIT_ERROR)

    analyzer = FileChangeAnalyzer.from_config(
        config, content_source=WorkspaceContentSource(root)
    )
    result = analyzer.analyze_diff(diff_text)
    for file_result in result.per_file_results:
        if file_result.availability == Availability.UNAVAILABLE:
            print_warning(f"No content available for {file_result.path}")

    reporter = DiffReporter()
    fmt = output_format or config.output.format
    if fmt == "json":
        output_str = reporter.report_json(result)
    elif fmt == "markdown":
        output_str = reporter.report_markdown(result)
    else:
        output_str = reporter.report_text(
            result, no_color=ctx.no_color or not config.output.color
        )

    if output:
        output.write_text(output_str, encoding="utf-8")
        print_success(f"Report written to {output}")
    elif output_str:
        click.echo(output_str)

    if fail_on_flags and result.has_flags:
        sys.exit(ExitCode.FLAGS_FOUND)


__all__ = ["diff"]
