"""flipscan CLI - Feature-flag change detection for pull requests."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import load_dotenv

# Load .env file before any other imports that might use env vars
load_dotenv()

import click  # noqa: E402

from flipscan import __version__  # noqa: E402
from flipscan.commands.lazy import LazyCommand, LazyGroup  # noqa: E402

if TYPE_CHECKING:
    from flipscan.config import FlipscanConfig
    from flipscan.logging import Verbosity


class FlipscanContext:
    """Shared context for CLI commands."""

    def __init__(self) -> None:
        self.config: FlipscanConfig | None = None
        self.verbosity: Verbosity = "normal"
        self.debug: bool = False
        self.no_color: bool = False


pass_context = click.make_pass_decorator(FlipscanContext, ensure=True)


# Subcommands, imported on first use
LAZY_COMMANDS: dict[str, LazyCommand] = {
    "diff": LazyCommand("flipscan.commands.diff", "diff", "Flipper review sections for a change set"),
    "scan": LazyCommand("flipscan.commands.scan", "scan", "Find flipper usages in files"),
    "rules": LazyCommand("flipscan.commands.rules", "rules", "List the detection rules"),
    "watch": LazyCommand("flipscan.commands.watch", "watch", "Re-run diff analysis as files change"),
    "init": LazyCommand("flipscan.commands.init", "init", "Write a default .flipscan.toml"),
}


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_COMMANDS)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-error output")
@click.option("--debug", is_flag=True, help="Show full tracebacks on errors")
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file",
)
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.version_option(version=__version__, prog_name="flipscan")
@pass_context
def cli(
    ctx: FlipscanContext,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config: Path | None,
    no_color: bool,
) -> None:
    """flipscan - Find feature-flag (flipper) changes in code and diffs.

    Use 'flipscan <command> --help' for details.
    """
    import sys

    # Lazy import for faster startup
    from flipscan.config import FlipscanConfig
    from flipscan.errors import ConfigError, ExitCode
    from flipscan.logging import print_error, setup_logging, verbosity_from_flags

    ctx.debug = debug

    ctx.verbosity = verbosity_from_flags(verbose, quiet)
    setup_logging(ctx.verbosity)

    # Auto-disable color when piped
    ctx.no_color = no_color or not sys.stdout.isatty()

    try:
        ctx.config = FlipscanConfig.load(config)
    except ConfigError as e:
        print_error(e.message)
        sys.exit(ExitCode.CONFIG_ERROR)


def main() -> None:
    """Entry point for the CLI."""
    import sys

    from flipscan.errors import ExitCode, FlipscanError

    debug_mode = "--debug" in sys.argv

    try:
        cli()
    except click.ClickException:
        raise
    except KeyboardInterrupt:
        sys.exit(130)
    except FlipscanError as e:
        from flipscan.logging import print_error

        print_error(e.message)
        sys.exit(e.exit_code)
    except Exception as e:
        from flipscan.logging import print_error, print_info

        print_error(f"Unexpected error: {e}")
        if debug_mode:
            import traceback

            traceback.print_exc()
        else:
            print_info("Run with --debug for full traceback.")
        sys.exit(ExitCode.FATAL_ERROR)


if __name__ == "__main__":
    main()
