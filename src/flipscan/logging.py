"""Logging and console output for flipscan.

Log records go to stderr through rich. The print_* helpers write user-facing
messages as literal text: they routinely carry file paths and git stderr,
and square brackets in those must not be read as rich markup.
"""

from __future__ import annotations

import logging
from typing import Literal

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

console = Console()
err_console = Console(stderr=True)

Verbosity = Literal["quiet", "normal", "verbose"]

LOG_LEVELS: dict[str, int] = {
    "quiet": logging.ERROR,
    "normal": logging.INFO,
    "verbose": logging.DEBUG,
}

# Logs every filesystem event at INFO
_NOISY_LOGGERS = ("watchfiles",)


def verbosity_from_flags(verbose: bool, quiet: bool) -> Verbosity:
    """Resolve -v/-q. Quiet wins when both are given."""
    if quiet:
        return "quiet"
    if verbose:
        return "verbose"
    return "normal"


def setup_logging(verbosity: Verbosity = "normal") -> logging.Logger:
    """Route flipscan logs to stderr at the level for a verbosity.

    Calling it again replaces the previous handler.
    """
    verbose = verbosity == "verbose"

    logger = logging.getLogger("flipscan")
    logger.handlers.clear()
    logger.setLevel(LOG_LEVELS[verbosity])

    handler = RichHandler(
        console=err_console,
        show_time=verbose,
        show_path=verbose,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)

    return logger


def _emit(target: Console, message: str, label: str = "", style: str = "") -> None:
    text = Text()
    if label:
        text.append(f"{label} ", style=style)
        text.append(message)
    else:
        text.append(message, style=style)
    target.print(text)


def print_error(message: str) -> None:
    _emit(err_console, message, label="Error:", style="red")


def print_warning(message: str) -> None:
    _emit(err_console, message, label="Warning:", style="yellow")


def print_success(message: str) -> None:
    _emit(console, message, style="green")


def print_info(message: str) -> None:
    _emit(console, message)
