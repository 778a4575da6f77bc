"""Error handling framework for flipscan."""

from __future__ import annotations

from enum import IntEnum
from typing import Any


class ExitCode(IntEnum):
    """flipscan CLI exit codes."""

    SUCCESS = 0
    CONFIG_ERROR = 1  # Configuration error (user fixable)
    FLAGS_FOUND = 2  # --fail-on-flags and the diff is flag-gated
    FATAL_ERROR = 3  # Unexpected crash
    GIT_ERROR = 4  # Git operation failed


class FlipscanError(Exception):
    """Base exception for flipscan errors."""

    exit_code: ExitCode = ExitCode.FATAL_ERROR

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for JSON output."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "exit_code": int(self.exit_code),
            **self.context,
        }


class ConfigError(FlipscanError):
    """Configuration-related errors."""

    exit_code = ExitCode.CONFIG_ERROR


class RuleDefinitionError(FlipscanError):
    """A detection rule is internally inconsistent."""

    exit_code = ExitCode.CONFIG_ERROR

    def __init__(self, message: str, rule_name: str, **context: Any) -> None:
        super().__init__(message, rule_name=rule_name, **context)
        self.rule_name = rule_name


class GitError(FlipscanError):
    """Error during git operations."""

    exit_code = ExitCode.GIT_ERROR


class ContentSourceError(FlipscanError):
    """A content source could not produce a file's text."""

    exit_code = ExitCode.FATAL_ERROR

    def __init__(self, message: str, path: str, **context: Any) -> None:
        super().__init__(message, path=path, **context)
        self.path = path
