"""Content sources - current file text for paths named in a diff."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Protocol, runtime_checkable

from flipscan.errors import ContentSourceError


@runtime_checkable
class ContentSource(Protocol):
    """Provides the current text of a file by relative path."""

    def read(self, path: str) -> str | None:
        """Return the file's text, or None if it does not exist.

        Raises:
            ContentSourceError: If the file exists but cannot be read
        """
        ...


class WorkspaceContentSource:
    """Read files beneath a workspace root."""

    def __init__(self, root: Path) -> None:
        self.root = root.resolve()

    def read(self, path: str) -> str | None:
        if "\x00" in path:
            raise ContentSourceError(f"Invalid path {path!r}: embedded null byte", path=path)
        try:
            file_path = (self.root / path).resolve()
        except (OSError, ValueError) as e:
            raise ContentSourceError(f"Invalid path {path!r}: {e}", path=path) from e

        if not file_path.is_relative_to(self.root):
            raise ContentSourceError(f"Path escapes workspace root: {path}", path=path)
        if not file_path.is_file():
            return None

        try:
            return file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ContentSourceError(f"Failed to read {path}: {e}", path=path) from e


class MappingContentSource:
    """Serve file text from an in-memory mapping."""

    def __init__(self, files: Mapping[str, str]) -> None:
        self.files = dict(files)

    def read(self, path: str) -> str | None:
        return self.files.get(path)


__all__ = ["ContentSource", "WorkspaceContentSource", "MappingContentSource"]
