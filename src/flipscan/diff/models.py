"""Data models for parsed unified diffs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ChangeStatus(Enum):
    """How a file changed in a diff."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"


@dataclass
class FileChangeRecord:
    """One file section of a unified diff.

    reconstructed_content holds the file as it reads after the change, rebuilt
    from added and context lines only. Removed lines never appear in it, and
    it is always empty for a deleted file.
    """

    path: str  # Post-change path (the b/ side)
    change_status: ChangeStatus = ChangeStatus.MODIFIED
    reconstructed_content: str = ""
    old_path: str | None = None  # Set for renames

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "change_status": self.change_status.value,
            "old_path": self.old_path,
            "reconstructed_content": self.reconstructed_content,
        }


@dataclass
class ParsedDiff:
    """All file sections of a unified diff, in diff order."""

    files: list[FileChangeRecord] = field(default_factory=list)

    @property
    def summary(self) -> str:
        return f"{len(self.files)} files changed"

    def to_dict(self) -> dict[str, Any]:
        return {
            "files": [f.to_dict() for f in self.files],
            "summary": self.summary,
        }
