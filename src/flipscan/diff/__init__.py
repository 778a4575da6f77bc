"""flipscan Diff - Unified diff parsing.

Turns a unified diff into per-file change records whose content is the file
as it reads after the change:

    >>> from flipscan.diff import parse_diff
    >>> parsed = parse_diff(diff_text)
    >>> for record in parsed.files:
    ...     print(record.change_status.value, record.path)
"""

from __future__ import annotations

from flipscan.diff.git_utils import get_diff, get_repo_root, run_git
from flipscan.diff.models import ChangeStatus, FileChangeRecord, ParsedDiff
from flipscan.diff.parser import DiffParser, parse_diff

__all__ = [
    "ChangeStatus",
    "FileChangeRecord",
    "ParsedDiff",
    "DiffParser",
    "parse_diff",
    "run_git",
    "get_repo_root",
    "get_diff",
]
