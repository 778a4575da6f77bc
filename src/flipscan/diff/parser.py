"""Unified diff parser.

Rebuilds, per file, the text a change leaves behind: every added (`+`) and
context (` `) line in order, each terminated with a newline. This is not a
byte-exact checkout, only enough text for the matcher to see what the change
introduces. Unrecognized lines are skipped, never rejected.
"""

from __future__ import annotations

import re

from flipscan.diff.models import ChangeStatus, FileChangeRecord, ParsedDiff

_FILE_HEADER = re.compile(r"^diff --git a/(.+) b/(.+)$")


class DiffParser:
    """Line-oriented state machine over a unified diff."""

    def __init__(self) -> None:
        self._files: list[FileChangeRecord] = []
        self._current: FileChangeRecord | None = None
        self._lines: list[str] = []
        self._in_hunk = False

    def parse(self, diff_text: str) -> ParsedDiff:
        """Parse a unified diff into per-file change records."""
        self._files = []
        self._current = None
        self._lines = []
        self._in_hunk = False

        for raw_line in diff_text.split("\n"):
            self._feed(raw_line.removesuffix("\r"))
        self._flush()

        return ParsedDiff(files=self._files)

    def _feed(self, line: str) -> None:
        if line.startswith("diff --git"):
            self._start_file(line)
            return

        current = self._current
        if current is None:
            return

        if line.startswith("@@"):
            self._in_hunk = True
        elif line.startswith("new file mode"):
            current.change_status = ChangeStatus.ADDED
        elif line.startswith("deleted file mode"):
            current.change_status = ChangeStatus.DELETED
        elif line.startswith("rename from"):
            current.change_status = ChangeStatus.RENAMED
            current.old_path = line[len("rename from"):].strip() or None
        elif line.startswith("+"):
            # `+++ b/path` precedes the first hunk; inside a hunk it is content
            if not self._in_hunk and line.startswith("+++"):
                return
            self._lines.append(line[1:])
        elif line.startswith(" "):
            self._lines.append(line[1:])

    def _start_file(self, header: str) -> None:
        self._flush()

        match = _FILE_HEADER.match(header)
        if match is None:
            # Skip the section until the next recognizable header
            return

        self._current = FileChangeRecord(path=match.group(2))

    def _flush(self) -> None:
        current = self._current
        if current is not None:
            if current.change_status == ChangeStatus.DELETED:
                current.reconstructed_content = ""
            else:
                current.reconstructed_content = "".join(f"{line}\n" for line in self._lines)
            self._files.append(current)

        self._current = None
        self._lines = []
        self._in_hunk = False


def parse_diff(diff_text: str) -> ParsedDiff:
    """Parse a unified diff.

    Example:
        >>> diff = "diff --git a/app.ts b/app.ts\\n+const a = 1;\\n"
        >>> parse_diff(diff).files[0].reconstructed_content
        'const a = 1;\\n'
    """
    return DiffParser().parse(diff_text)


__all__ = ["DiffParser", "parse_diff"]
