"""File change analyzer - flipper detection across a unified diff.

Parses the diff, keeps source and template files, scans each file's
post-change text, and folds the flag names found into review sections:

    >>> analyzer = FileChangeAnalyzer()
    >>> result = analyzer.analyze_diff(diff_text)
    >>> result.unique_flag_names
    ['zuora_maintenance']
    >>> print(result.qa_section)
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from flipscan.cache import ResultCache
from flipscan.config import DEFAULT_EXTENSIONS
from flipscan.diff.models import ChangeStatus, FileChangeRecord
from flipscan.diff.parser import parse_diff
from flipscan.errors import ContentSourceError
from flipscan.matcher import ContentMatcher, Detection, unique_flag_names
from flipscan.report import build_sections

if TYPE_CHECKING:
    from flipscan.config import FlipscanConfig
    from flipscan.sources import ContentSource

logger = logging.getLogger(__name__)


class Availability(Enum):
    """Whether a file's content could be analyzed."""

    ANALYZED = "analyzed"  # Content found and scanned
    UNAVAILABLE = "unavailable"  # No content in the diff or the content source
    SKIPPED = "skipped"  # Deleted file, nothing left to scan


@dataclass
class FileAnalysisResult:
    """Detections for one file of a diff."""

    path: str
    change_status: ChangeStatus
    detections: tuple[Detection, ...] = field(default_factory=tuple)
    availability: Availability = Availability.ANALYZED

    @property
    def flag_names(self) -> list[str]:
        return unique_flag_names(self.detections)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "change_status": self.change_status.value,
            "availability": self.availability.value,
            "detections": [d.to_dict() for d in self.detections],
        }


@dataclass
class DiffAnalysisResult:
    """Flipper analysis of a whole diff."""

    per_file_results: list[FileAnalysisResult] = field(default_factory=list)
    unique_flag_names: list[str] = field(default_factory=list)
    summary: str = ""
    qa_section: str = ""
    details_section: str = ""

    @property
    def has_flags(self) -> bool:
        return len(self.unique_flag_names) > 0

    @property
    def detection_count(self) -> int:
        return sum(len(r.detections) for r in self.per_file_results)

    def to_dict(self) -> dict[str, Any]:
        return {
            "files": [r.to_dict() for r in self.per_file_results],
            "unique_flag_names": self.unique_flag_names,
            "summary": self.summary,
            "qa_section": self.qa_section,
            "details_section": self.details_section,
        }


class FileChangeAnalyzer:
    """Run the content matcher over every relevant file of a diff."""

    def __init__(
        self,
        matcher: ContentMatcher | None = None,
        content_source: ContentSource | None = None,
        extensions: list[str] | None = None,
        max_workers: int = 4,
    ) -> None:
        """Initialize the analyzer.

        Args:
            matcher: Content matcher (shares its result cache across files)
            content_source: Fallback for files whose diff carries no content
            extensions: File extensions to analyze. Defaults to .ts, .js, .html
            max_workers: Files analyzed concurrently (1 = sequential)
        """
        self.matcher = matcher or ContentMatcher()
        self.content_source = content_source
        self.extensions = tuple(
            ext.lower() for ext in (DEFAULT_EXTENSIONS if extensions is None else extensions)
        )
        self.max_workers = max(1, max_workers)

    @classmethod
    def from_config(
        cls,
        config: FlipscanConfig,
        content_source: ContentSource | None = None,
        cache: ResultCache | None = None,
    ) -> FileChangeAnalyzer:
        """Create an analyzer from configuration."""
        matcher = ContentMatcher(
            cache=cache if cache is not None else ResultCache.from_config(config.cache),
            context_radius=config.analyzer.context_radius,
        )
        return cls(
            matcher=matcher,
            content_source=content_source,
            extensions=config.analyzer.extensions,
            max_workers=config.analyzer.max_workers,
        )

    def should_analyze(self, path: str) -> bool:
        """Check whether a file type is analyzed (source and template files only)."""
        return path.lower().endswith(self.extensions)

    def analyze_diff(self, diff_text: str) -> DiffAnalysisResult:
        """Analyze a unified diff for flipper usage.

        Returns empty review sections when no flag name was resolved.
        """
        parsed = parse_diff(diff_text)
        records = [r for r in parsed.files if self.should_analyze(r.path)]
        logger.debug(
            f"Analyzing {len(records)} of {len(parsed.files)} changed files for flippers"
        )

        if self.max_workers == 1 or len(records) <= 1:
            per_file = [self.analyze_file(r) for r in records]
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                per_file = list(executor.map(self.analyze_file, records))

        flag_names = unique_flag_names(
            d for result in per_file for d in result.detections
        )

        result = DiffAnalysisResult(
            per_file_results=per_file,
            unique_flag_names=flag_names,
            summary=self._summarize(per_file, flag_names),
        )
        if flag_names:
            sections = build_sections(flag_names)
            result.qa_section = sections.qa_section
            result.details_section = sections.details_section

        return result

    def analyze_file(self, record: FileChangeRecord) -> FileAnalysisResult:
        """Analyze one file change.

        Uses the diff's reconstructed content, falling back to the content
        source when the diff carries none. Read failures leave the file
        unavailable and never propagate.
        """
        if record.change_status == ChangeStatus.DELETED:
            return FileAnalysisResult(
                path=record.path,
                change_status=record.change_status,
                availability=Availability.SKIPPED,
            )

        content = record.reconstructed_content or self._read_current(record.path)
        if not content:
            return FileAnalysisResult(
                path=record.path,
                change_status=record.change_status,
                availability=Availability.UNAVAILABLE,
            )

        analysis = self.matcher.analyze(content)
        return FileAnalysisResult(
            path=record.path,
            change_status=record.change_status,
            detections=analysis.detections,
        )

    def _read_current(self, path: str) -> str | None:
        if self.content_source is None:
            return None
        try:
            return self.content_source.read(path)
        except ContentSourceError as e:
            logger.warning(e.message)
            return None
        except Exception as e:
            # A failing read only costs this file
            logger.warning(f"Failed to read {path}: {e}")
            return None

    @staticmethod
    def _summarize(per_file: list[FileAnalysisResult], flag_names: list[str]) -> str:
        total = sum(len(r.detections) for r in per_file)
        files = sum(1 for r in per_file if r.detections)
        return (
            f"Found {total} flipper references across {files} files, "
            f"affecting {len(flag_names)} feature flags"
        )


__all__ = [
    "Availability",
    "FileAnalysisResult",
    "DiffAnalysisResult",
    "FileChangeAnalyzer",
]
