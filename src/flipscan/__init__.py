"""flipscan - Detect flipper (feature-flag) usage in code and diffs."""

from flipscan.analyzer import (
    Availability,
    DiffAnalysisResult,
    FileAnalysisResult,
    FileChangeAnalyzer,
)
from flipscan.cache import ResultCache
from flipscan.matcher import AnalysisResult, ContentMatcher, Detection
from flipscan.report import DiffReporter, ReportSections, build_sections
from flipscan.rules import DetectionRule, RuleCategory, RuleRegistry

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "RuleCategory",
    "DetectionRule",
    "RuleRegistry",
    "Detection",
    "AnalysisResult",
    "ContentMatcher",
    "ResultCache",
    "Availability",
    "FileAnalysisResult",
    "DiffAnalysisResult",
    "FileChangeAnalyzer",
    "ReportSections",
    "build_sections",
    "DiffReporter",
]
