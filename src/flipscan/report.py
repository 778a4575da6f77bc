"""Review report synthesis for flipper detections.

build_sections() renders the two pull-request sections (QA checklist and
environment setup brief) from a list of flag names. DiffReporter renders a
whole diff analysis as terminal text, JSON, or markdown.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from flipscan.analyzer import DiffAnalysisResult
    from flipscan.matcher import AnalysisResult, Detection

FLIPPER_DOCS_URL = "https://callrail.atlassian.net/l/c/u7fFhHPM"
FLIPPER_CLOUD_URL = "https://www.flippercloud.io/docs/ui"


@dataclass(frozen=True)
class ReportSections:
    """Markdown blocks for a pull-request description."""

    qa_section: str = ""
    details_section: str = ""


def _flag_list(flag_names: Sequence[str], indent: str = "") -> str:
    return "\n".join(f"{indent}- `{flag}`" for flag in flag_names)


def build_sections(flag_names: Sequence[str]) -> ReportSections:
    """Render the QA and environment-setup sections for a set of flags.

    Args:
        flag_names: Unique flag names in order of first appearance

    Returns:
        ReportSections; both sections are empty strings for an empty list
    """
    if not flag_names:
        return ReportSections()

    qa_section = f"""## 🔄 Feature Flags / Flipper Changes

**⚠️ This work is being hidden behind Feature Flags (Flippers)**

### Detected Flipper Changes:
{_flag_list(flag_names)}

### 📋 QA Checklist - Flipper Setup Required:
- [ ] Test functionality with flipper(s) **DISABLED** (fallback behavior)
- [ ] Test functionality with flipper(s) **ENABLED** (new behavior)
- [ ] Verify flipper(s) can be toggled without requiring deployment

### 🧹 Post-Release Cleanup:
- [ ] Remove flipper conditional logic from codebase
- [ ] **IMPORTANT**: Schedule flipper removal after 100% rollout
- [ ] Clean up unused flipper definitions
- [ ] Update documentation to reflect permanent changes"""

    details_section = f"""## 🔧 Environment Setup Details - Flipper Configuration

### Staging Environment Setup:
1. **Flipper Dashboard Configuration:**
   - Access Staging Flipper dashboard
   - Verify the following flipper(s) are configured:
{_flag_list(flag_names, indent="     ")}
   - Ensure flipper(s) are initially set to **DISABLED**

2. **Testing Protocol:**
   - Deploy to staging with flipper(s) disabled
   - Verify fallback behavior works correctly
   - Enable flipper(s) and test new functionality
   - Confirm flipper(s) can be toggled without redeployment

### Production Environment Setup:
1. **Pre-Deployment:**
   - Ensure flipper(s) are configured in Production Flipper dashboard
   - Set flipper(s) to **DISABLED** initially
   - Document rollback procedure

2. **Rollout Strategy:**
   - Plan gradual rollout (percentage-based or user-based)
   - Monitor metrics and error rates during rollout
   - Have rollback plan ready in case of issues

### 🔗 Resources:
- [Flipper Documentation]({FLIPPER_DOCS_URL})
- [Flipper Cloud Dashboard]({FLIPPER_CLOUD_URL})

### 📞 Coordination Required:
- **PR Developer**: Responsible for flipper configuration across environments
- **QA Team**: For testing both enabled/disabled states
- **Product Team**: For rollout strategy and success metrics

> **⚠️ Important**: This feature requires environment setup before deployment. Coordinate with DevOps team early in the development cycle."""

    return ReportSections(qa_section=qa_section, details_section=details_section)


# ANSI color codes
class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    CYAN = "\033[36m"


def _color(text: str, color: str, no_color: bool = False) -> str:
    """Apply color to text."""
    if no_color:
        return text
    return f"{color}{text}{Colors.RESET}"


class DiffReporter:
    """Generate flipper reports in various formats.

    Example:
        >>> reporter = DiffReporter()
        >>> print(reporter.report_markdown(analyzer.analyze_diff(diff_text)))
    """

    def report_text(
        self,
        result: DiffAnalysisResult,
        no_color: bool = False,
    ) -> str:
        """Generate a human-readable terminal report.

        Args:
            result: The diff analysis.
            no_color: If True, disable ANSI color codes.

        Returns:
            Formatted text report.
        """
        lines: list[str] = []

        header = "Flipper analysis"
        lines.append(_color(header, Colors.BOLD, no_color))
        lines.append(_color("=" * len(header), Colors.DIM, no_color))
        lines.append(result.summary)
        lines.append("")

        if not result.has_flags:
            lines.append(_color("No flipper changes detected.", Colors.DIM, no_color))
            return "\n".join(lines)

        lines.append(_color(f"Flags ({len(result.unique_flag_names)}):", Colors.BOLD, no_color))
        for flag in result.unique_flag_names:
            lines.append(f"  {_color(flag, Colors.YELLOW, no_color)}")
        lines.append("")

        for file_result in result.per_file_results:
            if not file_result.detections:
                continue
            status = file_result.change_status.value
            lines.append(
                f"{_color(file_result.path, Colors.CYAN, no_color)} "
                + _color(f"({status})", Colors.DIM, no_color)
            )
            lines.extend(self._detection_lines(file_result.detections, no_color))
            lines.append("")

        return "\n".join(lines).rstrip("\n")

    def report_json(self, result: DiffAnalysisResult) -> str:
        """Generate JSON report."""
        return json.dumps(result.to_dict(), indent=2)

    def report_markdown(self, result: DiffAnalysisResult) -> str:
        """Generate the pull-request sections, empty when no flag was found."""
        sections = [s for s in (result.qa_section, result.details_section) if s]
        return "\n\n".join(sections)

    def report_scan_text(
        self,
        results: Mapping[str, AnalysisResult],
        no_color: bool = False,
    ) -> str:
        """Generate a terminal report for files scanned directly.

        Args:
            results: Analysis per file path, in display order.
            no_color: If True, disable ANSI color codes.
        """
        lines: list[str] = []
        for path, analysis in results.items():
            lines.append(_color(path, Colors.CYAN, no_color))
            lines.append(f"  {analysis.summary}")
            lines.extend(self._detection_lines(analysis.detections, no_color))
            lines.append("")
        return "\n".join(lines).rstrip("\n")

    def report_scan_json(self, results: Mapping[str, AnalysisResult]) -> str:
        return json.dumps({path: r.to_dict() for path, r in results.items()}, indent=2)

    def _detection_lines(
        self, detections: Sequence[Detection], no_color: bool
    ) -> list[str]:
        lines = []
        for d in detections:
            location = _color(f"{d.line}:{d.column}", Colors.DIM, no_color)
            flag = f" -> {_color(d.flag_name, Colors.GREEN, no_color)}" if d.flag_name else ""
            lines.append(f"  {location} [{d.category.value}] {d.description}{flag}")
        return lines


__all__ = ["ReportSections", "build_sections", "DiffReporter"]
