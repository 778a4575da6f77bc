"""Content matcher - runs the rule registry over a block of text."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from flipscan.cache import ResultCache
from flipscan.rules import RuleCategory, RuleRegistry

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT_RADIUS = 50

_HASH_MASK = 0xFFFFFFFF


def fingerprint(text: str) -> str:
    """Compute the cache key for a block of text.

    A 32-bit polynomial rolling hash over every character, prefixed with the
    text length.
    """
    h = 0
    for ch in text:
        h = (h * 31 + ord(ch)) & _HASH_MASK
    return f"{len(text)}:{h:08x}"


@dataclass(frozen=True)
class Detection:
    """One located occurrence of a flipper usage idiom."""

    category: RuleCategory
    description: str
    line: int  # 1-based
    column: int  # 0-based
    match: str
    flag_name: str | None
    context: str
    rule_name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category.value,
            "rule": self.rule_name,
            "description": self.description,
            "line": self.line,
            "column": self.column,
            "match": self.match,
            "flag_name": self.flag_name,
            "context": self.context,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Detections found in one block of text."""

    detections: tuple[Detection, ...] = field(default_factory=tuple)
    summary: str = ""

    @property
    def flag_names(self) -> list[str]:
        """Resolved flag names in order of first appearance."""
        return unique_flag_names(self.detections)

    def to_dict(self) -> dict[str, Any]:
        return {
            "detections": [d.to_dict() for d in self.detections],
            "flag_names": self.flag_names,
            "summary": self.summary,
        }


def unique_flag_names(detections: Any) -> list[str]:
    """Collect resolved flag names, first appearance wins, no duplicates."""
    seen: dict[str, None] = {}
    for detection in detections:
        if detection.flag_name:
            seen.setdefault(detection.flag_name, None)
    return list(seen)


def summarize_detections(detections: tuple[Detection, ...]) -> str:
    flag_count = len(unique_flag_names(detections))
    return f"Found {len(detections)} flipper references affecting {flag_count} feature flags"


class ContentMatcher:
    """Find flipper usages in text.

    Every rule is searched over the whole text and its matches are appended
    in rule-then-occurrence order. Results are cached by fingerprint, so
    identical text is only scanned once until the cache is cleared.

    Example:
        >>> matcher = ContentMatcher()
        >>> result = matcher.analyze("this.flipperService.flipperEnabled('new_nav')")
        >>> [d.flag_name for d in result.detections]
        ['new_nav']
    """

    def __init__(
        self,
        registry: RuleRegistry | None = None,
        cache: ResultCache | None = None,
        context_radius: int = DEFAULT_CONTEXT_RADIUS,
    ) -> None:
        """Initialize the matcher.

        Args:
            registry: Rules to evaluate. Defaults to the built-in catalog.
            cache: Result cache. A private cache is created when omitted.
            context_radius: Characters of context kept on each side of a match
        """
        self.registry = registry or RuleRegistry()
        self.cache = cache if cache is not None else ResultCache()
        self.context_radius = context_radius

    def analyze(self, text: str) -> AnalysisResult:
        """Analyze a block of text for flipper usages.

        Never raises for string input; text without matches yields an
        empty result.
        """
        key = fingerprint(text)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        detections: list[Detection] = []
        for rule in self.registry.get_rules():
            for match in rule.compiled.finditer(text):
                start = match.start()
                detections.append(
                    Detection(
                        category=rule.category,
                        description=rule.description,
                        line=text.count("\n", 0, start) + 1,
                        column=start - (text.rfind("\n", 0, start) + 1),
                        match=match.group(0),
                        flag_name=rule.resolve_flag(match),
                        context=self._context(text, start),
                        rule_name=rule.name,
                    )
                )

        found = tuple(detections)
        result = AnalysisResult(detections=found, summary=summarize_detections(found))
        self.cache.set(key, result)
        return result

    def clear_cache(self) -> int:
        """Drop every cached result. Returns the number of entries dropped."""
        return self.cache.clear()

    def _context(self, text: str, index: int) -> str:
        start = max(0, index - self.context_radius)
        end = min(len(text), index + self.context_radius)
        return text[start:end]


__all__ = [
    "Detection",
    "AnalysisResult",
    "ContentMatcher",
    "fingerprint",
    "unique_flag_names",
    "summarize_detections",
]
