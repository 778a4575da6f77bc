"""Tests for the content matcher."""

from __future__ import annotations

import time

import pytest

from flipscan.cache import ResultCache
from flipscan.matcher import (
    ContentMatcher,
    fingerprint,
    summarize_detections,
    unique_flag_names,
)
from flipscan.rules import RuleCategory


@pytest.fixture
def matcher() -> ContentMatcher:
    """Create a matcher with the default catalog."""
    return ContentMatcher()


def categories(result) -> list[RuleCategory]:
    return [d.category for d in result.detections]


class TestFingerprint:
    """Tests for the cache key."""

    def test_length_prefix(self) -> None:
        assert fingerprint("abc").startswith("3:")

    def test_empty_text(self) -> None:
        assert fingerprint("") == "0:00000000"

    def test_known_value(self) -> None:
        # 'a' * 31 + 'b' = 97 * 31 + 98
        assert fingerprint("ab") == f"2:{97 * 31 + 98:08x}"

    def test_different_text_different_key(self) -> None:
        assert fingerprint("flag_a") != fingerprint("flag_b")

    def test_wraps_to_32_bits(self) -> None:
        key = fingerprint("x" * 1000)
        length, digest = key.split(":")
        assert length == "1000"
        assert len(digest) == 8


class TestContentMatcher:
    """Tests for detection over source and template text."""

    def test_conditional_direct_call(self, matcher: ContentMatcher) -> None:
        """A guarded call is a direct call, a literal and a conditional."""
        text = "if (this.flipperService.flipperEnabled('zuora_maintenance')) {"
        result = matcher.analyze(text)

        assert categories(result) == [
            RuleCategory.DIRECT_CALL,
            RuleCategory.STRING_LITERAL,
            RuleCategory.CONDITIONAL_CHECK,
        ]
        assert all(d.flag_name == "zuora_maintenance" for d in result.detections)
        assert result.flag_names == ["zuora_maintenance"]

    def test_template_conditional(self, matcher: ContentMatcher) -> None:
        text = """<div *ngIf="flipperService.flipperEnabled('new_feature')">New</div>"""
        result = matcher.analyze(text)

        assert categories(result) == [
            RuleCategory.DIRECT_CALL,
            RuleCategory.TEMPLATE_CONDITIONAL,
        ]
        assert result.flag_names == ["new_feature"]

    def test_string_literal_only(self, matcher: ContentMatcher) -> None:
        result = matcher.analyze("const flag = 'zuora_maintenance';")

        assert categories(result) == [RuleCategory.STRING_LITERAL]
        assert result.detections[0].flag_name == "zuora_maintenance"

    def test_unknown_literal_not_detected(self, matcher: ContentMatcher) -> None:
        result = matcher.analyze("const flag = 'not_a_flipper';")
        assert result.detections == ()

    def test_double_quoted_and_backtick_literals(self, matcher: ContentMatcher) -> None:
        result = matcher.analyze('a = "support_chat"; b = `product_tier`;')
        assert result.flag_names == ["support_chat", "product_tier"]

    def test_unknown_flag_in_conditional(self, matcher: ContentMatcher) -> None:
        result = matcher.analyze("if (this.flipperService.flipperEnabled('test_flag')) {}")

        assert categories(result) == [
            RuleCategory.DIRECT_CALL,
            RuleCategory.CONDITIONAL_CHECK,
        ]
        assert result.flag_names == ["test_flag"]

    def test_import_alone(self, matcher: ContentMatcher) -> None:
        result = matcher.analyze(
            "import { FlipperService } from '@callrail/looky/core';"
        )

        assert categories(result) == [RuleCategory.IMPORT_REFERENCE]
        assert result.detections[0].flag_name is None
        assert result.flag_names == []

    def test_flags_type_import(self, matcher: ContentMatcher) -> None:
        result = matcher.analyze(
            "import { FlipperFlags } from '../models/flipper-flags';"
        )
        assert categories(result) == [RuleCategory.IMPORT_REFERENCE]

    def test_dependency_injection(self, matcher: ContentMatcher) -> None:
        result = matcher.analyze(
            "constructor(private flipperService: FlipperService) {}"
        )
        assert categories(result) == [RuleCategory.DEPENDENCY_INJECTION]
        assert result.detections[0].flag_name is None

    def test_eagerly_enabled(self, matcher: ContentMatcher) -> None:
        result = matcher.analyze("this.flipperService.eagerlyEnabled('beta_nav')")

        assert categories(result) == [RuleCategory.DIRECT_CALL]
        assert result.detections[0].flag_name == "beta_nav"

    def test_observable_declaration(self, matcher: ContentMatcher) -> None:
        result = matcher.analyze(
            "newNav$: Observable<boolean> = this.flipper$.pipe("
        )

        assert categories(result) == [RuleCategory.REACTIVE_STREAM_DECLARATION]
        assert result.detections[0].flag_name == "newNav"

    def test_observable_is_enabled_check(self, matcher: ContentMatcher) -> None:
        result = matcher.analyze(
            "this.flipper$.pipe(map((flags) => flags.isEnabled('homey_enabled')))"
        )

        assert RuleCategory.REACTIVE_STREAM_CHECK in categories(result)
        assert result.flag_names == ["homey_enabled"]

    @pytest.mark.parametrize(
        "stream,flag",
        [
            ("zuoraMaintenance", "zuora_maintenance"),
            ("reportingNoop", "reporting_noop"),
            ("acceleratedCallLog", "accelerated_call_log"),
            ("otherHomepage", "other_homepage"),
            ("fullstory", "allow_fullstory_tracking"),
            ("cursorPaginateAcceleratedCallLog", "cursor_paginate_accelerated_call_log"),
        ],
    )
    def test_predefined_streams(
        self, matcher: ContentMatcher, stream: str, flag: str
    ) -> None:
        result = matcher.analyze(f"this.flipperService.{stream}$.subscribe();")

        assert categories(result) == [RuleCategory.PREDEFINED_STREAM_USAGE]
        assert result.detections[0].flag_name == flag

    def test_configuration_calls(self, matcher: ContentMatcher) -> None:
        result = matcher.analyze(
            "this.flipperService.loadFlippers(account);\n"
            "this.flipperService.enabledFlippers(flags);"
        )

        assert categories(result) == [
            RuleCategory.CONFIGURATION_CALL,
            RuleCategory.CONFIGURATION_CALL,
        ]
        assert result.flag_names == []

    def test_line_and_column(self, matcher: ContentMatcher) -> None:
        text = "const a = 1;\n  if (x.flipperEnabled('beta_flag')) {}\n"
        result = matcher.analyze(text)

        direct, conditional = result.detections
        assert (direct.line, direct.column) == (2, 7)
        assert direct.match == ".flipperEnabled('beta_flag')"
        assert (conditional.line, conditional.column) == (2, 2)

    def test_context_window(self) -> None:
        matcher = ContentMatcher(context_radius=5)
        result = matcher.analyze("abcdefghij.flipperEnabled('f')")

        assert result.detections[0].context == "fghij.flip"

    def test_context_clipped_at_text_bounds(self, matcher: ContentMatcher) -> None:
        text = "x.flipperEnabled('f')"
        result = matcher.analyze(text)
        assert result.detections[0].context == text

    def test_rule_then_occurrence_order(self, matcher: ContentMatcher) -> None:
        """Matches are grouped by rule, not sorted by position."""
        text = (
            "const f = 'zuora_maintenance';\n"
            "svc.flipperEnabled('beta');\n"
            "svc.flipperEnabled('gamma');\n"
        )
        result = matcher.analyze(text)

        assert [(d.rule_name, d.line) for d in result.detections] == [
            ("flipper_enabled_call", 2),
            ("flipper_enabled_call", 3),
            ("known_flag_literal", 1),
        ]
        assert result.flag_names == ["beta", "gamma", "zuora_maintenance"]

    def test_empty_text(self, matcher: ContentMatcher) -> None:
        result = matcher.analyze("")

        assert result.detections == ()
        assert result.summary == "Found 0 flipper references affecting 0 feature flags"

    def test_summary(self, matcher: ContentMatcher) -> None:
        result = matcher.analyze(
            "if (this.flipperService.flipperEnabled('zuora_maintenance')) {"
        )
        assert result.summary == "Found 3 flipper references affecting 1 feature flags"

    def test_idempotent_across_cache_clear(self, matcher: ContentMatcher) -> None:
        text = "if (svc.flipperEnabled('support_chat')) {}"
        first = matcher.analyze(text)

        assert matcher.clear_cache() == 1
        second = matcher.analyze(text)

        assert first == second
        assert first is not second

    def test_cached_result_reused(self) -> None:
        cache = ResultCache()
        matcher = ContentMatcher(cache=cache)
        text = "svc.flipperEnabled('a')"

        first = matcher.analyze(text)
        second = matcher.analyze(text)

        assert first is second
        assert cache.stats()["hits"] == 1
        assert fingerprint(text) in cache

    def test_disabled_cache(self) -> None:
        matcher = ContentMatcher(cache=ResultCache(enabled=False))
        text = "svc.flipperEnabled('a')"

        assert matcher.analyze(text) == matcher.analyze(text)
        assert len(matcher.cache) == 0

    def test_to_dict(self, matcher: ContentMatcher) -> None:
        data = matcher.analyze("svc.flipperEnabled('a')").to_dict()

        assert data["flag_names"] == ["a"]
        detection = data["detections"][0]
        assert detection["category"] == "direct-call"
        assert detection["rule"] == "flipper_enabled_call"
        assert detection["line"] == 1
        assert detection["column"] == 3


class TestHelpers:
    """Tests for flag collection helpers."""

    def test_unique_flag_names_first_appearance(self, matcher: ContentMatcher) -> None:
        result = matcher.analyze(
            "svc.flipperEnabled('b');\nsvc.flipperEnabled('a');\nsvc.flipperEnabled('b');"
        )
        assert unique_flag_names(result.detections) == ["b", "a"]

    def test_summarize_empty(self) -> None:
        assert summarize_detections(()) == (
            "Found 0 flipper references affecting 0 feature flags"
        )


class TestScanCost:
    """Matching cost grows linearly with input size."""

    @pytest.mark.parametrize(
        "chunk",
        [
            "constructor(",
            "if (",
            "loadFlippers(",
            ".pipe(map((",
            "import ",
            '*ngIf="',
            "a",
        ],
    )
    def test_unclosed_openers(self, chunk: str) -> None:
        text = chunk * (400_000 // len(chunk))
        matcher = ContentMatcher(cache=ResultCache(enabled=False))

        start = time.perf_counter()
        result = matcher.analyze(text)
        elapsed = time.perf_counter() - start

        assert result.detections == ()
        assert elapsed < 5.0

    def test_multiline_constructor_still_detected(self, matcher: ContentMatcher) -> None:
        text = (
            "constructor(\n"
            "  private http: HttpClient,\n"
            "  private flipperService: FlipperService,\n"
            ") {}"
        )
        result = matcher.analyze(text)
        assert categories(result) == [RuleCategory.DEPENDENCY_INJECTION]
