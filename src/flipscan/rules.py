"""Detection rules for flipper (runtime feature-flag) usage.

Each rule pairs a regular expression with a category and an extraction
policy. Rules are plain data: the matcher walks them in registration order
and asks each one to resolve a flag name from its own match.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from flipscan.errors import RuleDefinitionError


class RuleCategory(Enum):
    """Categories of flipper usage idioms."""

    IMPORT_REFERENCE = "import-reference"
    DEPENDENCY_INJECTION = "dependency-injection"
    DIRECT_CALL = "direct-call"
    REACTIVE_STREAM_DECLARATION = "reactive-stream-declaration"
    REACTIVE_STREAM_CHECK = "reactive-stream-check"
    PREDEFINED_STREAM_USAGE = "predefined-stream-usage"
    CONFIGURATION_CALL = "configuration-call"
    STRING_LITERAL = "string-literal"
    CONDITIONAL_CHECK = "conditional-check"
    TEMPLATE_CONDITIONAL = "template-conditional"


@dataclass(frozen=True)
class DetectionRule:
    """Definition of a flipper usage pattern.

    Attributes:
        name: Stable identifier of the rule
        category: Usage idiom the rule recognizes
        pattern: Regex source, compiled once on construction
        description: Human-readable label shown next to detections
        extracts_flag: Whether a match yields a flag name
        flag_group: Capture group holding the flag name (1-based)
        aliases: Raw captured token -> canonical flag name
    """

    name: str
    category: RuleCategory
    pattern: str
    description: str
    extracts_flag: bool = False
    flag_group: int = 1
    aliases: Mapping[str, str] | None = None
    compiled: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        try:
            compiled = re.compile(self.pattern)
        except re.error as e:
            raise RuleDefinitionError(
                f"Rule '{self.name}' has an invalid pattern: {e}", rule_name=self.name
            ) from e

        if self.extracts_flag and not 1 <= self.flag_group <= compiled.groups:
            raise RuleDefinitionError(
                f"Rule '{self.name}' extracts group {self.flag_group} "
                f"but its pattern has {compiled.groups} group(s)",
                rule_name=self.name,
            )
        if self.aliases is not None and not self.extracts_flag:
            raise RuleDefinitionError(
                f"Rule '{self.name}' declares aliases but does not extract a flag",
                rule_name=self.name,
            )

        object.__setattr__(self, "compiled", compiled)
        if self.aliases is not None:
            object.__setattr__(self, "aliases", MappingProxyType(dict(self.aliases)))

    def resolve_flag(self, match: re.Match[str]) -> str | None:
        """Resolve the flag name for one match of this rule.

        Alias lookup comes first; a token missing from the alias map is
        returned as captured.
        """
        if not self.extracts_flag:
            return None

        raw = match.group(self.flag_group)
        if not raw:
            return None
        if self.aliases is not None:
            return self.aliases.get(raw, raw)
        return raw


# Known flipper flag names. Quoted occurrences of these are detected even when
# no flipper method is called (e.g. a flag passed around in a variable).
KNOWN_FLAGS: tuple[str, ...] = (
    "zuora_maintenance",
    "pendo_resource_center",
    "support_chat",
    "show_cc_link_to_pending",
    "show_call_tracking_migration_alert",
    "ci_forms_incentive",
    "reporting_noop",
    "internal_calling",
    "add_remove_lc_agents_ux",
    "zuora_qa",
    "account_billing_usage",
    "use_inti",
    "use_inti_for_bulk_google_adword",
    "use_inti_for_my_case",
    "use_inti_for_unbounce",
    "apple_business_connect",
    "use_inti_for_triggers",
    "use_inti_for_hub_spot",
    "use_inti_for_slack",
    "use_inti_for_ms_teams",
    "other_homepage",
    "accelerated_call_log",
    "homey_enabled",
    "limit_client_view",
    "rollout_anubis",
    "allow_fullstory_tracking",
    "new_numbers_page",
    "cursor_paginate_accelerated_call_log",
    "homepage_onboarding",
    "ai_alpha_action_items",
    "pre_ten_dlc_in_app_messaging",
    "ai_alpha_new_or_existing_customer",
    "ai_alpha_appointment_scheduled",
    "ai_alpha_ai_coach",
    "override_days_to_renewal",
    "ai_alpha_questions_asked",
    "ai_alpha_caller_details",
    "ai_alpha_follow_up_email",
    "ai_alpha_lead_qualification",
    "ai_alpha_led_to_sale",
    "pendo_segmentation",
    "product_tier",
    "prosperstack_flow",
    "ai_alphas_white_label",
    "kyc_registration_live",
    "accelerated_reports",
    "ai_alpha_lead_score",
    "inbound_call_recording",
    "year_end_metrics",
    "click_to_contact_dynamic",
    "account_deletion_ui",
    "sa_update_plans_looky",
    "automation_rule_new_criterias",
    "business_profile_page",
    "smart-follow-up-message-new-tag",
    "voice_assist_workflow_page",
    "native_10dlc_registration",
    "hubspot_e164",
    "voice_assist_select",
    "voice_assist_test_call",
    "automation_rules_templates",
)

# Observables exposed by FlipperService, keyed by their name without the `$`
PREDEFINED_STREAMS: Mapping[str, str] = MappingProxyType({
    "zuoraMaintenance": "zuora_maintenance",
    "reportingNoop": "reporting_noop",
    "acceleratedCallLog": "accelerated_call_log",
    "otherHomepage": "other_homepage",
    "fullstory": "allow_fullstory_tracking",
    "cursorPaginateAcceleratedCallLog": "cursor_paginate_accelerated_call_log",
})

# Upper bounds on free-text runs keep every rule a bounded scan per start
# position, so matching stays linear in the input size.
_MAX_FLAG = 100
_MAX_SPAN = 200
_MAX_PARAMS = 500  # Angular constructors often span several lines

_QUOTE = "['\"`]"
_QUOTED_FLAG = rf"{_QUOTE}([^'\"`\n]{{1,{_MAX_FLAG}}}){_QUOTE}"


def _call(method: str) -> str:
    return rf"{method}\s*\(\s*{_QUOTED_FLAG}\s*\)"


DEFAULT_RULES: list[DetectionRule] = [
    # Infrastructure present, no specific flag
    DetectionRule(
        name="flipper_service_import",
        category=RuleCategory.IMPORT_REFERENCE,
        pattern=rf"import\s+.{{0,{_MAX_SPAN}}}FlipperService.{{0,{_MAX_SPAN}}}from\s+['\"]@callrail/looky/core['\"]",
        description="FlipperService import",
    ),
    DetectionRule(
        name="flipper_flags_import",
        category=RuleCategory.IMPORT_REFERENCE,
        pattern=rf"import\s+.{{0,{_MAX_SPAN}}}FlipperFlags.{{0,{_MAX_SPAN}}}from.{{0,{_MAX_SPAN}}}flipper-flags",
        description="FlipperFlags type import",
    ),
    DetectionRule(
        name="flipper_service_injection",
        category=RuleCategory.DEPENDENCY_INJECTION,
        pattern=rf"constructor\([^)]{{0,{_MAX_PARAMS}}}FlipperService[^)]{{0,{_MAX_PARAMS}}}\)",
        description="FlipperService dependency injection",
    ),

    # Direct method calls
    DetectionRule(
        name="flipper_enabled_call",
        category=RuleCategory.DIRECT_CALL,
        pattern=r"\." + _call("flipperEnabled"),
        description="flipperEnabled() method call",
        extracts_flag=True,
    ),
    DetectionRule(
        name="eagerly_enabled_call",
        category=RuleCategory.DIRECT_CALL,
        pattern=r"\." + _call("eagerlyEnabled"),
        description="eagerlyEnabled() method call",
        extracts_flag=True,
    ),

    # Observables built on FlipperService.flipper$
    DetectionRule(
        name="flipper_observable_declaration",
        category=RuleCategory.REACTIVE_STREAM_DECLARATION,
        pattern=rf"(\w{{1,{_MAX_FLAG}}})\$:\s*Observable<boolean>\s*=\s*this\.flipper\$\.pipe\(",
        description="Flipper observable declaration",
        extracts_flag=True,
        flag_group=1,
    ),
    DetectionRule(
        name="observable_is_enabled_check",
        category=RuleCategory.REACTIVE_STREAM_CHECK,
        pattern=(
            rf"\.pipe\(\s*map\(\s*\([^)\n]{{0,{_MAX_SPAN}}}\)\s*=>\s*[^.\n]{{0,{_MAX_SPAN}}}\."
            + _call("isEnabled")
            + r"\s*\)"
        ),
        description="Feature flag check in observable pipe",
        extracts_flag=True,
    ),
    DetectionRule(
        name="predefined_observable",
        category=RuleCategory.PREDEFINED_STREAM_USAGE,
        pattern=r"(" + "|".join(PREDEFINED_STREAMS) + r")\$",
        description="Pre-defined flipper observable usage",
        extracts_flag=True,
        aliases=PREDEFINED_STREAMS,
    ),

    # Whole flag sets, no single flag
    DetectionRule(
        name="load_flippers",
        category=RuleCategory.CONFIGURATION_CALL,
        pattern=rf"loadFlippers\s*\([^)]{{0,{_MAX_SPAN}}}\)",
        description="Flipper configuration loading",
    ),
    DetectionRule(
        name="enabled_flippers",
        category=RuleCategory.CONFIGURATION_CALL,
        pattern=rf"enabledFlippers\s*\([^)]{{0,{_MAX_SPAN}}}\)",
        description="Flipper enablement configuration",
    ),

    DetectionRule(
        name="known_flag_literal",
        category=RuleCategory.STRING_LITERAL,
        pattern=_QUOTE + "(" + "|".join(re.escape(f) for f in KNOWN_FLAGS) + ")" + _QUOTE,
        description="Feature flag string literal",
        extracts_flag=True,
    ),

    # Same calls, anchored in control flow
    DetectionRule(
        name="conditional_flipper_check",
        category=RuleCategory.CONDITIONAL_CHECK,
        pattern=(
            rf"if\s*\([^)]{{0,{_MAX_SPAN}}}\.(?:flipperEnabled|eagerlyEnabled|isEnabled)\s*\(\s*"
            + _QUOTED_FLAG
            + rf"\s*\)[^)]{{0,{_MAX_SPAN}}}\)"
        ),
        description="Conditional flipper check",
        extracts_flag=True,
    ),
    DetectionRule(
        name="template_flipper_conditional",
        category=RuleCategory.TEMPLATE_CONDITIONAL,
        pattern=(
            rf"\*ngIf\s*=\s*['\"`][^'\"`]{{0,{_MAX_SPAN}}}(?:flipperEnabled|eagerlyEnabled)\s*\(\s*"
            + _QUOTED_FLAG
            + rf"\s*\)[^'\"`]{{0,{_MAX_SPAN}}}['\"`]"
        ),
        description="Angular template flipper conditional",
        extracts_flag=True,
    ),
]


class RuleRegistry:
    """Ordered, read-only catalog of detection rules."""

    def __init__(self, rules: Iterable[DetectionRule] | None = None) -> None:
        """Initialize the registry.

        Args:
            rules: Rules in evaluation order. Defaults to DEFAULT_RULES.

        Raises:
            RuleDefinitionError: If two rules share a name
        """
        self._rules: tuple[DetectionRule, ...] = tuple(
            DEFAULT_RULES if rules is None else rules
        )

        seen: set[str] = set()
        for rule in self._rules:
            if rule.name in seen:
                raise RuleDefinitionError(
                    f"Duplicate rule name: {rule.name}", rule_name=rule.name
                )
            seen.add(rule.name)

    def get_rules(self) -> tuple[DetectionRule, ...]:
        """Return all rules in registration order."""
        return self._rules

    def by_category(self, category: RuleCategory) -> tuple[DetectionRule, ...]:
        """Return the rules of one category, in registration order."""
        return tuple(r for r in self._rules if r.category == category)

    def known_flags(self) -> tuple[str, ...]:
        """Return the flag names recognized as bare string literals."""
        return KNOWN_FLAGS

    def __iter__(self) -> Iterator[DetectionRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)


__all__ = [
    "RuleCategory",
    "DetectionRule",
    "RuleRegistry",
    "DEFAULT_RULES",
    "KNOWN_FLAGS",
    "PREDEFINED_STREAMS",
]
