"""Rule registry: static catalogs per tool and rule-set selection."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace

from pattern_lint.config import CustomRuleConfig, ThresholdsConfig
from pattern_lint.rules import fundamentals, functions, markup, modernize
from pattern_lint.rules.base import (
    IO_RULE_ID,
    DocumentCheck,
    Rule,
    RuleConfigError,
    make_rule,
)

logger = logging.getLogger(__name__)

TOOLS = ("modernize", "fundamentals", "functions", "markup")


@dataclass(frozen=True, slots=True)
class RuleInfo:
    """Rule metadata for listing and selection."""

    rule_id: str
    name: str
    description: str
    severity: str
    tool: str
    kind: str
    has_suggestion: bool


@dataclass(frozen=True, slots=True)
class RuleSet:
    """Pattern rules plus document checks selected for one tool."""

    tool: str
    rules: tuple[Rule, ...]
    checks: tuple[DocumentCheck, ...]

    @property
    def ids(self) -> list[str]:
        return [rule.rule_id for rule in self.rules] + [check.check_id for check in self.checks]


@dataclass(frozen=True, slots=True)
class _CatalogSpec:
    rules: tuple[Rule, ...]
    checks: Callable[[ThresholdsConfig], list[DocumentCheck]]


def _fundamentals_checks(thresholds: ThresholdsConfig) -> list[DocumentCheck]:
    return [
        fundamentals.UseStrictCheck(),
        fundamentals.LineLengthCheck(thresholds.max_line_length),
        fundamentals.BraceDepthCheck(thresholds.brace_depth),
    ]


def _functions_checks(thresholds: ThresholdsConfig) -> list[DocumentCheck]:
    checks: list[DocumentCheck] = [
        functions.StrictModeAdviceCheck(),
        functions.DefaultParamsCheck(),
        functions.PreferArrowsCheck(),
        functions.ClosureUsageCheck(),
    ]
    if thresholds.complexity is not None:
        checks.append(functions.ComplexityThresholdCheck(thresholds.complexity))
    return checks


def _markup_checks(thresholds: ThresholdsConfig) -> list[DocumentCheck]:
    return [
        markup.DuplicateIdCheck(),
        markup.UnlabeledInputCheck(),
        markup.HeadingStructureCheck(),
        markup.MarkupDepthCheck(thresholds.markup_depth),
    ]


_CATALOGS: dict[str, _CatalogSpec] = {
    "modernize": _CatalogSpec(rules=modernize.RULES, checks=lambda _thresholds: []),
    "fundamentals": _CatalogSpec(rules=fundamentals.RULES, checks=_fundamentals_checks),
    "functions": _CatalogSpec(rules=functions.RULES, checks=_functions_checks),
    "markup": _CatalogSpec(rules=markup.RULES, checks=_markup_checks),
}


def catalog_rules(tool: str) -> tuple[Rule, ...]:
    """Return the static pattern catalog for a tool."""
    return _resolve_catalog(tool).rules


def build_rule_set(
    tool: str,
    *,
    enabled_rule_ids: list[str] | None = None,
    disabled_rule_ids: list[str] | None = None,
    custom_rules: Sequence[CustomRuleConfig] = (),
    thresholds: ThresholdsConfig | None = None,
) -> RuleSet:
    """Build the rules and checks for a tool applying custom rules and enable/disable filters.

    Custom rule definitions are compiled here, so an invalid pattern fails
    before any input is read.
    """
    catalog = _resolve_catalog(tool)
    effective_thresholds = thresholds or ThresholdsConfig()

    rules = list(catalog.rules)
    rules.extend(compile_custom_rules(custom_rules, tool=tool))
    checks = catalog.checks(effective_thresholds)

    _check_unique_ids(rules, checks)
    # enable/disable lists are shared by every tool, so validate against all of them
    known_ids = {item.rule_id for item in list_rule_info(custom_rules=custom_rules)}
    requested = set(enabled_rule_ids or []) | set(disabled_rule_ids or [])
    unknown = [rule_id for rule_id in requested if rule_id not in known_ids]
    if unknown:
        joined = ", ".join(sorted(unknown))
        raise ValueError(f"Unknown rule ids: {joined}")

    disabled = set(disabled_rule_ids or [])
    if enabled_rule_ids is not None:
        enabled = set(enabled_rule_ids)
        selected_rules = [rule for rule in rules if rule.rule_id in enabled]
        selected_checks = [check for check in checks if check.check_id in enabled]
    else:
        selected_rules = rules
        selected_checks = checks

    rule_set = RuleSet(
        tool=tool.lower(),
        rules=tuple(rule for rule in selected_rules if rule.rule_id not in disabled),
        checks=tuple(check for check in selected_checks if check.check_id not in disabled),
    )
    logger.debug("%s: %d rule(s), %d check(s) active", tool, len(rule_set.rules), len(rule_set.checks))
    return rule_set


def compile_custom_rules(custom_rules: Sequence[CustomRuleConfig], *, tool: str) -> list[Rule]:
    """Compile configured rules that apply to ``tool``."""
    compiled: list[Rule] = []
    for item in custom_rules:
        if not item.applies_to(tool):
            continue
        compiled.append(
            make_rule(
                item.rule_id,
                item.pattern,
                item.message,
                item.severity,
                exceptions=tuple(item.exceptions),
                context_width=item.context_width,
                suggestion=item.suggestion,
            )
        )
    return compiled


def list_rule_info(
    tool: str | None = None,
    *,
    custom_rules: Sequence[CustomRuleConfig] = (),
    thresholds: ThresholdsConfig | None = None,
) -> list[RuleInfo]:
    """Return metadata for every known rule and check, optionally for a single tool."""
    tools = [tool] if tool is not None else list(TOOLS)
    effective_thresholds = thresholds or ThresholdsConfig()
    if effective_thresholds.complexity is None:
        effective_thresholds = replace(
            effective_thresholds, complexity=functions.DEFAULT_COMPLEXITY_THRESHOLD
        )
    info: list[RuleInfo] = []
    for name in tools:
        catalog = _resolve_catalog(name)
        for rule in (*catalog.rules, *compile_custom_rules(custom_rules, tool=name)):
            info.append(
                RuleInfo(
                    rule_id=rule.rule_id,
                    name=rule.name,
                    description=rule.message,
                    severity=rule.severity,
                    tool=name,
                    kind="pattern",
                    has_suggestion=rule.suggestion is not None,
                )
            )
        for check in catalog.checks(effective_thresholds):
            info.append(
                RuleInfo(
                    rule_id=check.check_id,
                    name=check.__class__.__name__,
                    description=check.description,
                    severity=check.severity,
                    tool=name,
                    kind="document",
                    has_suggestion=False,
                )
            )
    return info


def _resolve_catalog(tool: str) -> _CatalogSpec:
    catalog = _CATALOGS.get(tool.lower())
    if catalog is None:
        choices = ", ".join(TOOLS)
        raise ValueError(f"Unknown tool '{tool}'. Expected one of: {choices}")
    return catalog


def _check_unique_ids(rules: list[Rule], checks: list[DocumentCheck]) -> set[str]:
    seen: set[str] = set()
    for rule_id in [rule.rule_id for rule in rules] + [check.check_id for check in checks]:
        if rule_id == IO_RULE_ID:
            raise RuleConfigError(f"rule id '{IO_RULE_ID}' is reserved for read failures")
        if rule_id in seen:
            raise RuleConfigError(f"Duplicate rule id: {rule_id}")
        seen.add(rule_id)
    return seen
