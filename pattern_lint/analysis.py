"""Per-input analysis pipeline and tool profiles."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from pattern_lint.aggregate import AnalysisResult, aggregate
from pattern_lint.config import AppConfig
from pattern_lint.metrics import (
    BraceDepthEstimator,
    BranchDensityEstimator,
    FunctionInventoryEstimator,
    MetricEstimator,
    NestingDepthEstimator,
)
from pattern_lint.positions import LineIndex
from pattern_lint.registry import RuleSet, build_rule_set
from pattern_lint.rules.base import IO_RULE_ID, Finding, RawMatch
from pattern_lint.rules.markup import MarkupStatsEstimator
from pattern_lint.scanner import scan
from pattern_lint.suggestions import suggest

logger = logging.getLogger(__name__)

SCRIPT_EXTENSIONS = (".js", ".mjs", ".cjs")
MARKUP_EXTENSIONS = (".html", ".htm")
EXCLUDED_SUFFIXES = (".min.js",)

TOOL_DESCRIPTIONS = {
    "modernize": "Suggest ES6+ improvements for script sources.",
    "fundamentals": "Validate script fundamentals: declarations, equality, layout.",
    "functions": "Analyze function patterns, callback anti-patterns and complexity.",
    "markup": "Analyze markup structure, accessibility and nesting depth.",
}


class InputNotFoundError(FileNotFoundError):
    """Single input path does not exist."""


@dataclass(frozen=True, slots=True)
class ToolProfile:
    """Everything one analyzer applies to an input."""

    name: str
    description: str
    extensions: tuple[str, ...]
    rule_set: RuleSet
    estimators: tuple[MetricEstimator, ...]

    def accepts(self, path: Path) -> bool:
        lowered = path.name.lower()
        if lowered.endswith(EXCLUDED_SUFFIXES):
            return False
        return lowered.endswith(self.extensions)


def build_profile(tool: str, app_config: AppConfig | None = None) -> ToolProfile:
    """Resolve the rule set, estimators and eligible extensions for a tool."""
    config = app_config or AppConfig()
    rule_set = build_rule_set(
        tool,
        enabled_rule_ids=config.rule_enable,
        disabled_rule_ids=config.rule_disable,
        custom_rules=config.custom_rules,
        thresholds=config.thresholds,
    )
    name = rule_set.tool
    if name == "markup":
        default_extensions = MARKUP_EXTENSIONS
        estimators: tuple[MetricEstimator, ...] = (MarkupStatsEstimator(), NestingDepthEstimator())
    elif name == "fundamentals":
        default_extensions = SCRIPT_EXTENSIONS
        estimators = (BranchDensityEstimator(), BraceDepthEstimator())
    elif name == "functions":
        default_extensions = SCRIPT_EXTENSIONS
        estimators = (BranchDensityEstimator(), FunctionInventoryEstimator())
    else:
        default_extensions = SCRIPT_EXTENSIONS
        estimators = (BranchDensityEstimator(),)

    extensions = tuple(config.batch.extensions.get(name, default_extensions))
    return ToolProfile(
        name=name,
        description=TOOL_DESCRIPTIONS[name],
        extensions=extensions,
        rule_set=rule_set,
        estimators=estimators,
    )


def analyze_text(name: str, buffer: str, profile: ToolProfile) -> AnalysisResult:
    """Run scan, locate, suggest, document checks and metrics over one buffer."""
    index = LineIndex(buffer)
    findings = [to_finding(raw, index) for raw in scan(buffer, profile.rule_set.rules)]
    for check in profile.rule_set.checks:
        findings.extend(check.evaluate(buffer, index))

    metrics: dict[str, int] = {}
    for estimator in profile.estimators:
        metrics.update(estimator.measure(buffer))

    result = aggregate(name, findings, metrics=metrics)
    logger.debug("%s: %s", name, result.counts)
    return result


def analyze_path(path: Path, profile: ToolProfile) -> AnalysisResult:
    """Analyze one file; a missing path raises :class:`InputNotFoundError`."""
    if not path.exists():
        raise InputNotFoundError(f"File not found: {path}")
    buffer = read_source(path)
    return analyze_text(str(path), buffer, profile)


def read_source(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def to_finding(raw: RawMatch, index: LineIndex) -> Finding:
    line, column = index.locate(raw.start)
    return Finding(
        rule_id=raw.rule.rule_id,
        severity=raw.rule.severity,
        message=raw.rule.message,
        line=line,
        column=column,
        match=raw.text,
        suggestion=suggest(raw),
        context=index.line_text(line).strip(),
        category=raw.rule.category,
    )


def io_failure_result(name: str, exc: BaseException) -> AnalysisResult:
    """Result for an input that could not be read: a single ``io`` error."""
    reason = exc.strerror if isinstance(exc, OSError) and exc.strerror else str(exc)
    finding = Finding(
        rule_id=IO_RULE_ID,
        severity="error",
        message=f"Could not read file: {reason}",
        line=1,
        column=1,
    )
    return aggregate(name, [finding])
