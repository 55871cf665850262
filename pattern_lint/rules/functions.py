"""Function pattern analyzer: callback anti-patterns and recommendations."""

from __future__ import annotations

import re

from pattern_lint.metrics import BranchDensityEstimator, FunctionInventoryEstimator
from pattern_lint.positions import LineIndex
from pattern_lint.rules.base import Finding, Rule, make_rule

DEFAULT_COMPLEXITY_THRESHOLD = 40

RULES: tuple[Rule, ...] = (
    make_rule(
        "var_declaration",
        r"\bvar[ \t]+\w+",
        'Found "var" declaration - consider using "const" or "let"',
        "warning",
        suggestion=lambda match: match.replace("var", "let", 1),
    ),
    make_rule(
        "nested_callbacks",
        r"\([ \t]*(?:function|\([^)\n]*\)[ \t]*=>)[^}\n]*\([ \t]*(?:function|\([^)\n]*\)[ \t]*=>)",
        "Detected nested callbacks - consider using Promises or async/await",
        "warning",
    ),
    make_rule(
        "this_in_callback",
        r"\.(?:map|filter|forEach|reduce)[ \t]*\([^)\n]*function[ \t]*\([^)\n]*\)[^}\n]*this\.",
        '"this" used in callback - may be undefined. Use arrow functions instead.',
        "error",
    ),
)

_USE_STRICT = re.compile(r"'use strict'|\"use strict\"")
_DEFAULT_PARAMS = re.compile(r"\(([^)]*=\s*[^,)]+)")


class _InventoryAdviceCheck:
    """File-level info advice derived from the function inventory.

    Subclasses set ``check_id``, ``description`` and ``message`` and decide
    in ``applies`` whether the buffer earns the advice.
    """

    check_id = ""
    severity = "info"
    description = ""
    message = ""

    def __init__(self) -> None:
        self._inventory = FunctionInventoryEstimator()

    def applies(self, buffer: str, counts: dict[str, int]) -> bool:
        raise NotImplementedError

    def evaluate(self, buffer: str, index: LineIndex) -> list[Finding]:
        _ = index
        if not self.applies(buffer, self._inventory.measure(buffer)):
            return []
        return [
            Finding(
                rule_id=self.check_id,
                severity="info",
                message=self.message,
                line=1,
                column=1,
            )
        ]


class StrictModeAdviceCheck(_InventoryAdviceCheck):
    check_id = "use_strict"
    description = "Recommends strict mode for scripts that are not modules."
    message = 'Consider adding "use strict" directive'

    def applies(self, buffer: str, counts: dict[str, int]) -> bool:
        _ = counts
        return (
            _USE_STRICT.search(buffer) is None
            and "import " not in buffer
            and "export " not in buffer
        )


class DefaultParamsCheck(_InventoryAdviceCheck):
    check_id = "default_params"
    description = "Recommends default parameters when no function declares one."
    message = "Consider using default parameters for optional arguments"

    def applies(self, buffer: str, counts: dict[str, int]) -> bool:
        return counts["functions"] > 0 and _DEFAULT_PARAMS.search(buffer) is None


class PreferArrowsCheck(_InventoryAdviceCheck):
    check_id = "prefer_arrows"
    description = "Recommends arrows when function expressions outnumber them two to one."
    message = "Consider using arrow functions for shorter syntax"

    def applies(self, buffer: str, counts: dict[str, int]) -> bool:
        _ = buffer
        return counts["expressions"] > counts["arrows"] * 2


class ClosureUsageCheck(_InventoryAdviceCheck):
    check_id = "closure_usage"
    description = "Warns about heavy closure use (more than five returned functions)."
    message = "High closure usage - ensure proper memory management"

    def applies(self, buffer: str, counts: dict[str, int]) -> bool:
        _ = buffer
        return counts["closures"] > 5


class ComplexityThresholdCheck:
    """Caller-supplied policy turning a high branch-density score into a warning."""

    check_id = "complexity"
    severity = "warning"
    description = "Flags files whose branch-density score exceeds thresholds.complexity."

    def __init__(self, threshold: int) -> None:
        self.threshold = threshold
        self._estimator = BranchDensityEstimator()

    def evaluate(self, buffer: str, index: LineIndex) -> list[Finding]:
        _ = index
        score = self._estimator.estimate(buffer)
        if score <= self.threshold:
            return []
        return [
            Finding(
                rule_id=self.check_id,
                severity="warning",
                message=f"Branch-density score {score} exceeds threshold {self.threshold}",
                line=1,
                column=1,
            )
        ]
