"""Fundamentals validator: declarations, equality, console use and layout."""

from __future__ import annotations

from pattern_lint.metrics import BraceDepthEstimator
from pattern_lint.positions import LineIndex
from pattern_lint.rules.base import Finding, RawMatch, Rule, make_rule
from pattern_lint.scanner import count_identifier, is_reassigned

IDENTIFIER = r"[A-Za-z_$][\w$]*"


def _never_reassigned(buffer: str, raw: RawMatch) -> bool:
    return not is_reassigned(buffer, raw.group(1), after=raw.end)


def _appears_unused(buffer: str, raw: RawMatch) -> bool:
    # the declaration itself is the only occurrence; shadowed names are not resolved
    return count_identifier(buffer, raw.group(1)) <= 1


RULES: tuple[Rule, ...] = (
    make_rule(
        "no_var",
        rf"\bvar[ \t]+{IDENTIFIER}",
        'Avoid "var" - use "const" or "let" instead',
        "error",
        suggestion=lambda match: match.replace("var", "let", 1),
    ),
    make_rule(
        "prefer_const",
        rf"\blet[ \t]+({IDENTIFIER})[ \t]*=",
        'Consider using "const" for variables that are never reassigned',
        "warning",
        suggestion="const {1} =",
        usage_check=_never_reassigned,
    ),
    make_rule(
        "loose_equality",
        r"(?<![!=<>])==(?!=)|!=(?!=)",
        "Use strict equality (=== or !==) instead of loose equality",
        "error",
        exceptions=("== null", "!= null"),
        context_width=7,
        suggestion=lambda match: match + "=",
    ),
    make_rule(
        "console_statement",
        r"console\.(log|warn|error|info|debug)[ \t]*\(",
        "Remove console statements in production code",
        "warning",
    ),
    make_rule(
        "unused_variable",
        rf"\b(?:const|let|var)[ \t]+({IDENTIFIER})[ \t]*=",
        "Potentially unused variable",
        "info",
        usage_check=_appears_unused,
    ),
    make_rule(
        "magic_number",
        r"(?<![\w.])(?:[2-9]|\d{2,})(?![\w.])",
        "Consider using named constants instead of magic numbers",
        "info",
        exceptions=("0", "1", "-1", "100"),
        exact_exceptions=True,
    ),
    make_rule(
        "string_concatenation",
        r"[\"'][ \t]*\+[ \t]*\w+[ \t]*\+[ \t]*[\"']",
        "Consider using template literals instead of string concatenation",
        "warning",
    ),
    make_rule(
        "function_expression",
        r"function[ \t]*\([ \t]*\)[ \t]*\{",
        "Consider using arrow functions for anonymous functions",
        "info",
        suggestion="() => {{",
    ),
    make_rule(
        "typeof_undefined",
        r"typeof[ \t]+\w+[ \t]*===?[ \t]*[\"']undefined[\"']",
        "Consider using optional chaining (?.) or nullish coalescing (??)",
        "info",
    ),
)


class UseStrictCheck:
    """Non-module scripts should opt into strict mode."""

    check_id = "use_strict"
    description = 'Flags scripts without a "use strict" directive or import/export.'

    def __init__(self, severity: str = "warning") -> None:
        self.severity = severity

    def evaluate(self, buffer: str, index: LineIndex) -> list[Finding]:
        _ = index
        if "use strict" in buffer or "import " in buffer or "export " in buffer:
            return []
        return [
            Finding(
                rule_id=self.check_id,
                severity=self.severity,  # type: ignore[arg-type]
                message='Consider adding "use strict" directive',
                line=1,
                column=1,
                suggestion='"use strict";',
            )
        ]


class LineLengthCheck:
    """Lines longer than the configured limit."""

    check_id = "line_length"
    severity = "info"
    description = "Flags lines longer than thresholds.max_line_length."

    def __init__(self, max_length: int = 120) -> None:
        self.max_length = max_length

    def evaluate(self, buffer: str, index: LineIndex) -> list[Finding]:
        _ = buffer
        findings: list[Finding] = []
        for line in range(1, index.line_count + 1):
            text = index.line_text(line).rstrip("\r")
            if len(text) > self.max_length:
                findings.append(
                    Finding(
                        rule_id=self.check_id,
                        severity="info",
                        message=f"Line exceeds {self.max_length} characters ({len(text)})",
                        line=line,
                        column=self.max_length + 1,
                    )
                )
        return findings


class BraceDepthCheck:
    """Block nesting deeper than the configured limit."""

    check_id = "nesting_depth"
    severity = "warning"
    description = "Flags brace nesting deeper than thresholds.brace_depth."

    def __init__(self, max_depth: int = 4) -> None:
        self.max_depth = max_depth
        self._estimator = BraceDepthEstimator()

    def evaluate(self, buffer: str, index: LineIndex) -> list[Finding]:
        measure = self._estimator.scan(buffer)
        if measure.max_depth <= self.max_depth or measure.deepest_offset is None:
            return []
        line, column = index.locate(measure.deepest_offset)
        return [
            Finding(
                rule_id=self.check_id,
                severity="warning",
                message=f"Code is deeply nested ({measure.max_depth} levels). Consider refactoring.",
                line=line,
                column=column,
                context=index.line_text(line).strip(),
            )
        ]
