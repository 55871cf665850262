"""Rule definitions, suggestion variants and the finding model."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Literal, Protocol

from pattern_lint.positions import LineIndex

Severity = Literal["error", "warning", "info"]
SEVERITIES: tuple[Severity, ...] = ("error", "warning", "info")

IO_RULE_ID = "io"


class RuleConfigError(ValueError):
    """Invalid rule definition detected while building a registry."""


@dataclass(frozen=True, slots=True)
class TemplateSuggestion:
    """Replacement text with ``{0}`` (full match), ``{1}``.. or ``{name}`` placeholders."""

    template: str

    def render(self, text: str, groups: tuple[str, ...], named: dict[str, str]) -> str:
        return self.template.format(text, *groups, **named)


@dataclass(frozen=True, slots=True)
class FunctionSuggestion:
    """Replacement computed by a pure function of the match and its groups."""

    func: Callable[..., str]

    def render(self, text: str, groups: tuple[str, ...], named: dict[str, str]) -> str:
        _ = named
        return self.func(text, *groups)


Suggestion = TemplateSuggestion | FunctionSuggestion


@dataclass(frozen=True, slots=True)
class RawMatch:
    """One pattern occurrence before it is located and rendered."""

    rule: Rule
    start: int
    end: int
    text: str
    groups: tuple[str, ...] = ()
    named: dict[str, str] = field(default_factory=dict)

    def group(self, index: int) -> str:
        """Return a captured group by 1-based index, or ``""`` when it did not take part."""
        if index == 0:
            return self.text
        if index > len(self.groups):
            return ""
        return self.groups[index - 1]


UsageCheck = Callable[[str, RawMatch], bool]


@dataclass(frozen=True, slots=True)
class Rule:
    """Immutable detection definition applied by the scanner."""

    rule_id: str
    pattern: re.Pattern[str]
    message: str
    severity: Severity
    name: str = ""
    exceptions: tuple[str, ...] = ()
    exact_exceptions: bool = False
    context_width: int = 0
    suggestion: Suggestion | None = None
    usage_check: UsageCheck | None = None
    category: str = ""

    @property
    def requires_usage_check(self) -> bool:
        return self.usage_check is not None


@dataclass(frozen=True, slots=True)
class Finding:
    """A located, severity-tagged occurrence reported for one input."""

    rule_id: str
    severity: Severity
    message: str
    line: int
    column: int
    match: str = ""
    suggestion: str | None = None
    context: str = ""
    category: str = ""


class DocumentCheck(Protocol):
    """Whole-buffer check that is not expressible as a single pattern."""

    check_id: str
    severity: Severity
    description: str

    def evaluate(self, buffer: str, index: LineIndex) -> list[Finding]:
        """Inspect the buffer and return findings."""


def make_rule(
    rule_id: str,
    pattern: str,
    message: str,
    severity: str,
    *,
    name: str = "",
    flags: int = 0,
    exceptions: tuple[str, ...] | list[str] = (),
    exact_exceptions: bool = False,
    context_width: int = 0,
    suggestion: str | Callable[..., str] | None = None,
    usage_check: UsageCheck | None = None,
    category: str = "",
) -> Rule:
    """Validate and compile a rule definition.

    Raises :class:`RuleConfigError` for an empty id, unknown severity, negative
    context width or a pattern that does not compile.
    """
    if not rule_id or not rule_id.strip():
        raise RuleConfigError("rule id must be a non-empty string")
    if rule_id == IO_RULE_ID:
        raise RuleConfigError(f"rule id '{IO_RULE_ID}' is reserved for read failures")
    if severity not in SEVERITIES:
        choices = ", ".join(SEVERITIES)
        raise RuleConfigError(f"rule '{rule_id}': severity must be one of: {choices}")
    if context_width < 0:
        raise RuleConfigError(f"rule '{rule_id}': context_width must be >= 0")
    try:
        compiled = re.compile(pattern, flags)
    except re.error as exc:
        raise RuleConfigError(f"rule '{rule_id}': invalid pattern {pattern!r}: {exc}") from exc

    resolved_suggestion: Suggestion | None
    if suggestion is None:
        resolved_suggestion = None
    elif isinstance(suggestion, str):
        resolved_suggestion = TemplateSuggestion(suggestion)
    elif callable(suggestion):
        resolved_suggestion = FunctionSuggestion(suggestion)
    else:
        raise RuleConfigError(f"rule '{rule_id}': suggestion must be a string or callable")

    return Rule(
        rule_id=rule_id,
        pattern=compiled,
        message=message,
        severity=severity,  # type: ignore[arg-type]
        name=name or rule_id,
        exceptions=tuple(str(item) for item in exceptions),
        exact_exceptions=exact_exceptions,
        context_width=context_width,
        suggestion=resolved_suggestion,
        usage_check=usage_check,
        category=category,
    )
