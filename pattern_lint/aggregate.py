"""Group findings for one input into an analysis result."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from pattern_lint.rules.base import SEVERITIES, Finding, Severity


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Findings, metrics and verdict for one analyzed input."""

    name: str
    errors: tuple[Finding, ...] = ()
    warnings: tuple[Finding, ...] = ()
    infos: tuple[Finding, ...] = ()
    metrics: dict[str, int] = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return not self.errors

    @property
    def counts(self) -> dict[str, int]:
        return {
            "error": len(self.errors),
            "warning": len(self.warnings),
            "info": len(self.infos),
        }

    @property
    def total(self) -> int:
        return len(self.errors) + len(self.warnings) + len(self.infos)

    def by_severity(self, severity: Severity) -> tuple[Finding, ...]:
        if severity == "error":
            return self.errors
        if severity == "warning":
            return self.warnings
        if severity == "info":
            return self.infos
        raise ValueError(f"Unknown severity: {severity}")

    def findings(self) -> list[Finding]:
        """All findings, errors first, each partition in position order."""
        return [*self.errors, *self.warnings, *self.infos]


def aggregate(
    name: str,
    findings: Iterable[Finding],
    *,
    metrics: Mapping[str, int] | None = None,
) -> AnalysisResult:
    """Deduplicate, partition by severity and order findings by line then column.

    Two findings with the same ``(line, column, rule_id)`` collapse to the first
    one seen.
    """
    seen: set[tuple[int, int, str]] = set()
    partitions: dict[str, list[Finding]] = {severity: [] for severity in SEVERITIES}
    for finding in findings:
        key = (finding.line, finding.column, finding.rule_id)
        if key in seen:
            continue
        seen.add(key)
        if finding.severity not in partitions:
            raise ValueError(f"Unknown severity on finding {finding.rule_id}: {finding.severity}")
        partitions[finding.severity].append(finding)

    for items in partitions.values():
        items.sort(key=_position_key)

    return AnalysisResult(
        name=name,
        errors=tuple(partitions["error"]),
        warnings=tuple(partitions["warning"]),
        infos=tuple(partitions["info"]),
        metrics=dict(metrics or {}),
    )


def _position_key(finding: Finding) -> tuple[int, int, str]:
    return (finding.line, finding.column, finding.rule_id)
