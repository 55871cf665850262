"""Output rendering."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

import click

from pattern_lint import __version__
from pattern_lint.aggregate import AnalysisResult
from pattern_lint.batch import BatchSummary
from pattern_lint.metrics import complexity_rating
from pattern_lint.rules.base import SEVERITIES, Finding

_SEVERITY_STYLE = {
    "error": ("ERRORS", "red"),
    "warning": ("WARNINGS", "yellow"),
    "info": ("INFO", "cyan"),
}
_RULE = "─" * 50


def render_human(result: AnalysisResult, *, tool: str) -> str:
    """Render one input's findings grouped by severity, metrics and verdict."""
    lines: list[str] = [
        click.style(f"{tool} analysis: {result.name}", fg="cyan", bold=True),
        _RULE,
    ]

    if result.total == 0:
        lines.append(click.style("No issues found.", fg="green"))

    for severity in SEVERITIES:
        findings = result.by_severity(severity)
        if not findings:
            continue
        label, color = _SEVERITY_STYLE[severity]
        lines.append(click.style(f"{label} ({len(findings)})", fg=color, bold=True))
        for position, finding in enumerate(findings, start=1):
            lines.extend(_render_finding(position, finding, color))

    if result.metrics:
        lines.append(click.style("Metrics:", bold=True))
        for key, value in result.metrics.items():
            if key == "complexity":
                lines.append(f"  {key}: {value} ({complexity_rating(value)})")
            else:
                lines.append(f"  {key}: {value}")

    counts = result.counts
    lines.append(_RULE)
    lines.append(
        f"{counts['error']} error(s), {counts['warning']} warning(s), {counts['info']} info"
    )
    lines.append(_verdict(result.passed))
    return "\n".join(lines)


def render_batch_summary(summary: BatchSummary, *, tool: str) -> str:
    """Render cross-file totals and the overall verdict."""
    lines: list[str] = [
        click.style(f"{tool} summary: {summary.root}", fg="magenta", bold=True),
        _RULE,
        f"  Files:        {summary.files}",
        f"  Analyzed:     {summary.analyzed}",
        f"  Read errors:  {summary.io_failures}",
        f"  Errors:       {summary.totals['error']}",
        f"  Warnings:     {summary.totals['warning']}",
        f"  Info:         {summary.totals['info']}",
    ]
    complexities = [
        result.metrics["complexity"] for result in summary.results if "complexity" in result.metrics
    ]
    if complexities:
        average = round(sum(complexities) / len(complexities))
        lines.append(f"  Avg complexity: {average} ({complexity_rating(average)})")
    failed = summary.failed
    if failed:
        lines.append(click.style("Failed inputs:", bold=True))
        lines.extend(f"  - {name}" for name in failed)
    lines.append(_verdict(summary.passed))
    return "\n".join(lines)


def render_json(result: AnalysisResult, *, tool: str) -> str:
    """Render stable JSON output for one input."""
    payload = {
        "result": _serialize_result(result),
        "meta": _meta(tool),
    }
    return json.dumps(payload, sort_keys=True)


def render_batch_json(summary: BatchSummary, *, tool: str) -> str:
    """Render stable JSON output for a batch run."""
    return json.dumps(build_batch_payload(summary, tool=tool), sort_keys=True)


def build_batch_payload(summary: BatchSummary, *, tool: str) -> dict[str, Any]:
    return {
        "results": [_serialize_result(result) for result in summary.results],
        "summary": {
            "root": summary.root,
            "files": summary.files,
            "analyzed": summary.analyzed,
            "io_failures": summary.io_failures,
            "totals": dict(summary.totals),
            "inputs": {result.name: result.passed for result in summary.results},
            "passed": summary.passed,
        },
        "meta": _meta(tool),
    }


def _serialize_result(result: AnalysisResult) -> dict[str, Any]:
    return {
        "name": result.name,
        "passed": result.passed,
        "counts": result.counts,
        "findings": {
            severity: [_serialize_finding(item) for item in result.by_severity(severity)]
            for severity in SEVERITIES
        },
        "metrics": dict(result.metrics),
    }


def _serialize_finding(finding: Finding) -> dict[str, Any]:
    return {
        "rule_id": finding.rule_id,
        "severity": finding.severity,
        "message": finding.message,
        "line": finding.line,
        "column": finding.column,
        "match": finding.match,
        "suggestion": finding.suggestion,
        "category": finding.category,
    }


def _meta(tool: str) -> dict[str, Any]:
    return {
        "generated_at": datetime.now(tz=UTC)
        .replace(microsecond=0)
        .isoformat()
        .replace("+00:00", "Z"),
        "tool": tool,
        "version": __version__,
    }


def _render_finding(position: int, finding: Finding, color: str) -> list[str]:
    category = f"[{finding.category}] " if finding.category else ""
    lines = [
        f"{position}. {click.style(f'[{finding.rule_id}]', fg=color)} {category}{finding.message} "
        f"(line {finding.line}, col {finding.column})"
    ]
    if finding.match:
        lines.append(click.style(f'   found: "{_clip(finding.match)}"', dim=True))
    if finding.context:
        lines.append(click.style(f"   {_clip(finding.context)}", dim=True))
    if finding.suggestion:
        lines.append(click.style(f"   -> {finding.suggestion}", fg="green"))
    return lines


def _verdict(passed: bool) -> str:
    if passed:
        return click.style("Status: PASSED", fg="green", bold=True)
    return click.style("Status: FAILED", fg="red", bold=True)


def _clip(content: str, max_len: int = 80) -> str:
    stripped = " ".join(content.split())
    if len(stripped) <= max_len:
        return stripped
    return stripped[: max_len - 3] + "..."
