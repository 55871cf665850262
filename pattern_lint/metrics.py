"""Summary metrics derived from a text buffer."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from pattern_lint.rules.base import RuleConfigError

DEFAULT_DECISION_PATTERNS: tuple[str, ...] = (
    r"\bif\s*\(",
    r"\bfor\s*\(",
    r"\bwhile\s*\(",
    r"\bswitch\s*\(",
    r"\bcase\s+",
    r"\bcatch\s*\(",
    r"(?<!\?)\?(?![.?])[^:;?\n]+:",
    r"&&",
    r"\|\|",
)

DEFAULT_VOID_ELEMENTS: frozenset[str] = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

RAW_TEXT_ELEMENTS: frozenset[str] = frozenset({"script", "style"})

_TAG_NAME = re.compile(r"[A-Za-z][A-Za-z0-9-]*")


class MetricEstimator(Protocol):
    """Derives named integer metrics from a buffer."""

    def measure(self, buffer: str) -> dict[str, int]:
        """Return metric name to value."""


def complexity_rating(score: int) -> str:
    """Bucket a branch-density score."""
    if score <= 10:
        return "Low"
    if score <= 20:
        return "Moderate"
    if score <= 40:
        return "High"
    return "Very High"


class BranchDensityEstimator:
    """Counts decision points; the score is one plus their total.

    Each decision pattern is counted independently over the whole buffer, so
    the score approximates cyclomatic complexity without parsing anything.
    """

    metric_name = "complexity"

    def __init__(self, patterns: Iterable[str] = DEFAULT_DECISION_PATTERNS) -> None:
        compiled: list[re.Pattern[str]] = []
        for pattern in patterns:
            try:
                compiled.append(re.compile(pattern))
            except re.error as exc:
                raise RuleConfigError(f"invalid decision pattern {pattern!r}: {exc}") from exc
        self._patterns = tuple(compiled)

    def estimate(self, buffer: str) -> int:
        total = 0
        for pattern in self._patterns:
            total += sum(1 for _ in pattern.finditer(buffer))
        return 1 + total

    def measure(self, buffer: str) -> dict[str, int]:
        return {self.metric_name: self.estimate(buffer)}


@dataclass(frozen=True, slots=True)
class DepthMeasure:
    """Maximum depth reached and the offset of the tag that first reached it."""

    max_depth: int
    deepest_offset: int | None = None


class NestingDepthEstimator:
    """Single-pass open/close tag balance tracker for markup-like input.

    Comments, doctype declarations and processing instructions are skipped.
    Void elements and ``/>`` tags leave depth unchanged, and the contents of
    ``script``/``style`` are not inspected for tags. Depth never drops below
    zero, so stray closing tags cannot produce a negative value.
    """

    metric_name = "max_depth"

    def __init__(self, void_elements: Iterable[str] = DEFAULT_VOID_ELEMENTS) -> None:
        self._void = frozenset(name.lower() for name in void_elements)

    def estimate(self, buffer: str) -> int:
        return self.scan(buffer).max_depth

    def measure(self, buffer: str) -> dict[str, int]:
        return {self.metric_name: self.estimate(buffer)}

    def scan(self, buffer: str) -> DepthMeasure:
        depth = 0
        max_depth = 0
        deepest: int | None = None
        position = 0
        length = len(buffer)

        while position < length:
            start = buffer.find("<", position)
            if start == -1:
                break

            if buffer.startswith("<!--", start):
                end = buffer.find("-->", start + 4)
                if end == -1:
                    break
                position = end + 3
                continue

            if buffer.startswith("<!", start) or buffer.startswith("<?", start):
                end = buffer.find(">", start)
                if end == -1:
                    break
                position = end + 1
                continue

            closing = buffer.startswith("</", start)
            name_match = _TAG_NAME.match(buffer, start + (2 if closing else 1))
            if name_match is None:
                # a bare "<" in text
                position = start + 1
                continue

            end = buffer.find(">", name_match.end())
            if end == -1:
                break
            position = end + 1
            tag_name = name_match.group(0).lower()

            if closing:
                depth = max(0, depth - 1)
                continue
            if buffer[end - 1] == "/" or tag_name in self._void:
                continue

            depth += 1
            if depth > max_depth:
                max_depth = depth
                deepest = start

            if tag_name in RAW_TEXT_ELEMENTS:
                close_at = _find_closing_tag(buffer, tag_name, position)
                if close_at == -1:
                    break
                position = close_at

        return DepthMeasure(max_depth=max_depth, deepest_offset=deepest)


class BraceDepthEstimator:
    """Maximum ``{``/``}`` nesting, floored at zero on stray closers."""

    metric_name = "brace_depth"

    def scan(self, buffer: str) -> DepthMeasure:
        depth = 0
        max_depth = 0
        deepest: int | None = None
        for offset, char in enumerate(buffer):
            if char == "{":
                depth += 1
                if depth > max_depth:
                    max_depth = depth
                    deepest = offset
            elif char == "}":
                depth = max(0, depth - 1)
        return DepthMeasure(max_depth=max_depth, deepest_offset=deepest)

    def estimate(self, buffer: str) -> int:
        return self.scan(buffer).max_depth

    def measure(self, buffer: str) -> dict[str, int]:
        return {self.metric_name: self.estimate(buffer)}


FUNCTION_PATTERNS: dict[str, tuple[str, ...]] = {
    "declarations": (r"function\s+(\w+)\s*\(([^)]*)\)\s*\{",),
    "expressions": (
        r"(?:const|let|var)\s+(\w+)\s*=\s*function\s*(?:\w+)?\s*\(([^)]*)\)\s*\{",
    ),
    "arrows": (r"(?:const|let|var)\s+(\w+)\s*=\s*(?:async\s*)?(?:\(([^)]*)\)|(\w+))\s*=>",),
    "async": (
        r"async\s+function\s+(\w+)",
        r"(?:const|let|var)\s+(\w+)\s*=\s*async\s*(?:\(([^)]*)\)|(\w+))\s*=>",
    ),
    "generators": (r"function\s*\*\s*(\w+)",),
    "closures": (r"return\s+(?:function|\([^)]*\)\s*=>)",),
    "higher_order": (
        r"(?:const|let|var|function)\s+\w+\s*(?:=\s*)?\([^)]*(?:function|\w+\s*=>)",
    ),
}


@dataclass(frozen=True, slots=True)
class FunctionInfo:
    """A named function found by the inventory patterns."""

    name: str
    params: tuple[str, ...]
    offset: int
    kind: str


class FunctionInventoryEstimator:
    """Counts function shapes: declarations, expressions, arrows, async, generators."""

    def __init__(self) -> None:
        self._patterns = {
            key: tuple(re.compile(pattern) for pattern in patterns)
            for key, patterns in FUNCTION_PATTERNS.items()
        }

    def measure(self, buffer: str) -> dict[str, int]:
        counts: dict[str, int] = {}
        for key, patterns in self._patterns.items():
            counts[key] = sum(
                sum(1 for _ in pattern.finditer(buffer)) for pattern in patterns
            )
        counts["functions"] = len(self.functions(buffer))
        return counts

    def functions(self, buffer: str) -> list[FunctionInfo]:
        found: list[FunctionInfo] = []
        for kind in ("declarations", "expressions", "arrows"):
            for pattern in self._patterns[kind]:
                for match in pattern.finditer(buffer):
                    raw_params = match.group(2) or (
                        match.group(3) if match.re.groups >= 3 else None
                    )
                    params = tuple(
                        item.strip() for item in (raw_params or "").split(",") if item.strip()
                    )
                    found.append(
                        FunctionInfo(
                            name=match.group(1),
                            params=params,
                            offset=match.start(),
                            kind=kind.rstrip("s"),
                        )
                    )
        found.sort(key=lambda item: item.offset)
        return found


def _find_closing_tag(buffer: str, tag_name: str, start: int) -> int:
    match = re.compile(rf"</{re.escape(tag_name)}\s*>", re.IGNORECASE).search(buffer, start)
    return match.start() if match else -1
