"""Markup structure, accessibility and link-safety checks."""

from __future__ import annotations

import re
from collections import Counter

from pattern_lint.metrics import NestingDepthEstimator
from pattern_lint.positions import LineIndex
from pattern_lint.rules.base import Finding, Rule, make_rule

_HANDLERS = "click|change|submit|load|focus|blur|keydown|keyup|mouseover|mouseout"


def _with_alt(match: str, attrs: str, slash: str) -> str:
    return f'<img{attrs.rstrip()} alt=""{slash}>'


def _with_rel(match: str, attrs: str, slash: str) -> str:
    return f'<a{attrs.rstrip()} rel="noopener noreferrer"{slash}>'


RULES: tuple[Rule, ...] = (
    make_rule(
        "inline_event_handler",
        rf"\bon(?:{_HANDLERS})[ \t]*=[ \t]*[\"'][^\"'\n]*[\"']",
        "Inline event handler attribute",
        "warning",
        flags=re.IGNORECASE,
        category="performance",
    ),
    make_rule(
        "img_missing_alt",
        r"<img\b(?![^>\n]*\balt[ \t]*=)([^>\n]*?)[ \t]*(/?)>",
        "Image missing alt attribute",
        "error",
        flags=re.IGNORECASE,
        category="a11y",
        suggestion=_with_alt,
    ),
    make_rule(
        "img_missing_dimensions",
        r"<img\b(?:(?![^>\n]*\bwidth[ \t]*=)|(?![^>\n]*\bheight[ \t]*=))[^>\n]*>",
        "Image missing width/height attributes (layout shift)",
        "warning",
        flags=re.IGNORECASE,
        category="performance",
    ),
    make_rule(
        "link_without_name",
        r"<a\b(?![^>\n]*\baria-label[ \t]*=)[^>\n]*>[ \t]*</a[ \t]*>",
        "Link has no accessible name",
        "error",
        flags=re.IGNORECASE,
        category="a11y",
    ),
    make_rule(
        "external_link_without_rel",
        r"<a\b(?=[^>\n]*\bhref[ \t]*=[ \t]*[\"']https?://)(?=[^>\n]*\btarget[ \t]*=)"
        r"(?![^>\n]*\brel[ \t]*=)([^>\n]*?)[ \t]*(/?)>",
        'External link with target missing rel="noopener"',
        "warning",
        flags=re.IGNORECASE,
        category="security",
        suggestion=_with_rel,
    ),
)

_ID_ATTR = re.compile(r"\bid[ \t]*=[ \t]*[\"']([^\"'\n]+)[\"']", re.IGNORECASE)
_CLASS_ATTR = re.compile(r"\bclass\s*=\s*[\"']([^\"']+)[\"']", re.IGNORECASE)
_OPEN_TAG = re.compile(r"<([a-z][a-z0-9]*)\b[^>]*>", re.IGNORECASE)
_INPUT_TAG = re.compile(r"<input\b([^>\n]*)>", re.IGNORECASE)
_LABEL_FOR = re.compile(r"<label\b[^>]*\bfor\s*=\s*[\"']([^\"']+)[\"']", re.IGNORECASE)
_HIDDEN_TYPE = re.compile(r"\btype\s*=\s*[\"']hidden[\"']", re.IGNORECASE)
_HEADING = re.compile(r"<h([1-6])\b", re.IGNORECASE)


class DuplicateIdCheck:
    """Element ids must be unique."""

    check_id = "duplicate_id"
    severity = "error"
    category = "dom"
    description = "Flags every repeated id attribute value."

    def evaluate(self, buffer: str, index: LineIndex) -> list[Finding]:
        totals = Counter(match.group(1) for match in _ID_ATTR.finditer(buffer))
        findings: list[Finding] = []
        seen: set[str] = set()
        for match in _ID_ATTR.finditer(buffer):
            value = match.group(1)
            if value not in seen:
                seen.add(value)
                continue
            line, column = index.locate(match.start())
            findings.append(
                Finding(
                    rule_id=self.check_id,
                    severity="error",
                    message=f'Duplicate ID found: "{value}" ({totals[value]} times)',
                    line=line,
                    column=column,
                    match=match.group(0),
                    context=index.line_text(line).strip(),
                    category=self.category,
                )
            )
        return findings


class UnlabeledInputCheck:
    """Visible inputs with an id need a matching <label for>."""

    check_id = "unlabeled_input"
    severity = "warning"
    category = "a11y"
    description = "Flags inputs whose id has no associated label."

    def evaluate(self, buffer: str, index: LineIndex) -> list[Finding]:
        labels = {match.group(1) for match in _LABEL_FOR.finditer(buffer)}
        findings: list[Finding] = []
        for match in _INPUT_TAG.finditer(buffer):
            attrs = match.group(1)
            id_match = _ID_ATTR.search(attrs)
            if id_match is None or _HIDDEN_TYPE.search(attrs) or id_match.group(1) in labels:
                continue
            line, column = index.locate(match.start())
            findings.append(
                Finding(
                    rule_id=self.check_id,
                    severity="warning",
                    message=f'Form input "{id_match.group(1)}" has no associated label',
                    line=line,
                    column=column,
                    match=match.group(0),
                    suggestion=f'<label for="{id_match.group(1)}">',
                    context=index.line_text(line).strip(),
                    category=self.category,
                )
            )
        return findings


class HeadingStructureCheck:
    """One H1 per page and no skipped heading levels."""

    check_id = "heading_structure"
    severity = "warning"
    category = "a11y"
    description = "Flags missing or repeated H1 and skipped heading levels."

    def evaluate(self, buffer: str, index: LineIndex) -> list[Finding]:
        first_offset: dict[int, int] = {}
        counts: Counter[int] = Counter()
        for match in _HEADING.finditer(buffer):
            level = int(match.group(1))
            counts[level] += 1
            first_offset.setdefault(level, match.start())

        findings: list[Finding] = []
        if counts[1] == 0:
            findings.append(self._finding("No H1 heading found", 1, 1))
        elif counts[1] > 1:
            second_h1 = [m.start() for m in _HEADING.finditer(buffer) if m.group(1) == "1"][1]
            line, column = index.locate(second_h1)
            findings.append(
                self._finding(f"Multiple H1 headings found ({counts[1]})", line, column)
            )

        present = sorted(level for level in counts if counts[level] > 0)
        if present:
            for level in range(present[0] + 1, present[-1]):
                if counts[level] == 0:
                    deeper = min(lvl for lvl in present if lvl > level)
                    line, column = index.locate(first_offset[deeper])
                    findings.append(self._finding(f"Heading level H{level} skipped", line, column))
        return findings

    def _finding(self, message: str, line: int, column: int) -> Finding:
        return Finding(
            rule_id=self.check_id,
            severity="warning",
            message=message,
            line=line,
            column=column,
            category=self.category,
        )


class MarkupDepthCheck:
    """Deep element nesting slows layout and style recalculation."""

    check_id = "dom_depth"
    severity = "warning"
    category = "performance"
    description = "Flags element nesting deeper than thresholds.markup_depth."

    def __init__(self, max_depth: int = 15) -> None:
        self.max_depth = max_depth
        self._estimator = NestingDepthEstimator()

    def evaluate(self, buffer: str, index: LineIndex) -> list[Finding]:
        measure = self._estimator.scan(buffer)
        if measure.max_depth <= self.max_depth or measure.deepest_offset is None:
            return []
        line, column = index.locate(measure.deepest_offset)
        return [
            Finding(
                rule_id=self.check_id,
                severity="warning",
                message=f"Deep DOM nesting detected ({measure.max_depth} levels)",
                line=line,
                column=column,
                context=index.line_text(line).strip(),
                category=self.category,
            )
        ]


class MarkupStatsEstimator:
    """Element, id, class, image, link and form counts."""

    def measure(self, buffer: str) -> dict[str, int]:
        classes: set[str] = set()
        for match in _CLASS_ATTR.finditer(buffer):
            classes.update(item for item in match.group(1).split() if item)
        tags = [match.group(1).lower() for match in _OPEN_TAG.finditer(buffer)]
        return {
            "elements": len(tags),
            "unique_ids": len({match.group(1) for match in _ID_ATTR.finditer(buffer)}),
            "unique_classes": len(classes),
            "images": tags.count("img"),
            "links": tags.count("a"),
            "forms": tags.count("form"),
            "headings": sum(1 for _ in _HEADING.finditer(buffer)),
        }
