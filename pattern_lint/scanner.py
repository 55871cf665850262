"""Apply rule patterns to a text buffer."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator

from pattern_lint.rules.base import RawMatch, Rule

logger = logging.getLogger(__name__)


def scan(buffer: str, rules: Iterable[Rule]) -> list[RawMatch]:
    """Return every reportable match of every rule, rule by rule, left to right."""
    matches: list[RawMatch] = []
    for rule in rules:
        matches.extend(scan_rule(buffer, rule))
    return matches


def scan_rule(buffer: str, rule: Rule) -> Iterator[RawMatch]:
    """Yield non-overlapping matches of one rule, minus excepted or unconfirmed ones."""
    for match in rule.pattern.finditer(buffer):
        raw = RawMatch(
            rule=rule,
            start=match.start(),
            end=match.end(),
            text=match.group(0),
            groups=tuple(group if group is not None else "" for group in match.groups()),
            named={
                key: value if value is not None else ""
                for key, value in match.groupdict().items()
            },
        )
        if is_excepted(buffer, raw):
            logger.debug("%s: suppressed %r at %d by exception", rule.rule_id, raw.text, raw.start)
            continue
        if rule.usage_check is not None and not rule.usage_check(buffer, raw):
            logger.debug("%s: usage check rejected %r at %d", rule.rule_id, raw.text, raw.start)
            continue
        yield raw


def is_excepted(buffer: str, raw: RawMatch) -> bool:
    """Return True when one of the rule's exception strings covers the match.

    An exception applies when it equals the matched text or is contained in it.
    Rules with a ``context_width`` also compare against the surrounding window
    of that many characters on each side. An exception that only contains the
    match, such as ``== null`` for a match of ``==``, needs that window.
    ``exact_exceptions`` restricts the comparison to equality with the
    stripped match.
    """
    rule = raw.rule
    if not rule.exceptions:
        return False

    text = raw.text.strip()
    if rule.exact_exceptions:
        return text in rule.exceptions

    window = ""
    if rule.context_width:
        window = buffer[max(0, raw.start - rule.context_width) : raw.end + rule.context_width]

    for exception in rule.exceptions:
        if text == exception or exception in raw.text:
            return True
        if window and exception in window:
            return True
    return False


def identifier_pattern(name: str) -> re.Pattern[str]:
    """Compile a whole-word pattern for a script identifier (``$`` counts as a word char)."""
    return re.compile(rf"(?<![\w$]){re.escape(name)}(?![\w$])")


def count_identifier(buffer: str, name: str) -> int:
    """Count whole-word occurrences of ``name`` anywhere in the buffer."""
    if not name:
        return 0
    return sum(1 for _ in identifier_pattern(name).finditer(buffer))


def is_reassigned(buffer: str, name: str, *, after: int = 0) -> bool:
    """Return True if ``name`` is assigned, compound-assigned or incremented after ``after``."""
    if not name:
        return False
    escaped = re.escape(name)
    mutation = re.compile(
        rf"(?<![\w$.]){escaped}\s*(?:[-+*/%&|^]|\*\*|<<|>>>?|&&|\|\||\?\?)?=(?![=>])"
        rf"|(?<![\w$.]){escaped}\s*(?:\+\+|--)"
        rf"|(?:\+\+|--)\s*{escaped}(?![\w$])"
    )
    return mutation.search(buffer, after) is not None
