"""Render proposed replacements for matches."""

from __future__ import annotations

import logging

from pattern_lint.rules.base import RawMatch

logger = logging.getLogger(__name__)


def suggest(raw: RawMatch) -> str | None:
    """Render the rule's suggestion for one match.

    Suggestions are proposals only and are never applied to the source. A
    template or function that fails, or produces something other than a
    non-empty string, yields ``None`` instead of aborting the analysis.
    """
    suggestion = raw.rule.suggestion
    if suggestion is None:
        return None
    try:
        rendered = suggestion.render(raw.text, raw.groups, raw.named)
    except Exception as exc:  # noqa: BLE001 - suggestion code is caller supplied
        logger.debug(
            "%s: suggestion failed for %r: %s: %s",
            raw.rule.rule_id,
            raw.text,
            exc.__class__.__name__,
            exc,
        )
        return None
    if not isinstance(rendered, str) or not rendered:
        logger.debug("%s: suggestion returned %r, dropped", raw.rule.rule_id, rendered)
        return None
    return rendered
