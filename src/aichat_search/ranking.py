"""Deduplicate and order search results."""

import logging
from datetime import datetime, timezone

from .core import SearchResult, Timestamp

logger = logging.getLogger(__name__)


def timestamp_ms(value: Timestamp) -> float:
    """Normalize a stored timestamp to epoch milliseconds.

    Numbers are taken as epoch milliseconds already. Strings are parsed as
    ISO-8601 date-times (naive values are treated as UTC); a purely numeric
    string is read as milliseconds. Anything unparseable sorts as 0.
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str) or not value.strip():
        return 0.0

    text = value.strip()
    try:
        return float(text)
    except ValueError:
        pass

    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        logger.debug("Unparseable timestamp %r", value)
        return 0.0
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp() * 1000


def dedupe(results: list[SearchResult]) -> list[SearchResult]:
    """Keep the first result seen for each chat id."""
    seen = set()
    unique = []
    for result in results:
        if result.chat_id in seen:
            continue
        seen.add(result.chat_id)
        unique.append(result)
    return unique


def rank(results: list[SearchResult]) -> list[SearchResult]:
    """Deduplicate, then sort newest first."""
    unique = dedupe(results)
    unique.sort(key=lambda r: timestamp_ms(r.timestamp), reverse=True)
    return unique
