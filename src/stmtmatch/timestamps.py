"""Instant-based timestamp equivalence.

Stores are free to re-serialize a timestamp (different offset, ``Z`` suffix,
added precision) as long as it denotes the same point in time, so timestamps
are compared as instants rather than strings.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any

# "...T10:00:00+05" carries an hour-only offset; read it as "+05:00"
_TWO_DIGIT_OFFSET_RE = re.compile(r"T[\d:.,]+[-+]\d{2}$")


def normalize_offset(value: str) -> str:
    """Expand a trailing two-digit UTC offset to ``HH:MM`` form."""
    if _TWO_DIGIT_OFFSET_RE.search(value):
        return f"{value}:00"
    return value


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO 8601 timestamp into an aware datetime.

    Values without an offset are taken as UTC. Returns ``None`` for anything
    that is not a parseable string.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def timestamps_equal(expected: Any, actual: Any) -> bool:
    """True when both timestamps parse and denote the same instant."""
    if isinstance(expected, str):
        expected = normalize_offset(expected)
    expected_instant = parse_timestamp(expected)
    actual_instant = parse_timestamp(actual)
    if expected_instant is None or actual_instant is None:
        return False
    return expected_instant == actual_instant
