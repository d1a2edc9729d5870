"""Fail-open timestamp parsing shared by the progression engine.

Stored timestamps come from the remote store as ISO-8601 strings and are
not guaranteed to be well formed.  Nothing here raises: a value that
cannot be understood is reported as None and the caller decides whether
that means "excluded" or "feature disabled".
"""

from __future__ import annotations

from datetime import UTC, date, datetime


def parse_timestamp(value: object) -> datetime | None:
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    Accepts a trailing ``Z``, an explicit offset, or no offset at all
    (treated as UTC).  Date-only strings are midnight UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    try:
        return parsed.astimezone(UTC)
    except OverflowError:
        # Offset pushes the instant past datetime.min or datetime.max
        return None


def parse_date(value: object) -> date | None:
    """Parse the calendar date written in *value*, without a timezone shift."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None
