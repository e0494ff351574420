"""UTC timestamp helpers.

Timestamps are stored in the database as ISO-8601 strings with a ``Z``
suffix and fixed microsecond precision, so lexical order equals time order.
"""

from datetime import datetime, timezone
from typing import Optional

DB_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_db_timestamp(dt: Optional[datetime]) -> Optional[str]:
    """Format a datetime for storage.

    Example:
        >>> format_db_timestamp(datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc))
        '2026-01-05T09:00:00.000000Z'
    """
    if dt is None:
        return None
    return ensure_utc(dt).strftime(DB_FORMAT)


def parse_db_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored timestamp back to an aware UTC datetime."""
    if not value:
        return None
    text = value.rstrip("Z")
    try:
        parsed = datetime.strptime(text, "%Y-%m-%dT%H:%M:%S.%f")
    except ValueError:
        parsed = datetime.fromisoformat(text)
    return ensure_utc(parsed)
