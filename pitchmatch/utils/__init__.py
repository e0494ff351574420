"""Small shared helpers."""

from .timestamps import ensure_utc, format_db_timestamp, parse_db_timestamp, utc_now

__all__ = [
    "utc_now",
    "ensure_utc",
    "format_db_timestamp",
    "parse_db_timestamp",
]
