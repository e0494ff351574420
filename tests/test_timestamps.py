"""Unit tests for timestamp utilities."""

from datetime import datetime, timedelta, timezone

from pitchmatch.utils.timestamps import (
    ensure_utc,
    format_db_timestamp,
    parse_db_timestamp,
    utc_now,
)


class TestUtcNow:
    """Tests for utc_now function."""

    def test_utc_now_returns_utc_datetime(self):
        now = utc_now()

        assert now.tzinfo == timezone.utc
        assert isinstance(now, datetime)

    def test_utc_now_is_recent(self):
        before = datetime.now(timezone.utc)
        now = utc_now()
        after = datetime.now(timezone.utc)

        assert before <= now <= after


class TestEnsureUtc:
    """Tests for ensure_utc function."""

    def test_none(self):
        assert ensure_utc(None) is None

    def test_naive_datetime_is_treated_as_utc(self):
        result = ensure_utc(datetime(2026, 1, 5, 12, 0, 0))

        assert result.tzinfo == timezone.utc
        assert result.hour == 12

    def test_other_timezone_is_converted(self):
        eastern = timezone(timedelta(hours=-5))
        result = ensure_utc(datetime(2026, 1, 5, 9, 0, 0, tzinfo=eastern))

        assert result == datetime(2026, 1, 5, 14, 0, 0, tzinfo=timezone.utc)
        assert result.tzinfo == timezone.utc


class TestDbTimestamps:
    """Storage format for timestamps."""

    def test_format(self):
        dt = datetime(2026, 1, 5, 9, 0, 0, tzinfo=timezone.utc)
        assert format_db_timestamp(dt) == "2026-01-05T09:00:00.000000Z"

    def test_format_converts_to_utc(self):
        dt = datetime(2026, 1, 5, 9, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        assert format_db_timestamp(dt) == "2026-01-05T07:00:00.000000Z"

    def test_format_none(self):
        assert format_db_timestamp(None) is None

    def test_parse(self):
        parsed = parse_db_timestamp("2026-01-05T09:00:00.123456Z")
        assert parsed == datetime(2026, 1, 5, 9, 0, 0, 123456, tzinfo=timezone.utc)

    def test_parse_without_fraction(self):
        parsed = parse_db_timestamp("2026-01-05T09:00:00Z")
        assert parsed == datetime(2026, 1, 5, 9, 0, 0, tzinfo=timezone.utc)

    def test_parse_empty(self):
        assert parse_db_timestamp(None) is None
        assert parse_db_timestamp("") is None

    def test_lexical_order_matches_time_order(self):
        earlier = format_db_timestamp(datetime(2026, 1, 5, 9, 0, 0, 5, tzinfo=timezone.utc))
        later = format_db_timestamp(datetime(2026, 1, 5, 10, 0, 0, tzinfo=timezone.utc))
        assert earlier < later
