"""Tests for send-time calculation."""

from datetime import date, datetime, timedelta, timezone

import pytest

from pitchmatch.campaigns import SlotAllocator, follow_up_date, next_business_day
from pitchmatch.campaigns.scheduling import add_business_days

MONDAY = date(2026, 1, 5)
FRIDAY = date(2026, 1, 9)
SATURDAY = date(2026, 1, 10)


def utc(year, month, day, hour=0, minute=0):
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


class TestBusinessDays:
    """Weekend skipping."""

    def test_next_business_day_skips_weekend(self):
        assert next_business_day(FRIDAY, True) == date(2026, 1, 12)

    def test_next_business_day_without_skipping(self):
        assert next_business_day(FRIDAY, False) == SATURDAY

    def test_next_business_day_from_saturday(self):
        assert next_business_day(SATURDAY, True) == date(2026, 1, 12)

    def test_add_business_days_over_weekend(self):
        assert add_business_days(FRIDAY, 3, True) == date(2026, 1, 14)

    def test_add_calendar_days(self):
        assert add_business_days(FRIDAY, 3, False) == date(2026, 1, 12)

    def test_add_zero_days(self):
        assert add_business_days(MONDAY, 0, True) == MONDAY


class TestFollowUpDate:
    """Follow-ups go out N (business) days later at the start hour."""

    def test_follow_up_at_start_hour(self):
        sent = utc(2026, 1, 5, 14, 30)
        assert follow_up_date(sent, 3, True, start_hour=9) == utc(2026, 1, 8, 9)

    def test_follow_up_skips_weekend(self):
        sent = utc(2026, 1, 8, 9)
        assert follow_up_date(sent, 3, True, start_hour=9) == utc(2026, 1, 13, 9)

    def test_follow_up_on_weekend_when_allowed(self):
        sent = utc(2026, 1, 8, 9)
        assert follow_up_date(sent, 2, False, start_hour=10) == utc(2026, 1, 10, 10)

    def test_follow_up_in_campaign_timezone(self):
        # 14:30 UTC is 09:30 in New York; 09:00 EST is 14:00 UTC
        sent = utc(2026, 1, 5, 14, 30)
        result = follow_up_date(sent, 3, True, start_hour=9, tz="America/New_York")
        assert result == utc(2026, 1, 8, 14)
        assert result.tzinfo == timezone.utc

    def test_naive_sent_at_is_treated_as_utc(self):
        assert follow_up_date(datetime(2026, 1, 5, 12), 1, True) == utc(2026, 1, 6, 9)


class TestSlotAllocator:
    """Daily capacity spread across the sending window."""

    def test_slots_are_evenly_spaced(self):
        allocator = SlotAllocator(9, 17, 8, now=utc(2026, 1, 5, 8))
        slots = [allocator.next_slot() for _ in range(3)]
        assert slots == [utc(2026, 1, 5, 9), utc(2026, 1, 5, 10), utc(2026, 1, 5, 11)]

    def test_interval_divides_window(self):
        allocator = SlotAllocator(9, 17, 28, now=utc(2026, 1, 5, 8))
        assert allocator.interval == timedelta(hours=8) / 28

    def test_full_day_rolls_to_next_business_day(self):
        allocator = SlotAllocator(9, 17, 2, now=utc(2026, 1, 9, 8))
        slots = [allocator.next_slot() for _ in range(3)]
        assert slots == [utc(2026, 1, 9, 9), utc(2026, 1, 9, 13), utc(2026, 1, 12, 9)]

    def test_past_slots_are_skipped(self):
        allocator = SlotAllocator(9, 17, 8, now=utc(2026, 1, 5, 10, 30))
        assert allocator.next_slot() == utc(2026, 1, 5, 11)

    def test_after_end_hour_starts_tomorrow(self):
        allocator = SlotAllocator(9, 17, 8, now=utc(2026, 1, 5, 17))
        assert allocator.next_slot() == utc(2026, 1, 6, 9)

    def test_friday_evening_starts_monday(self):
        allocator = SlotAllocator(9, 17, 8, now=utc(2026, 1, 9, 18))
        assert allocator.next_slot() == utc(2026, 1, 12, 9)

    def test_weekend_starts_monday(self):
        allocator = SlotAllocator(9, 17, 8, now=utc(2026, 1, 10, 8))
        assert allocator.next_slot() == utc(2026, 1, 12, 9)

    def test_weekend_allowed(self):
        allocator = SlotAllocator(9, 17, 8, skip_weekends=False, now=utc(2026, 1, 10, 10))
        assert allocator.next_slot() == utc(2026, 1, 10, 10)

    def test_existing_sends_consume_capacity(self):
        existing = [utc(2026, 1, 5, 9), utc(2026, 1, 5, 10), utc(2026, 1, 5, 11)]
        allocator = SlotAllocator(9, 17, 4, now=utc(2026, 1, 5, 8), existing=existing)
        assert allocator.next_slot() == utc(2026, 1, 5, 15)
        assert allocator.next_slot() == utc(2026, 1, 6, 9)

    def test_window_in_campaign_timezone(self):
        allocator = SlotAllocator(9, 17, 8, tz="America/New_York", now=utc(2026, 1, 5, 12))
        assert allocator.next_slot() == utc(2026, 1, 5, 14)

    @pytest.mark.parametrize("start,end,per_day", [(17, 9, 10), (9, 9, 10), (9, 25, 10), (9, 17, 0)])
    def test_invalid_arguments(self, start, end, per_day):
        with pytest.raises(ValueError):
            SlotAllocator(start, end, per_day)
