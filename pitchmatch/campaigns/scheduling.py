"""Send-time calculation for drip campaigns.

All wall-clock decisions (sending window, weekends, "tomorrow") are made in
the campaign timezone; returned datetimes are UTC.
"""

import math
from collections import Counter
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Iterable, Optional, Union
from zoneinfo import ZoneInfo

from pitchmatch.utils.timestamps import ensure_utc, utc_now

SATURDAY = 5


def _is_weekend(day: date) -> bool:
    return day.weekday() >= SATURDAY


def _as_tz(tz: Union[str, tzinfo]) -> tzinfo:
    return ZoneInfo(tz) if isinstance(tz, str) else tz


def next_business_day(day: date, skip_weekends: bool) -> date:
    """The day after ``day``, moved past Saturday and Sunday when ``skip_weekends``.

    Example:
        >>> next_business_day(date(2026, 1, 2), True)   # Friday
        datetime.date(2026, 1, 5)
    """
    nxt = day + timedelta(days=1)
    if skip_weekends:
        while _is_weekend(nxt):
            nxt += timedelta(days=1)
    return nxt


def add_business_days(day: date, days: int, skip_weekends: bool) -> date:
    """Advance ``days`` days, counting only weekdays when ``skip_weekends``."""
    current = day
    added = 0
    while added < days:
        current += timedelta(days=1)
        if not (skip_weekends and _is_weekend(current)):
            added += 1
    return current


def follow_up_date(
    sent_at: datetime,
    delay_days: int,
    skip_weekends: bool,
    start_hour: int = 9,
    tz: Union[str, tzinfo] = "UTC",
) -> datetime:
    """When a follow-up to an email sent at ``sent_at`` should go out.

    Adds ``delay_days`` (business) days in the campaign timezone, then sets
    the time to ``start_hour:00``.

    Returns:
        UTC datetime
    """
    zone = _as_tz(tz)
    local = ensure_utc(sent_at).astimezone(zone)
    day = add_business_days(local.date(), delay_days, skip_weekends)
    return ensure_utc(datetime.combine(day, time(start_hour), tzinfo=zone))


class SlotAllocator:
    """Hands out per-user send times within a daily capacity.

    Each day's window ``[start_hour, end_hour)`` is cut into ``max_per_day``
    evenly spaced slots. Slots already taken (``existing``) and slots earlier
    than ``now`` are skipped; when a day is full the allocator moves to the
    next (business) day. If ``now`` is past the end hour, allocation starts
    tomorrow.
    """

    def __init__(
        self,
        start_hour: int,
        end_hour: int,
        max_per_day: int,
        skip_weekends: bool = True,
        tz: Union[str, tzinfo] = "UTC",
        now: Optional[datetime] = None,
        existing: Iterable[datetime] = (),
    ):
        if not 0 <= start_hour < end_hour <= 24:
            raise ValueError(f"Invalid sending window {start_hour}:00-{end_hour}:00")
        if max_per_day < 1:
            raise ValueError("max_per_day must be at least 1")

        self.start_hour = start_hour
        self.end_hour = end_hour
        self.max_per_day = max_per_day
        self.skip_weekends = skip_weekends
        self.tz = _as_tz(tz)
        self.interval = timedelta(hours=end_hour - start_hour) / max_per_day

        self._now = ensure_utc(now or utc_now()).astimezone(self.tz)
        self._used = Counter(ensure_utc(t).astimezone(self.tz).date() for t in existing)
        self._day = self._first_day()

    def _first_day(self) -> date:
        today = self._now.date()
        if self._now.hour >= self.end_hour:
            return next_business_day(today, self.skip_weekends)
        if self.skip_weekends and _is_weekend(today):
            return next_business_day(today, True)
        return today

    def _window_start(self, day: date) -> datetime:
        return datetime.combine(day, time(self.start_hour), tzinfo=self.tz)

    def _first_open_index(self, day: date) -> int:
        if day != self._now.date():
            return 0
        elapsed = self._now - self._window_start(day)
        if elapsed <= timedelta(0):
            return 0
        return math.ceil(elapsed / self.interval)

    def next_slot(self) -> datetime:
        """Reserve and return the next free slot (UTC)."""
        while True:
            index = max(self._used[self._day], self._first_open_index(self._day))
            if index < self.max_per_day:
                self._used[self._day] = index + 1
                slot = self._window_start(self._day) + self.interval * index
                return ensure_utc(slot)
            self._day = next_business_day(self._day, self.skip_weekends)
