from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Optional
from zoneinfo import ZoneInfo


def local_now(tz_name: Optional[str] = None) -> datetime:
    if tz_name:
        return datetime.now(ZoneInfo(tz_name)).replace(tzinfo=None)
    return datetime.now()


def to_local_naive(value: datetime, tz_name: Optional[str] = None) -> datetime:
    """Express an aware datetime as naive wall-clock time in ``tz_name``."""
    if value.tzinfo is None:
        return value
    if tz_name:
        return value.astimezone(ZoneInfo(tz_name)).replace(tzinfo=None)
    return value.astimezone().replace(tzinfo=None)


def month_start(value: datetime) -> datetime:
    return datetime(value.year, value.month, 1)


def week_start(value: datetime) -> datetime:
    # Weeks start on Sunday; datetime.weekday() counts Monday as 0.
    days_since_sunday = (value.weekday() + 1) % 7
    start = value - timedelta(days=days_since_sunday)
    return datetime(start.year, start.month, start.day)


def add_months(value: date, months: int) -> date:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, 1)


def trailing_month_starts(now: datetime, months: int) -> List[date]:
    current = date(now.year, now.month, 1)
    return [add_months(current, offset) for offset in range(-(months - 1), 1)]


@dataclass(frozen=True)
class DashboardWindow:
    """Period boundaries for one request, all derived from a single ``now``."""

    now: datetime
    month_start: datetime
    week_start: datetime

    @classmethod
    def from_now(cls, now: datetime, tz_name: Optional[str] = None) -> "DashboardWindow":
        # Sheet dates decode to naive local time, so the window must be naive too.
        now = to_local_naive(now, tz_name)
        return cls(now=now, month_start=month_start(now), week_start=week_start(now))

    def month_to_date(self, value: Optional[datetime]) -> bool:
        return within(value, self.month_start, self.now)

    def week_to_date(self, value: Optional[datetime]) -> bool:
        return within(value, self.week_start, self.now)


def within(value: Optional[datetime], start: datetime, end: datetime) -> bool:
    if value is None:
        return False
    return start <= value <= end
