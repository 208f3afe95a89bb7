from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def add_months(day: date, months: int) -> date:
    """Shift ``day`` by whole months, clamping the day to the target month's length."""
    month_index = day.year * 12 + (day.month - 1) + int(months)
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def daterange(start: date, end: date):
    """Yield every date in [start, end]."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def time_plus_minutes(value: time, minutes: int) -> time:
    """Add minutes to a time-of-day, wrapping at midnight."""
    base = datetime.combine(date(2000, 1, 1), value)
    return (base + timedelta(minutes=int(minutes))).time()


def minutes_between(start: time, end: time) -> int:
    """Signed whole minutes from ``start`` to ``end`` on the same day, truncated toward zero."""
    delta = datetime.combine(date(2000, 1, 1), end) - datetime.combine(date(2000, 1, 1), start)
    seconds = int(delta.total_seconds())
    if seconds >= 0:
        return seconds // 60
    return -((-seconds) // 60)


def format_minutes(minutes: int) -> str:
    """Format a signed minute balance as +HH:MM / -HH:MM."""
    sign = "+" if minutes >= 0 else "-"
    total = abs(int(minutes))
    return f"{sign}{total // 60:02d}:{total % 60:02d}"
