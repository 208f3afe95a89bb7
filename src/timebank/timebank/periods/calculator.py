from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterator

from ..common.datetime_utils import add_months
from ..core.constants import RH_START_DAY_MAX, RH_START_DAY_MIN
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class Period:
    """A closed date range [start, end]."""

    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1


def _clamp_start_day(start_day_of_month) -> int:
    if isinstance(start_day_of_month, bool) or not isinstance(start_day_of_month, int):
        raise ValidationError("start_day_of_month must be an integer")
    return max(RH_START_DAY_MIN, min(RH_START_DAY_MAX, start_day_of_month))


def period_for(reference_date: date, start_day_of_month: int) -> Period:
    """RH period containing ``reference_date``.

    A period starting on day N runs until day N-1 of the following month.
    """

    start_day = _clamp_start_day(start_day_of_month)
    if reference_date.day >= start_day:
        start = reference_date.replace(day=start_day)
    else:
        start = add_months(reference_date.replace(day=1), -1).replace(day=start_day)
    end = add_months(start, 1) - timedelta(days=1)
    return Period(start=start, end=end)


def enumerate_periods(from_date: date, to_date: date, start_day_of_month: int) -> Iterator[Period]:
    if from_date > to_date:
        raise ValidationError("from_date must not be after to_date")

    current = period_for(from_date, start_day_of_month)
    while current.start <= to_date:
        yield current
        current = period_for(current.end + timedelta(days=1), start_day_of_month)


def _check_length(weeks: int, months: int) -> None:
    if weeks < 0 or months < 0:
        raise ValidationError("cycle length must not be negative")
    if weeks and months:
        raise ValidationError("cycle length is either in weeks or in months, not both")
    if not weeks and not months:
        raise ValidationError("cycle length is not configured")


def next_cycle_start(start: date, *, weeks: int = 0, months: int = 0) -> date:
    _check_length(weeks, months)
    if weeks:
        return start + timedelta(weeks=weeks)
    return add_months(start, months)


def previous_cycle_start(start: date, *, weeks: int = 0, months: int = 0) -> date:
    _check_length(weeks, months)
    if weeks:
        return start - timedelta(weeks=weeks)
    return add_months(start, -months)


def cycle_window(start: date, *, weeks: int = 0, months: int = 0) -> Period:
    """Cycle beginning at ``start``; ends the day before the next cycle starts."""

    return Period(start=start, end=next_cycle_start(start, weeks=weeks, months=months) - timedelta(days=1))
