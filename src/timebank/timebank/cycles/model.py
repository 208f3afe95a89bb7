from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional

from ..core.constants import DEFAULT_EXPECTED_MINUTES, DEFAULT_REMINDER_DAYS
from ..core.enums import ClosureType
from ..core.exceptions import ValidationError
from ..periods.calculator import Period, cycle_window, next_cycle_start, previous_cycle_start


@dataclass(frozen=True)
class EmployerConfig:
    """Per-employer banked-hours configuration.

    A cycle length is in weeks or in months, never both.
    """

    employer_id: int
    cycle_enabled: bool = False
    cycle_length_weeks: int = 0
    cycle_length_months: int = 0
    current_cycle_start: Optional[date] = None
    closure_reminder_days: int = DEFAULT_REMINDER_DAYS
    rh_period_start_day: int = 1
    default_expected_minutes: int = DEFAULT_EXPECTED_MINUTES
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.cycle_length_weeks < 0 or self.cycle_length_months < 0:
            raise ValidationError("cycle length must not be negative")
        if self.cycle_length_weeks and self.cycle_length_months:
            raise ValidationError("cycle length is either in weeks or in months, not both")

    @property
    def has_cycle_length(self) -> bool:
        return self.cycle_length_weeks > 0 or self.cycle_length_months > 0

    @property
    def has_cycle(self) -> bool:
        return self.cycle_enabled and self.has_cycle_length

    def window_from(self, start: date) -> Period:
        return cycle_window(start, weeks=self.cycle_length_weeks, months=self.cycle_length_months)

    def next_start(self, start: date) -> date:
        return next_cycle_start(start, weeks=self.cycle_length_weeks, months=self.cycle_length_months)

    def previous_start(self, start: date) -> date:
        return previous_cycle_start(start, weeks=self.cycle_length_weeks, months=self.cycle_length_months)

    def current_window(self) -> Optional[Period]:
        if self.current_cycle_start is None or not self.has_cycle_length:
            return None
        return self.window_from(self.current_cycle_start)

    def starting_at(self, start: date) -> "EmployerConfig":
        return replace(self, current_cycle_start=start)


@dataclass(frozen=True)
class CycleClosure:
    """Record that a cycle window was closed with a given balance."""

    closure_id: Optional[int]
    employer_id: int
    period_start: date
    period_end: date
    prior_balance_minutes: int
    closure_type: ClosureType
    note: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def window(self) -> Period:
        return Period(start=self.period_start, end=self.period_end)

    def matches(self, window: Period) -> bool:
        return self.period_start == window.start and self.period_end == window.end

    def overlaps(self, window: Period) -> bool:
        return self.period_start <= window.end and window.start <= self.period_end


@dataclass(frozen=True)
class Cycle:
    """A cycle window with its balance; ``closure`` is set once the cycle is closed."""

    window: Period
    balance_minutes: int
    closure: Optional[CycleClosure] = None

    @property
    def is_closed(self) -> bool:
        return self.closure is not None
