from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional

from ..core.constants import (
    DEFAULT_ENTRY_TOLERANCE_MINUTES,
    DEFAULT_EXPECTED_MINUTES,
    DEFAULT_MINIMUM_INTERVAL_MINUTES,
)
from ..core.enums import Weekday


@dataclass(frozen=True)
class DaySchedule:
    """Working-hours configuration of one weekday, inside one schedule version."""

    employer_id: int
    weekday: Weekday
    ideal_entry_time: Optional[time] = None
    tolerance_minutes_entry: int = DEFAULT_ENTRY_TOLERANCE_MINUTES
    minimum_interval_minutes: int = DEFAULT_MINIMUM_INTERVAL_MINUTES
    tolerance_minutes_interval_return: int = 0
    expected_duration_minutes: int = DEFAULT_EXPECTED_MINUTES
    is_workday: bool = True
    version_id: Optional[int] = None

    @property
    def expected_minutes(self) -> int:
        return int(self.expected_duration_minutes) if self.is_workday else 0


@dataclass(frozen=True)
class ScheduleVersion:
    """A schedule version is active from ``effective_from`` until ``effective_to`` (inclusive, open if None)."""

    version_id: int
    employer_id: int
    effective_from: date
    effective_to: Optional[date] = None
    description: Optional[str] = None
