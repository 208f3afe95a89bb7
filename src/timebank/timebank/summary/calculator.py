from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from ..core.enums import DayType
from ..daytypes.model import DayTypeResolution
from ..punches.model import Punch
from ..punches.resolver import TimeEntryResolver, WorkInterval


@dataclass(frozen=True)
class DaySummary:
    work_date: date
    day_type: DayType
    punches: tuple[Punch, ...]
    intervals: tuple[WorkInterval, ...]
    worked_minutes: int
    configured_expected_minutes: int
    abatement_minutes: int
    expected_minutes: int
    balance_minutes: int
    is_complete: bool
    description: Optional[str] = None

    @property
    def has_punches(self) -> bool:
        return bool(self.punches)


class DailySummaryCalculator:
    """Turns punches + day type + configured duration into the day's balance.

    expected = 0 when the day type zeroes it, otherwise
    max(0, configured - abatement); balance = worked - expected.
    """

    def __init__(self, resolver: TimeEntryResolver | None = None):
        self._resolver = resolver or TimeEntryResolver()

    def calculate(
        self,
        *,
        work_date: date,
        punches: Sequence[Punch],
        day_type: DayTypeResolution,
        configured_expected_minutes: int,
    ) -> DaySummary:
        resolved = self._resolver.resolve(punches)

        if day_type.zeroes_expected:
            expected = 0
        else:
            expected = max(0, int(configured_expected_minutes) - int(day_type.abatement_minutes))

        worked = resolved.worked_minutes
        return DaySummary(
            work_date=work_date,
            day_type=day_type.day_type,
            punches=resolved.punches,
            intervals=resolved.intervals,
            worked_minutes=worked,
            configured_expected_minutes=int(configured_expected_minutes),
            abatement_minutes=int(day_type.abatement_minutes),
            expected_minutes=expected,
            balance_minutes=worked - expected,
            is_complete=resolved.is_complete,
            description=day_type.description,
        )
