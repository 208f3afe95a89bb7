from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Optional

from ..common.datetime_utils import daterange
from ..core.constants import DEFAULT_EXPECTED_MINUTES
from ..core.enums import Weekday
from ..core.exceptions import ValidationError
from ..cycles.repository import EmployerConfigRepository
from ..daytypes.repository import AbsenceRepository, HolidayRepository
from ..daytypes.resolver import DayTypeResolver
from ..punches.repository import PunchRepository
from ..schedules.repository import ScheduleRepository
from .calculator import DailySummaryCalculator, DaySummary


class DaySummaryService:
    """Loads the inputs of each day from the stores and delegates to DailySummaryCalculator."""

    def __init__(
        self,
        punches: PunchRepository,
        schedules: ScheduleRepository,
        absences: AbsenceRepository,
        holidays: HolidayRepository,
        configs: EmployerConfigRepository | None = None,
        *,
        calculator: DailySummaryCalculator | None = None,
        day_type_resolver: DayTypeResolver | None = None,
        default_expected_minutes: int = DEFAULT_EXPECTED_MINUTES,
    ):
        self._punches = punches
        self._schedules = schedules
        self._absences = absences
        self._holidays = holidays
        self._configs = configs
        self._calculator = calculator or DailySummaryCalculator()
        self._day_types = day_type_resolver or DayTypeResolver()
        self._default_expected = int(default_expected_minutes)

    def _employer_default(self, employer_id: int) -> int:
        if self._configs is not None:
            config = self._configs.get(employer_id)
            if config is not None:
                return int(config.default_expected_minutes)
        return self._default_expected

    def configured_expected_minutes(self, employer_id: int, day: date, *, fallback: Optional[int] = None) -> int:
        schedule = self._schedules.get_active(employer_id=employer_id, weekday=Weekday.of(day), on_date=day)
        if schedule is None:
            return self._employer_default(employer_id) if fallback is None else fallback
        return schedule.expected_minutes

    def summary_for(self, employer_id: int, day: date) -> DaySummary:
        return self.summaries_for_range(employer_id, day, day)[0]

    def summaries_for_range(self, employer_id: int, start: date, end: date) -> list[DaySummary]:
        """One summary per calendar day in [start, end], days without punches included."""

        if start > end:
            raise ValidationError("start must not be after end")

        punches_by_day = defaultdict(list)
        for punch in self._punches.list_for_range(employer_id=employer_id, start=start, end=end):
            punches_by_day[punch.work_date].append(punch)
        absences = list(self._absences.list_overlapping(employer_id=employer_id, start=start, end=end))
        holidays = list(self._holidays.list_for_employer(employer_id=employer_id))
        fallback = self._employer_default(employer_id)

        summaries = []
        for day in daterange(start, end):
            day_type = self._day_types.resolve(work_date=day, absences=absences, holidays=holidays)
            summaries.append(
                self._calculator.calculate(
                    work_date=day,
                    punches=punches_by_day.get(day, []),
                    day_type=day_type,
                    configured_expected_minutes=self.configured_expected_minutes(employer_id, day, fallback=fallback),
                )
            )
        return summaries
