from __future__ import annotations

from datetime import date, time
from typing import Optional, Sequence

from ..core.enums import Weekday
from ..schedules.model import DaySchedule
from ..schedules.repository import ScheduleRepository
from .factory import ToleranceStrategyFactory
from .model import Punch


class ToleranceEngine:
    """Computes considered times for the punches of one day."""

    def __init__(self, schedules: ScheduleRepository, *, strategy_factory: Optional[ToleranceStrategyFactory] = None):
        self._schedules = schedules
        self._factory = strategy_factory or ToleranceStrategyFactory()

    def schedule_for(self, *, employer_id: int, day: date) -> Optional[DaySchedule]:
        return self._schedules.get_active(employer_id=employer_id, weekday=Weekday.of(day), on_date=day)

    def considered_time(
        self,
        *,
        real_time: time,
        index: int,
        schedule: Optional[DaySchedule],
        previous_considered: Optional[time] = None,
    ) -> time:
        strategy = self._factory.for_index(index)
        return strategy.decide(real_time=real_time, schedule=schedule, previous_considered=previous_considered).considered_time

    def resolve_day(self, *, employer_id: int, day: date, punches: Sequence[Punch]) -> list[Punch]:
        """Return the day's punches, ordered by timestamp, each with its considered time.

        Interval returns depend on the previous punch's considered time, so the
        walk is sequential over the ordered list.
        """

        ordered = sorted(punches, key=lambda p: (p.timestamp, p.punch_id))
        schedule = self.schedule_for(employer_id=employer_id, day=day)

        resolved: list[Punch] = []
        previous: Optional[time] = None
        for index, punch in enumerate(ordered):
            considered = self.considered_time(
                real_time=punch.real_time,
                index=index,
                schedule=schedule,
                previous_considered=previous,
            )
            resolved.append(punch.with_considered_time(considered))
            previous = considered
        return resolved
