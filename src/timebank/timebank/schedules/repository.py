from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import Weekday
from .model import DaySchedule, ScheduleVersion


class ScheduleRepository(Protocol):
    def get_active(self, *, employer_id: int, weekday: Weekday, on_date: date) -> Optional[DaySchedule]:
        """Day schedule of the version active on ``on_date``, or None when nothing is configured."""

        raise NotImplementedError

    def list_versions(self, *, employer_id: int) -> Sequence[ScheduleVersion]:
        raise NotImplementedError
