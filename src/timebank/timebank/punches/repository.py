from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Protocol, Sequence

from .model import Punch


class PunchRepository(Protocol):
    def get_by_id(self, punch_id: int) -> Optional[Punch]:
        raise NotImplementedError

    def list_for_day(self, *, employer_id: int, day: date) -> Sequence[Punch]:
        raise NotImplementedError

    def list_for_range(self, *, employer_id: int, start: date, end: date) -> Sequence[Punch]:
        raise NotImplementedError

    def earliest_date(self, *, employer_id: int) -> Optional[date]:
        """Date of the employer's first punch, or None when there are no punches."""

        raise NotImplementedError

    def create(
        self,
        *,
        employer_id: int,
        timestamp: datetime,
        considered_time: time,
        manually_edited: bool = False,
        justification: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update_timestamp(self, *, punch_id: int, timestamp: datetime, justification: str) -> bool:
        """Manual correction; marks the punch as edited."""

        raise NotImplementedError

    def update_considered_time(self, *, punch_id: int, considered_time: time) -> bool:
        raise NotImplementedError

    def list_employer_ids(self) -> Sequence[int]:
        raise NotImplementedError
