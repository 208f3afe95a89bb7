from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, time
from typing import Optional


@dataclass(frozen=True)
class Punch:
    """Domain entity: a single clock-in/clock-out event."""

    punch_id: int
    employer_id: int
    timestamp: datetime
    considered_time: time
    manually_edited: bool = False
    justification: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def work_date(self) -> date:
        return self.timestamp.date()

    @property
    def real_time(self) -> time:
        return self.timestamp.time()

    def with_considered_time(self, considered_time: time) -> "Punch":
        return replace(self, considered_time=considered_time)
