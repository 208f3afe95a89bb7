from __future__ import annotations

from datetime import time
from typing import Optional

from ...schedules.model import DaySchedule
from .base import ToleranceDecision, ToleranceStrategy


class RealTimeStrategy(ToleranceStrategy):
    """Exits (odd positions) are never adjusted."""

    def decide(self, *, real_time: time, schedule: Optional[DaySchedule], previous_considered: Optional[time]) -> ToleranceDecision:
        return ToleranceDecision(considered_time=real_time)
