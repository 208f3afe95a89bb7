from __future__ import annotations

from datetime import time
from typing import Optional

from ...common.datetime_utils import minutes_between
from ...schedules.model import DaySchedule
from .base import ToleranceDecision, ToleranceStrategy, truncate_to_minute


class EntryToleranceStrategy(ToleranceStrategy):
    """First punch of the day: an early arrival within tolerance counts as the ideal entry."""

    def decide(self, *, real_time: time, schedule: Optional[DaySchedule], previous_considered: Optional[time]) -> ToleranceDecision:
        if schedule is None or schedule.ideal_entry_time is None:
            return ToleranceDecision(considered_time=real_time)

        ideal = schedule.ideal_entry_time
        early_by = minutes_between(truncate_to_minute(real_time), truncate_to_minute(ideal))
        if 0 < early_by <= int(schedule.tolerance_minutes_entry):
            return ToleranceDecision(
                considered_time=ideal,
                applied=True,
                note=f"entry snapped to {ideal.strftime('%H:%M')} ({early_by} min early)",
            )
        return ToleranceDecision(considered_time=real_time)
