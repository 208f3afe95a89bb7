from __future__ import annotations

from datetime import time
from typing import Optional

from ...common.datetime_utils import minutes_between, time_plus_minutes
from ...schedules.model import DaySchedule
from .base import ToleranceDecision, ToleranceStrategy, truncate_to_minute


class IntervalReturnStrategy(ToleranceStrategy):
    """Return from a break: a late return within tolerance counts as the ideal return.

    The ideal return is the previous punch's considered time plus the minimum interval.
    """

    def decide(self, *, real_time: time, schedule: Optional[DaySchedule], previous_considered: Optional[time]) -> ToleranceDecision:
        if schedule is None or previous_considered is None:
            return ToleranceDecision(considered_time=real_time)

        tolerance = int(schedule.tolerance_minutes_interval_return)
        if tolerance <= 0:
            return ToleranceDecision(considered_time=real_time)

        ideal_return = time_plus_minutes(previous_considered, int(schedule.minimum_interval_minutes))
        late_by = minutes_between(truncate_to_minute(ideal_return), truncate_to_minute(real_time))
        if 0 < late_by <= tolerance:
            return ToleranceDecision(
                considered_time=ideal_return,
                applied=True,
                note=f"interval return snapped to {ideal_return.strftime('%H:%M')} ({late_by} min late)",
            )
        return ToleranceDecision(considered_time=real_time)
