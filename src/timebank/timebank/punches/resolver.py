from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from ..common.datetime_utils import minutes_between
from .model import Punch


@dataclass(frozen=True)
class WorkInterval:
    entry: Punch
    exit: Optional[Punch] = None

    @property
    def is_open(self) -> bool:
        return self.exit is None

    @property
    def minutes(self) -> int:
        if self.exit is None:
            return 0
        # Snapping can put an entry after a very early exit; such a pair counts as zero.
        return max(0, minutes_between(self.entry.considered_time, self.exit.considered_time))


@dataclass(frozen=True)
class ResolvedDay:
    punches: tuple[Punch, ...]
    intervals: tuple[WorkInterval, ...]

    @property
    def worked_minutes(self) -> int:
        return sum(i.minutes for i in self.intervals)

    @property
    def is_complete(self) -> bool:
        return len(self.punches) >= 2 and len(self.punches) % 2 == 0

    @property
    def open_interval(self) -> Optional[WorkInterval]:
        if self.intervals and self.intervals[-1].is_open:
            return self.intervals[-1]
        return None


class TimeEntryResolver:
    """Pairs ordered punches as (entry, exit) and sums closed pairs."""

    def resolve(self, punches: Sequence[Punch]) -> ResolvedDay:
        ordered = tuple(sorted(punches, key=lambda p: (p.timestamp, p.punch_id)))
        intervals: list[WorkInterval] = []
        for i in range(0, len(ordered), 2):
            exit_punch = ordered[i + 1] if i + 1 < len(ordered) else None
            intervals.append(WorkInterval(entry=ordered[i], exit=exit_punch))
        return ResolvedDay(punches=ordered, intervals=tuple(intervals))
