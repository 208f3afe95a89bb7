from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import time
from typing import Optional

from ...schedules.model import DaySchedule


@dataclass(frozen=True)
class ToleranceDecision:
    considered_time: time
    applied: bool = False
    note: Optional[str] = None


class ToleranceStrategy(ABC):
    """Strategy Pattern: how a punch's real time becomes its considered time."""

    @abstractmethod
    def decide(self, *, real_time: time, schedule: Optional[DaySchedule], previous_considered: Optional[time]) -> ToleranceDecision:
        raise NotImplementedError


def truncate_to_minute(value: time) -> time:
    return value.replace(second=0, microsecond=0)
