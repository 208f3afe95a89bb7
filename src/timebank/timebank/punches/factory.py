from __future__ import annotations

from dataclasses import dataclass, field

from .strategies.base import ToleranceStrategy
from .strategies.entry_strategy import EntryToleranceStrategy
from .strategies.exit_strategy import RealTimeStrategy
from .strategies.interval_return_strategy import IntervalReturnStrategy


@dataclass
class ToleranceStrategyFactory:
    """Factory Pattern: pick the tolerance rule from the punch's position in the day."""

    entry: ToleranceStrategy = field(default_factory=EntryToleranceStrategy)
    interval_return: ToleranceStrategy = field(default_factory=IntervalReturnStrategy)
    exit: ToleranceStrategy = field(default_factory=RealTimeStrategy)

    def for_index(self, index: int) -> ToleranceStrategy:
        if index < 0:
            raise ValueError("punch index must not be negative")
        if index == 0:
            return self.entry
        if index % 2 == 0:
            return self.interval_return
        return self.exit
