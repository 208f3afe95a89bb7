from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from ..adjustments.model import BalanceAdjustment
from ..core.enums import CycleState
from ..periods.calculator import Period
from .model import Cycle, CycleClosure, EmployerConfig


@dataclass(frozen=True)
class NoCycle:
    employer_id: int
    reason: str
    state: CycleState = CycleState.NO_CYCLE


@dataclass(frozen=True)
class CycleErrored:
    employer_id: int
    message: str
    state: CycleState = CycleState.ERRORED


@dataclass(frozen=True)
class CycleActive:
    config: EmployerConfig
    cycle: Cycle
    state: CycleState = CycleState.ACTIVE


@dataclass(frozen=True)
class CycleAdvanced:
    """Lapsed windows were closed in order; ``cycle`` is the new current one."""

    config: EmployerConfig
    closed: tuple[CycleClosure, ...]
    cycle: Cycle
    state: CycleState = CycleState.ACTIVE


AdvanceResult = Union[NoCycle, CycleErrored, CycleActive, CycleAdvanced]


@dataclass(frozen=True)
class CloseResult:
    closure: CycleClosure
    adjustment: Optional[BalanceAdjustment]
    config: EmployerConfig
    cycle: Cycle


@dataclass(frozen=True)
class BootstrapCreated:
    employer_id: int
    created: tuple[CycleClosure, ...] = field(default_factory=tuple)
    skipped: tuple[Period, ...] = field(default_factory=tuple)
    conflicts: tuple[Period, ...] = field(default_factory=tuple)

    @property
    def count(self) -> int:
        return len(self.created)


@dataclass(frozen=True)
class BootstrapNoData:
    employer_id: int


BootstrapResult = Union[BootstrapCreated, BootstrapNoData, NoCycle, CycleErrored]


@dataclass(frozen=True)
class ReversalResult:
    employer_id: int
    closures_removed: tuple[CycleClosure, ...]
    adjustments_removed: tuple[BalanceAdjustment, ...]
    config: EmployerConfig


@dataclass(frozen=True)
class PendingNoConfig:
    employer_id: int


@dataclass(frozen=True)
class PendingDisabled:
    employer_id: int


@dataclass(frozen=True)
class PendingNotConfigured:
    employer_id: int


@dataclass(frozen=True)
class PendingOverdue:
    window: Period
    days_late: int
    balance_minutes: int


@dataclass(frozen=True)
class PendingNearingEnd:
    window: Period
    days_left: int
    balance_minutes: int


@dataclass(frozen=True)
class PendingInProgress:
    window: Period
    days_left: int
    balance_minutes: int


PendingStatus = Union[
    PendingNoConfig,
    PendingDisabled,
    PendingNotConfigured,
    PendingOverdue,
    PendingNearingEnd,
    PendingInProgress,
]
