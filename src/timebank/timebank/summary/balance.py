from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..adjustments.service import BalanceAdjustmentLedger
from ..common.datetime_utils import format_minutes
from .service import DaySummaryService


@dataclass(frozen=True)
class PeriodBalance:
    employer_id: int
    start: date
    end: date
    worked_minutes: int
    expected_minutes: int
    day_balance_minutes: int
    adjustment_minutes: int
    days_worked: int

    @property
    def balance_minutes(self) -> int:
        return self.day_balance_minutes + self.adjustment_minutes

    @property
    def balance_label(self) -> str:
        return format_minutes(self.balance_minutes)


class BalanceService:
    """The single period-sum used by summaries, cycles and reports."""

    def __init__(self, summaries: DaySummaryService, ledger: BalanceAdjustmentLedger):
        self._summaries = summaries
        self._ledger = ledger

    def period_balance(
        self,
        employer_id: int,
        start: date,
        end: date,
        *,
        include_adjustments: bool = True,
        exclude_cycle_zeroing: bool = False,
    ) -> PeriodBalance:
        days = self._summaries.summaries_for_range(employer_id, start, end)
        adjustments = 0
        if include_adjustments:
            adjustments = self._ledger.period_sum(employer_id, start, end, exclude_cycle_zeroing=exclude_cycle_zeroing)

        return PeriodBalance(
            employer_id=employer_id,
            start=start,
            end=end,
            worked_minutes=sum(d.worked_minutes for d in days),
            expected_minutes=sum(d.expected_minutes for d in days),
            day_balance_minutes=sum(d.balance_minutes for d in days),
            adjustment_minutes=adjustments,
            days_worked=sum(1 for d in days if d.has_punches),
        )
