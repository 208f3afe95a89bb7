from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..common.validators import require_length_between, require_non_empty
from ..core.constants import ADJUSTMENT_MAX_MINUTES, JUSTIFICATION_MAX_LENGTH, JUSTIFICATION_MIN_LENGTH
from ..core.exceptions import NotFoundError, ValidationError
from ..core.locks import EmployerLocks
from ..logging_config import get_logger
from .model import BalanceAdjustment
from .repository import AdjustmentRepository

logger = get_logger("adjustments.service")


class BalanceAdjustmentLedger:
    """Manual corrections of the banked-hours balance.

    Writes hold the employer lock shared with the cycle manager, so an entry
    never lands in a window while its closure balance is being taken.
    """

    def __init__(
        self,
        adjustments: AdjustmentRepository,
        *,
        max_minutes: int = ADJUSTMENT_MAX_MINUTES,
        justification_min_length: int = JUSTIFICATION_MIN_LENGTH,
        justification_max_length: int = JUSTIFICATION_MAX_LENGTH,
        locks: EmployerLocks | None = None,
    ):
        self._adjustments = adjustments
        self._locks = locks or EmployerLocks()
        self._max_minutes = int(max_minutes)
        self._min_len = int(justification_min_length)
        self._max_len = int(justification_max_length)

    def validate(self, *, reference_date: date, minutes: int, justification: str, today: date) -> str:
        """Return the trimmed justification or raise ValidationError."""

        if isinstance(minutes, bool) or not isinstance(minutes, int):
            raise ValidationError("minutes must be an integer")
        if minutes == 0:
            raise ValidationError("minutes must not be zero")
        if abs(minutes) > self._max_minutes:
            raise ValidationError(f"an adjustment may not exceed {self._max_minutes} minutes")
        if reference_date > today:
            raise ValidationError("reference_date must not be in the future")

        text = require_non_empty(justification or "", "justification")
        return require_length_between(text, "justification", self._min_len, self._max_len)

    def record(
        self,
        employer_id: int,
        *,
        reference_date: date,
        minutes: int,
        justification: str,
        today: date | None = None,
    ) -> BalanceAdjustment:
        today = today or date.today()
        try:
            text = self.validate(reference_date=reference_date, minutes=minutes, justification=justification, today=today)
        except ValidationError as exc:
            logger.warning("adjustment_rejected", extra={"employer_id": employer_id, "reason": str(exc)})
            raise

        with self._locks.hold(employer_id):
            stored = self._adjustments.insert(
                BalanceAdjustment(
                    adjustment_id=None,
                    employer_id=employer_id,
                    reference_date=reference_date,
                    minutes=minutes,
                    justification=text,
                )
            )
        logger.info(
            "adjustment_recorded",
            extra={
                "employer_id": employer_id,
                "adjustment_id": stored.adjustment_id,
                "reference_date": reference_date,
                "minutes": minutes,
            },
        )
        return stored

    def list_for(self, employer_id: int, *, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[BalanceAdjustment]:
        if start is not None and end is not None and start > end:
            raise ValidationError("start must not be after end")
        return self._adjustments.list_for_employer(employer_id=employer_id, start=start, end=end)

    def delete(self, adjustment_id: int) -> None:
        """Remove a manual adjustment. Cycle-zeroing entries go away only with their closure."""

        adjustment = self._adjustments.get_by_id(adjustment_id)
        if adjustment is None:
            raise NotFoundError(f"adjustment {adjustment_id} not found")
        if adjustment.is_cycle_zeroing:
            raise ValidationError("cycle-zeroing adjustments are removed by reversing their closure")
        with self._locks.hold(adjustment.employer_id):
            self._adjustments.delete(adjustment_id)
        logger.info("adjustment_deleted", extra={"employer_id": adjustment.employer_id, "adjustment_id": adjustment_id})

    def period_sum(self, employer_id: int, start: date, end: date, *, exclude_cycle_zeroing: bool = False) -> int:
        return sum(
            a.minutes
            for a in self.list_for(employer_id, start=start, end=end)
            if not (exclude_cycle_zeroing and a.is_cycle_zeroing)
        )
