from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import daterange
from ..common.validators import require_non_empty
from ..core.exceptions import NotFoundError, ValidationError
from ..core.locks import EmployerLocks
from ..logging_config import LogContext, get_logger
from .model import Punch
from .repository import PunchRepository
from .tolerance import ToleranceEngine

logger = get_logger("punches.service")


@dataclass(frozen=True)
class RecalculationResult:
    processed: int = 0
    updated: int = 0

    def __add__(self, other: "RecalculationResult") -> "RecalculationResult":
        return RecalculationResult(processed=self.processed + other.processed, updated=self.updated + other.updated)


@dataclass(frozen=True)
class BulkRecalculationResult:
    processed: int = 0
    updated: int = 0
    per_employer: dict[int, RecalculationResult] = field(default_factory=dict)
    errors: dict[int, str] = field(default_factory=dict)


class PunchService:
    def __init__(
        self,
        punches: PunchRepository,
        tolerance: ToleranceEngine,
        *,
        locks: EmployerLocks | None = None,
    ):
        self._punches = punches
        self._tolerance = tolerance
        self._locks = locks or EmployerLocks()

    def punches_for_day(self, employer_id: int, day: date) -> list[Punch]:
        return sorted(self._punches.list_for_day(employer_id=employer_id, day=day), key=lambda p: (p.timestamp, p.punch_id))

    def record_punch(
        self,
        employer_id: int,
        *,
        now: datetime | None = None,
        manual: bool = False,
        justification: Optional[str] = None,
    ) -> Punch:
        """Store a clock event (or a manual entry) and settle the considered times of its day."""

        now = now or datetime.now()
        if manual:
            justification = require_non_empty(justification or "", "justification")

        with self._locks.hold(employer_id):
            punch_id = self._punches.create(
                employer_id=employer_id,
                timestamp=now,
                considered_time=now.time(),
                manually_edited=manual,
                justification=justification,
            )
            self.recalculate_day(employer_id, now.date())

        punch = self._punches.get_by_id(punch_id)
        if punch is None:
            raise NotFoundError(f"punch {punch_id} vanished after insert")
        return punch

    def edit_punch(self, punch_id: int, *, timestamp: datetime, justification: str) -> Punch:
        justification = require_non_empty(justification or "", "justification")

        current = self._punches.get_by_id(punch_id)
        if current is None:
            raise NotFoundError(f"punch {punch_id} not found")

        with self._locks.hold(current.employer_id):
            if not self._punches.update_timestamp(punch_id=punch_id, timestamp=timestamp, justification=justification):
                raise NotFoundError(f"punch {punch_id} not found")
            self.recalculate_day(current.employer_id, current.work_date)
            if timestamp.date() != current.work_date:
                self.recalculate_day(current.employer_id, timestamp.date())

        updated = self._punches.get_by_id(punch_id)
        if updated is None:
            raise NotFoundError(f"punch {punch_id} not found")
        return updated

    def recalculate_day(self, employer_id: int, day: date) -> RecalculationResult:
        """Re-apply tolerance to every punch of the day; writes only changed considered times."""

        with self._locks.hold(employer_id):
            punches = self._punches.list_for_day(employer_id=employer_id, day=day)
            if not punches:
                return RecalculationResult()

            by_id = {p.punch_id: p for p in punches}
            resolved = self._tolerance.resolve_day(employer_id=employer_id, day=day, punches=punches)

            updated = 0
            for punch in resolved:
                if by_id[punch.punch_id].considered_time != punch.considered_time:
                    self._punches.update_considered_time(punch_id=punch.punch_id, considered_time=punch.considered_time)
                    updated += 1

        if updated:
            logger.info(
                "punch_recalculated",
                extra={"employer_id": employer_id, "work_date": day, "processed": len(resolved), "updated": updated},
            )
        return RecalculationResult(processed=len(resolved), updated=updated)

    def recalculate_history(self, employer_id: int, *, until: date | None = None) -> RecalculationResult:
        """Walk every day from the first punch up to ``until`` (default today), ascending."""

        until = until or date.today()
        first = self._punches.earliest_date(employer_id=employer_id)
        total = RecalculationResult()
        if first is None or first > until:
            return total

        with LogContext.bind(employer_id=employer_id, operation="recalculate_history"):
            days_with_punches = {p.work_date for p in self._punches.list_for_range(employer_id=employer_id, start=first, end=until)}
            for day in daterange(first, until):
                if day in days_with_punches:
                    total = total + self.recalculate_day(employer_id, day)
        return total

    def recalculate_all(
        self,
        employer_ids: Iterable[int] | None = None,
        *,
        until: date | None = None,
        max_workers: int = 4,
    ) -> BulkRecalculationResult:
        """Recalculate several employers in parallel; each employer is processed sequentially."""

        ids: Sequence[int] = list(employer_ids) if employer_ids is not None else list(self._punches.list_employer_ids())
        if max_workers < 1:
            raise ValidationError("max_workers must be at least 1")

        per_employer: dict[int, RecalculationResult] = {}
        errors: dict[int, str] = {}
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            futures = {pool.submit(self.recalculate_history, employer_id, until=until): employer_id for employer_id in ids}
            for future, employer_id in futures.items():
                try:
                    per_employer[employer_id] = future.result()
                except Exception as exc:
                    logger.error("recalculation_failed", extra={"employer_id": employer_id}, exc_info=True)
                    errors[employer_id] = str(exc)

        return BulkRecalculationResult(
            processed=sum(r.processed for r in per_employer.values()),
            updated=sum(r.updated for r in per_employer.values()),
            per_employer=per_employer,
            errors=errors,
        )
