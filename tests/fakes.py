from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import date, datetime, time
from typing import Optional

from timebank.adjustments.model import BalanceAdjustment
from timebank.adjustments.service import BalanceAdjustmentLedger
from timebank.core.enums import Weekday
from timebank.core.locks import EmployerLocks
from timebank.cycles.model import CycleClosure, EmployerConfig
from timebank.cycles.service import CycleManager
from timebank.daytypes.model import Absence, Holiday
from timebank.punches.model import Punch
from timebank.punches.service import PunchService
from timebank.punches.tolerance import ToleranceEngine
from timebank.reports.service import ReportService
from timebank.schedules.model import DaySchedule
from timebank.summary.balance import BalanceService
from timebank.summary.service import DaySummaryService

WEEKDAYS = (Weekday.MONDAY, Weekday.TUESDAY, Weekday.WEDNESDAY, Weekday.THURSDAY, Weekday.FRIDAY)


class InMemoryPunches:
    def __init__(self):
        self._rows: dict[int, Punch] = {}
        self._id = 0
        self._lock = threading.Lock()
        self.considered_updates = 0

    def add(self, employer_id: int, timestamp: datetime, considered: Optional[time] = None) -> Punch:
        punch_id = self.create(employer_id=employer_id, timestamp=timestamp, considered_time=considered or timestamp.time())
        return self._rows[punch_id]

    def get_by_id(self, punch_id: int) -> Optional[Punch]:
        return self._rows.get(punch_id)

    def list_for_day(self, *, employer_id: int, day: date):
        return self.list_for_range(employer_id=employer_id, start=day, end=day)

    def list_for_range(self, *, employer_id: int, start: date, end: date):
        items = [p for p in self._rows.values() if p.employer_id == employer_id and start <= p.work_date <= end]
        return sorted(items, key=lambda p: (p.timestamp, p.punch_id))

    def earliest_date(self, *, employer_id: int) -> Optional[date]:
        days = [p.work_date for p in self._rows.values() if p.employer_id == employer_id]
        return min(days) if days else None

    def create(self, *, employer_id, timestamp, considered_time, manually_edited=False, justification=None) -> int:
        with self._lock:
            self._id += 1
            self._rows[self._id] = Punch(
                punch_id=self._id,
                employer_id=employer_id,
                timestamp=timestamp,
                considered_time=considered_time,
                manually_edited=manually_edited,
                justification=justification,
            )
            return self._id

    def update_timestamp(self, *, punch_id: int, timestamp: datetime, justification: str) -> bool:
        punch = self._rows.get(punch_id)
        if punch is None:
            return False
        self._rows[punch_id] = replace(punch, timestamp=timestamp, manually_edited=True, justification=justification)
        return True

    def update_considered_time(self, *, punch_id: int, considered_time: time) -> bool:
        with self._lock:
            punch = self._rows.get(punch_id)
            if punch is None:
                return False
            self._rows[punch_id] = punch.with_considered_time(considered_time)
            self.considered_updates += 1
            return True

    def list_employer_ids(self):
        return sorted({p.employer_id for p in self._rows.values()})


class InMemorySchedules:
    def __init__(self):
        self._entries: list[tuple[date, Optional[date], DaySchedule]] = []

    def set_week(
        self,
        employer_id: int,
        *,
        weekdays=WEEKDAYS,
        effective_from: date = date(2000, 1, 1),
        effective_to: Optional[date] = None,
        **kwargs,
    ) -> None:
        for weekday in Weekday:
            schedule = DaySchedule(
                employer_id=employer_id,
                weekday=weekday,
                is_workday=weekday in weekdays,
                **kwargs,
            )
            self._entries.append((effective_from, effective_to, schedule))

    def get_active(self, *, employer_id: int, weekday: Weekday, on_date: date) -> Optional[DaySchedule]:
        matches = [
            (start, s)
            for start, end, s in self._entries
            if s.employer_id == employer_id and s.weekday == weekday and start <= on_date and (end is None or on_date <= end)
        ]
        if not matches:
            return None
        return max(matches, key=lambda m: m[0])[1]

    def list_versions(self, *, employer_id: int):
        return []


class InMemoryAbsences:
    def __init__(self, items: Optional[list[Absence]] = None):
        self.items = list(items or [])

    def list_overlapping(self, *, employer_id: int, start: date, end: date):
        return [a for a in self.items if a.employer_id == employer_id and a.active and a.start_date <= end and a.end_date >= start]


class InMemoryHolidays:
    def __init__(self, items: Optional[list[Holiday]] = None):
        self.items = list(items or [])

    def list_for_employer(self, *, employer_id: int):
        return [h for h in self.items if h.applies_to(employer_id)]


class InMemoryAdjustments:
    def __init__(self):
        self.rows: dict[int, BalanceAdjustment] = {}
        self._id = 0

    def next_id(self) -> int:
        self._id += 1
        return self._id

    def insert(self, adjustment: BalanceAdjustment) -> BalanceAdjustment:
        stored = replace(adjustment, adjustment_id=self.next_id())
        self.rows[stored.adjustment_id] = stored
        return stored

    def get_by_id(self, adjustment_id: int):
        return self.rows.get(adjustment_id)

    def list_for_employer(self, *, employer_id: int, start=None, end=None):
        items = [
            a
            for a in self.rows.values()
            if a.employer_id == employer_id
            and (start is None or a.reference_date >= start)
            and (end is None or a.reference_date <= end)
        ]
        return sorted(items, key=lambda a: (a.reference_date, a.adjustment_id))

    def delete(self, adjustment_id: int) -> bool:
        return self.rows.pop(adjustment_id, None) is not None


class InMemoryConfigs:
    def __init__(self, *configs: EmployerConfig):
        self.rows: dict[int, EmployerConfig] = {c.employer_id: c for c in configs}

    def get(self, employer_id: int):
        return self.rows.get(employer_id)

    def save(self, config: EmployerConfig) -> None:
        self.rows[config.employer_id] = config

    def list_cycle_enabled(self):
        return sorted(e for e, c in self.rows.items() if c.cycle_enabled)


class InMemoryClosures:
    def __init__(self):
        self.rows: dict[int, CycleClosure] = {}
        self._id = 0

    def next_id(self) -> int:
        self._id += 1
        return self._id

    def list_for_employer(self, employer_id: int):
        items = [c for c in self.rows.values() if c.employer_id == employer_id]
        return sorted(items, key=lambda c: (c.period_start, c.closure_id))


class _StagedTransaction:
    def __init__(self, uow: "InMemoryUnitOfWork"):
        self._uow = uow
        self.ops: list = []

    def _check(self, name: str) -> None:
        if self._uow.fail_on == name:
            raise RuntimeError(f"store unavailable during {name}")

    def insert_closure(self, closure: CycleClosure) -> CycleClosure:
        self._check("insert_closure")
        stored = replace(closure, closure_id=self._uow.closures.next_id())
        self.ops.append(lambda: self._uow.closures.rows.__setitem__(stored.closure_id, stored))
        return stored

    def delete_closure(self, closure_id: int) -> bool:
        self._check("delete_closure")
        self.ops.append(lambda: self._uow.closures.rows.pop(closure_id, None))
        return closure_id in self._uow.closures.rows

    def insert_adjustment(self, adjustment: BalanceAdjustment) -> BalanceAdjustment:
        self._check("insert_adjustment")
        stored = replace(adjustment, adjustment_id=self._uow.adjustments.next_id())
        self.ops.append(lambda: self._uow.adjustments.rows.__setitem__(stored.adjustment_id, stored))
        return stored

    def delete_adjustment(self, adjustment_id: int) -> bool:
        self._check("delete_adjustment")
        self.ops.append(lambda: self._uow.adjustments.rows.pop(adjustment_id, None))
        return adjustment_id in self._uow.adjustments.rows

    def save_config(self, config: EmployerConfig) -> None:
        self._check("save_config")
        self.ops.append(lambda: self._uow.configs.save(config))


class InMemoryUnitOfWork:
    """Stages writes and applies them only when the block exits cleanly."""

    def __init__(self, closures: InMemoryClosures, adjustments: InMemoryAdjustments, configs: InMemoryConfigs):
        self.closures = closures
        self.adjustments = adjustments
        self.configs = configs
        self.fail_on: Optional[str] = None
        self.commits = 0

    @contextmanager
    def begin(self):
        tx = _StagedTransaction(self)
        yield tx
        for op in tx.ops:
            op()
        self.commits += 1


class RecordingSink:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.closures: list[CycleClosure] = []

    def cycle_closed(self, closure: CycleClosure) -> None:
        if self.fail:
            raise RuntimeError("mail server down")
        self.closures.append(closure)


@dataclass
class Engine:
    punches: InMemoryPunches
    schedules: InMemorySchedules
    absences: InMemoryAbsences
    holidays: InMemoryHolidays
    adjustments: InMemoryAdjustments
    configs: InMemoryConfigs
    closures: InMemoryClosures
    uow: InMemoryUnitOfWork
    punch_service: PunchService
    summaries: DaySummaryService
    ledger: BalanceAdjustmentLedger
    balances: BalanceService
    cycles: CycleManager
    reports: ReportService


def build_engine(*configs: EmployerConfig, notifications=None, safety_limit: int = 20) -> Engine:
    punches = InMemoryPunches()
    schedules = InMemorySchedules()
    absences = InMemoryAbsences()
    holidays = InMemoryHolidays()
    adjustments = InMemoryAdjustments()
    config_repo = InMemoryConfigs(*configs)
    closures = InMemoryClosures()
    uow = InMemoryUnitOfWork(closures, adjustments, config_repo)
    locks = EmployerLocks()

    punch_service = PunchService(punches, ToleranceEngine(schedules), locks=locks)
    summaries = DaySummaryService(punches, schedules, absences, holidays, config_repo)
    ledger = BalanceAdjustmentLedger(adjustments, locks=locks)
    balances = BalanceService(summaries, ledger)
    cycles = CycleManager(
        config_repo,
        closures,
        adjustments,
        punches,
        balances,
        uow,
        locks=locks,
        notifications=notifications,
        safety_limit=safety_limit,
    )
    reports = ReportService(summaries, balances, config_repo)
    return Engine(
        punches=punches,
        schedules=schedules,
        absences=absences,
        holidays=holidays,
        adjustments=adjustments,
        configs=config_repo,
        closures=closures,
        uow=uow,
        punch_service=punch_service,
        summaries=summaries,
        ledger=ledger,
        balances=balances,
        cycles=cycles,
        reports=reports,
    )


def work_day(punches: InMemoryPunches, employer_id: int, day: date, *times: str) -> None:
    for t in times:
        h, m = (int(x) for x in t.split(":"))
        punches.add(employer_id, datetime.combine(day, time(h, m)))
