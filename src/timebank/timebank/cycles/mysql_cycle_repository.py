from __future__ import annotations

from contextlib import contextmanager
from dataclasses import replace
from typing import Iterator, Optional, Sequence

from ..adjustments.model import BalanceAdjustment
from ..adjustments.mysql_adjustment_repository import delete_adjustment, insert_adjustment
from ..core.enums import ClosureType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date
from ..database.unit_of_work import CycleTransaction, UnitOfWork
from .model import CycleClosure, EmployerConfig
from .repository import ClosureRepository, EmployerConfigRepository

_CONFIG_COLUMNS = (
    "employer_id, cycle_enabled, cycle_length_weeks, cycle_length_months, current_cycle_start, "
    "closure_reminder_days, rh_period_start_day, default_expected_minutes, updated_at"
)


def _to_config(r: dict) -> EmployerConfig:
    return EmployerConfig(
        employer_id=int(r["employer_id"]),
        cycle_enabled=bool(r["cycle_enabled"]),
        cycle_length_weeks=int(r["cycle_length_weeks"] or 0),
        cycle_length_months=int(r["cycle_length_months"] or 0),
        current_cycle_start=normalize_mysql_date(r.get("current_cycle_start")),
        closure_reminder_days=int(r["closure_reminder_days"]),
        rh_period_start_day=int(r["rh_period_start_day"]),
        default_expected_minutes=int(r["default_expected_minutes"]),
        updated_at=r.get("updated_at"),
    )


def _to_closure(r: dict) -> CycleClosure:
    return CycleClosure(
        closure_id=int(r["closure_id"]),
        employer_id=int(r["employer_id"]),
        period_start=normalize_mysql_date(r["period_start"]),
        period_end=normalize_mysql_date(r["period_end"]),
        prior_balance_minutes=int(r["prior_balance_minutes"]),
        closure_type=ClosureType(r["closure_type"]),
        note=r.get("note"),
        created_at=r.get("created_at"),
    )


def save_config(cur, config: EmployerConfig) -> None:
    cur.execute(
        """
        INSERT INTO employer_configs(
            employer_id, cycle_enabled, cycle_length_weeks, cycle_length_months, current_cycle_start,
            closure_reminder_days, rh_period_start_day, default_expected_minutes, updated_at
        )
        VALUES(%s,%s,%s,%s,%s,%s,%s,%s,NOW())
        ON DUPLICATE KEY UPDATE
            cycle_enabled=VALUES(cycle_enabled),
            cycle_length_weeks=VALUES(cycle_length_weeks),
            cycle_length_months=VALUES(cycle_length_months),
            current_cycle_start=VALUES(current_cycle_start),
            closure_reminder_days=VALUES(closure_reminder_days),
            rh_period_start_day=VALUES(rh_period_start_day),
            default_expected_minutes=VALUES(default_expected_minutes),
            updated_at=NOW()
        """,
        (
            int(config.employer_id),
            int(bool(config.cycle_enabled)),
            int(config.cycle_length_weeks),
            int(config.cycle_length_months),
            config.current_cycle_start,
            int(config.closure_reminder_days),
            int(config.rh_period_start_day),
            int(config.default_expected_minutes),
        ),
    )


class MySQLEmployerConfigRepository(EmployerConfigRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, employer_id: int) -> Optional[EmployerConfig]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_CONFIG_COLUMNS} FROM employer_configs WHERE employer_id=%s", (int(employer_id),))
            r = fetchone(cur)
            return _to_config(r) if r else None

    def save(self, config: EmployerConfig) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            save_config(cur, config)

    def list_cycle_enabled(self) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT employer_id FROM employer_configs WHERE cycle_enabled=1 ORDER BY employer_id")
            return [int(r["employer_id"]) for r in fetchall(cur)]


class MySQLClosureRepository(ClosureRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_employer(self, employer_id: int) -> Sequence[CycleClosure]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT closure_id, employer_id, period_start, period_end, prior_balance_minutes, closure_type, note, created_at
                FROM cycle_closures
                WHERE employer_id=%s
                ORDER BY period_start, closure_id
                """,
                (int(employer_id),),
            )
            return [_to_closure(r) for r in fetchall(cur)]


class _MySQLCycleTransaction(CycleTransaction):
    def __init__(self, cur):
        self._cur = cur

    def insert_closure(self, closure: CycleClosure) -> CycleClosure:
        self._cur.execute(
            """
            INSERT INTO cycle_closures(employer_id, period_start, period_end, prior_balance_minutes, closure_type, note)
            VALUES(%s,%s,%s,%s,%s,%s)
            """,
            (
                int(closure.employer_id),
                closure.period_start,
                closure.period_end,
                int(closure.prior_balance_minutes),
                closure.closure_type.value,
                closure.note,
            ),
        )
        return replace(closure, closure_id=int(self._cur.lastrowid))

    def delete_closure(self, closure_id: int) -> bool:
        self._cur.execute("DELETE FROM cycle_closures WHERE closure_id=%s", (int(closure_id),))
        return self._cur.rowcount > 0

    def insert_adjustment(self, adjustment: BalanceAdjustment) -> BalanceAdjustment:
        return insert_adjustment(self._cur, adjustment)

    def delete_adjustment(self, adjustment_id: int) -> bool:
        return delete_adjustment(self._cur, adjustment_id)

    def save_config(self, config: EmployerConfig) -> None:
        save_config(self._cur, config)


class MySQLUnitOfWork(UnitOfWork):
    """One connection per transaction; db_cursor commits once at the end."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def begin(self) -> Iterator[CycleTransaction]:
        with db_cursor(self._conn_factory) as (_, cur):
            yield _MySQLCycleTransaction(cur)
