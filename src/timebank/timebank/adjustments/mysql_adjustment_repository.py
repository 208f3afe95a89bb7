from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import BalanceAdjustment
from .repository import AdjustmentRepository

_COLUMNS = "adjustment_id, employer_id, reference_date, minutes, justification, created_at"


def _to_adjustment(r: dict) -> BalanceAdjustment:
    return BalanceAdjustment(
        adjustment_id=int(r["adjustment_id"]),
        employer_id=int(r["employer_id"]),
        reference_date=r["reference_date"],
        minutes=int(r["minutes"]),
        justification=str(r["justification"]),
        created_at=r.get("created_at"),
    )


def insert_adjustment(cur, adjustment: BalanceAdjustment) -> BalanceAdjustment:
    """Insert on an open cursor; shared with the cycle unit of work."""

    cur.execute(
        """
        INSERT INTO balance_adjustments(employer_id, reference_date, minutes, justification)
        VALUES(%s,%s,%s,%s)
        """,
        (int(adjustment.employer_id), adjustment.reference_date, int(adjustment.minutes), adjustment.justification),
    )
    return replace(adjustment, adjustment_id=int(cur.lastrowid))


def delete_adjustment(cur, adjustment_id: int) -> bool:
    cur.execute("DELETE FROM balance_adjustments WHERE adjustment_id=%s", (int(adjustment_id),))
    return cur.rowcount > 0


class MySQLAdjustmentRepository(AdjustmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def insert(self, adjustment: BalanceAdjustment) -> BalanceAdjustment:
        with db_cursor(self._conn_factory) as (_, cur):
            return insert_adjustment(cur, adjustment)

    def get_by_id(self, adjustment_id: int) -> Optional[BalanceAdjustment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM balance_adjustments WHERE adjustment_id=%s", (int(adjustment_id),))
            r = fetchone(cur)
            return _to_adjustment(r) if r else None

    def list_for_employer(
        self,
        *,
        employer_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[BalanceAdjustment]:
        clauses = ["employer_id=%s"]
        params: list[object] = [int(employer_id)]
        if start is not None:
            clauses.append("reference_date >= %s")
            params.append(start)
        if end is not None:
            clauses.append("reference_date <= %s")
            params.append(end)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM balance_adjustments WHERE {where} ORDER BY reference_date, adjustment_id",
                tuple(params),
            )
            return [_to_adjustment(r) for r in fetchall(cur)]

    def delete(self, adjustment_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            return delete_adjustment(cur, adjustment_id)
