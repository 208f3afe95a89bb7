from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date, normalize_mysql_time
from .model import Punch
from .repository import PunchRepository

_COLUMNS = "punch_id, employer_id, punched_at, considered_time, manually_edited, justification, created_at, updated_at"


def _to_punch(r: dict) -> Punch:
    return Punch(
        punch_id=int(r["punch_id"]),
        employer_id=int(r["employer_id"]),
        timestamp=r["punched_at"],
        considered_time=normalize_mysql_time(r["considered_time"]),
        manually_edited=bool(r.get("manually_edited")),
        justification=r.get("justification"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLPunchRepository(PunchRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, punch_id: int) -> Optional[Punch]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM punches WHERE punch_id=%s", (int(punch_id),))
            r = fetchone(cur)
            return _to_punch(r) if r else None

    def list_for_day(self, *, employer_id: int, day: date) -> Sequence[Punch]:
        return self.list_for_range(employer_id=employer_id, start=day, end=day)

    def list_for_range(self, *, employer_id: int, start: date, end: date) -> Sequence[Punch]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM punches
                WHERE employer_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY punched_at, punch_id
                """,
                (int(employer_id), start, end),
            )
            return [_to_punch(r) for r in fetchall(cur)]

    def earliest_date(self, *, employer_id: int) -> Optional[date]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT MIN(work_date) AS first_date FROM punches WHERE employer_id=%s", (int(employer_id),))
            r = fetchone(cur)
            return normalize_mysql_date(r["first_date"]) if r else None

    def create(
        self,
        *,
        employer_id: int,
        timestamp: datetime,
        considered_time: time,
        manually_edited: bool = False,
        justification: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO punches(employer_id, punched_at, work_date, considered_time, manually_edited, justification)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(employer_id), timestamp, timestamp.date(), considered_time, int(bool(manually_edited)), justification),
            )
            return int(cur.lastrowid)

    def update_timestamp(self, *, punch_id: int, timestamp: datetime, justification: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE punches
                SET punched_at=%s, work_date=%s, manually_edited=1, justification=%s, updated_at=NOW()
                WHERE punch_id=%s
                """,
                (timestamp, timestamp.date(), justification, int(punch_id)),
            )
            return cur.rowcount > 0

    def update_considered_time(self, *, punch_id: int, considered_time: time) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE punches SET considered_time=%s, updated_at=NOW() WHERE punch_id=%s",
                (considered_time, int(punch_id)),
            )
            return cur.rowcount > 0

    def list_employer_ids(self) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT DISTINCT employer_id FROM punches ORDER BY employer_id")
            return [int(r["employer_id"]) for r in fetchall(cur)]
