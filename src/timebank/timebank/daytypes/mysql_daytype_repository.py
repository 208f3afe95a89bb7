from __future__ import annotations

from datetime import date
from typing import Sequence

from ..core.enums import AbsenceKind, DayOffKind, HolidayKind, HolidayRecurrence, HolidayScope
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Absence, Holiday
from .repository import AbsenceRepository, HolidayRepository


class MySQLAbsenceRepository(AbsenceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_overlapping(self, *, employer_id: int, start: date, end: date) -> Sequence[Absence]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT absence_id, employer_id, kind, start_date, end_date, abatement_minutes, day_off_kind, note, active
                FROM absences
                WHERE employer_id=%s AND active=1 AND start_date <= %s AND end_date >= %s
                ORDER BY start_date, absence_id
                """,
                (int(employer_id), end, start),
            )
            return [
                Absence(
                    absence_id=int(r["absence_id"]),
                    employer_id=int(r["employer_id"]),
                    kind=AbsenceKind(r["kind"]),
                    start_date=r["start_date"],
                    end_date=r["end_date"],
                    abatement_minutes=int(r["abatement_minutes"]) if r.get("abatement_minutes") is not None else None,
                    day_off_kind=DayOffKind(r["day_off_kind"]) if r.get("day_off_kind") else None,
                    note=r.get("note"),
                    active=bool(r["active"]),
                )
                for r in fetchall(cur)
            ]


class MySQLHolidayRepository(HolidayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_employer(self, *, employer_id: int) -> Sequence[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT holiday_id, name, kind, recurrence, scope, employer_id, month, day, specific_date, active
                FROM holidays
                WHERE active=1 AND (scope=%s OR employer_id=%s)
                ORDER BY holiday_id
                """,
                (HolidayScope.GLOBAL.value, int(employer_id)),
            )
            return [
                Holiday(
                    holiday_id=int(r["holiday_id"]),
                    name=str(r["name"]),
                    kind=HolidayKind(r["kind"]),
                    recurrence=HolidayRecurrence(r["recurrence"]),
                    scope=HolidayScope(r["scope"]),
                    employer_id=int(r["employer_id"]) if r.get("employer_id") is not None else None,
                    month=int(r["month"]) if r.get("month") is not None else None,
                    day=int(r["day"]) if r.get("day") is not None else None,
                    specific_date=r.get("specific_date"),
                    active=bool(r["active"]),
                )
                for r in fetchall(cur)
            ]
