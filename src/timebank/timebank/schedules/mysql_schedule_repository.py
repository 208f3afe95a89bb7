from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import Weekday
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import DaySchedule, ScheduleVersion
from .repository import ScheduleRepository


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active(self, *, employer_id: int, weekday: Weekday, on_date: date) -> Optional[DaySchedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT v.version_id, v.employer_id, d.weekday, d.ideal_entry_time, d.tolerance_minutes_entry,
                       d.minimum_interval_minutes, d.tolerance_minutes_interval_return,
                       d.expected_duration_minutes, d.is_workday
                FROM schedule_versions v
                JOIN day_schedules d ON d.version_id = v.version_id
                WHERE v.employer_id=%s AND d.weekday=%s
                  AND v.effective_from <= %s
                  AND (v.effective_to IS NULL OR v.effective_to >= %s)
                ORDER BY v.effective_from DESC
                LIMIT 1
                """,
                (int(employer_id), weekday.value, on_date, on_date),
            )
            r = fetchone(cur)
            if not r:
                return None
            return DaySchedule(
                employer_id=int(r["employer_id"]),
                weekday=Weekday(r["weekday"]),
                ideal_entry_time=normalize_mysql_time(r.get("ideal_entry_time")),
                tolerance_minutes_entry=int(r["tolerance_minutes_entry"]),
                minimum_interval_minutes=int(r["minimum_interval_minutes"]),
                tolerance_minutes_interval_return=int(r["tolerance_minutes_interval_return"]),
                expected_duration_minutes=int(r["expected_duration_minutes"]),
                is_workday=bool(r["is_workday"]),
                version_id=int(r["version_id"]),
            )

    def list_versions(self, *, employer_id: int) -> Sequence[ScheduleVersion]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT version_id, employer_id, effective_from, effective_to, description
                FROM schedule_versions
                WHERE employer_id=%s
                ORDER BY effective_from
                """,
                (int(employer_id),),
            )
            return [
                ScheduleVersion(
                    version_id=int(r["version_id"]),
                    employer_id=int(r["employer_id"]),
                    effective_from=r["effective_from"],
                    effective_to=r.get("effective_to"),
                    description=r.get("description"),
                )
                for r in fetchall(cur)
            ]
