from __future__ import annotations

from datetime import date, time

from timebank.core.enums import (
    AbsenceKind,
    DayOffKind,
    DayType,
    HolidayKind,
    HolidayRecurrence,
    HolidayScope,
)
from timebank.daytypes.model import Absence, Holiday
from timebank.daytypes.resolver import DayTypeResolver

from fakes import build_engine, work_day

MONDAY = date(2025, 6, 2)
SATURDAY = date(2025, 6, 7)


def _engine():
    engine = build_engine()
    engine.schedules.set_week(1, ideal_entry_time=time(8, 0))
    return engine


def test_full_day_has_zero_balance():
    engine = _engine()
    work_day(engine.punches, 1, MONDAY, "08:00", "12:00", "13:00", "17:00")

    s = engine.summaries.summary_for(1, MONDAY)

    assert s.worked_minutes == 480
    assert s.expected_minutes == 480
    assert s.balance_minutes == 0
    assert s.day_type == DayType.NORMAL


def test_missed_workday_is_a_full_debit():
    s = _engine().summaries.summary_for(1, MONDAY)

    assert s.balance_minutes == -480
    assert s.has_punches is False


def test_non_workday_expects_nothing():
    engine = _engine()
    work_day(engine.punches, 1, SATURDAY, "09:00", "11:00")

    s = engine.summaries.summary_for(1, SATURDAY)

    assert s.expected_minutes == 0
    assert s.balance_minutes == 120


def test_no_schedule_uses_employer_default():
    engine = build_engine()

    assert engine.summaries.summary_for(5, SATURDAY).expected_minutes == 480


def test_open_interval_is_not_counted():
    engine = _engine()
    work_day(engine.punches, 1, MONDAY, "08:00", "12:00", "13:00")

    s = engine.summaries.summary_for(1, MONDAY)

    assert s.worked_minutes == 240
    assert s.is_complete is False


def test_holiday_turns_work_into_overtime():
    engine = _engine()
    engine.holidays.items.append(
        Holiday(holiday_id=1, name="Corpus Christi", kind=HolidayKind.NATIONAL, recurrence=HolidayRecurrence.ONE_OFF, specific_date=MONDAY)
    )
    work_day(engine.punches, 1, MONDAY, "08:00", "10:00")

    s = engine.summaries.summary_for(1, MONDAY)

    assert s.day_type == DayType.HOLIDAY
    assert s.expected_minutes == 0
    assert s.balance_minutes == 120


def test_declaration_abates_expected_minutes():
    engine = _engine()
    engine.absences.items.append(
        Absence(absence_id=1, employer_id=1, kind=AbsenceKind.DECLARATION, start_date=MONDAY, end_date=MONDAY, abatement_minutes=120)
    )
    work_day(engine.punches, 1, MONDAY, "08:00", "14:00")

    s = engine.summaries.summary_for(1, MONDAY)

    assert s.day_type == DayType.NORMAL
    assert s.expected_minutes == 360
    assert s.balance_minutes == 0


def test_compensation_day_off_keeps_expected_debit():
    engine = _engine()
    engine.absences.items.append(
        Absence(
            absence_id=1,
            employer_id=1,
            kind=AbsenceKind.DAY_OFF,
            day_off_kind=DayOffKind.COMPENSATION,
            start_date=MONDAY,
            end_date=MONDAY,
        )
    )

    s = engine.summaries.summary_for(1, MONDAY)

    assert s.day_type == DayType.COMPENSATION_DAY_OFF
    assert s.balance_minutes == -480


def test_absence_beats_holiday():
    resolver = DayTypeResolver()
    holiday = Holiday(holiday_id=1, name="Xmas", kind=HolidayKind.NATIONAL, recurrence=HolidayRecurrence.ANNUAL, month=12, day=25)
    vacation = Absence(
        absence_id=1,
        employer_id=1,
        kind=AbsenceKind.VACATION,
        start_date=date(2025, 12, 20),
        end_date=date(2026, 1, 5),
    )

    r = resolver.resolve(work_date=date(2025, 12, 25), absences=[vacation], holidays=[holiday])

    assert r.day_type == DayType.VACATION
    assert r.zeroes_expected is True


def test_inactive_and_foreign_holidays_are_ignored():
    engine = _engine()
    engine.holidays.items.extend(
        [
            Holiday(holiday_id=1, name="Old", kind=HolidayKind.STATE, recurrence=HolidayRecurrence.ONE_OFF, specific_date=MONDAY, active=False),
            Holiday(
                holiday_id=2,
                name="Other city",
                kind=HolidayKind.MUNICIPAL,
                recurrence=HolidayRecurrence.ONE_OFF,
                scope=HolidayScope.EMPLOYER,
                employer_id=2,
                specific_date=MONDAY,
            ),
        ]
    )

    assert engine.summaries.summary_for(1, MONDAY).day_type == DayType.NORMAL


def test_period_balance_counts_every_calendar_day():
    engine = _engine()
    work_day(engine.punches, 1, MONDAY, "08:00", "12:00", "13:00", "18:00")

    b = engine.balances.period_balance(1, MONDAY, date(2025, 6, 8))

    # Monday +60, Tuesday..Friday missed, weekend free
    assert b.day_balance_minutes == 60 - 4 * 480
    assert b.days_worked == 1
    assert b.expected_minutes == 5 * 480


def test_period_balance_adds_adjustments_when_requested():
    engine = _engine()
    work_day(engine.punches, 1, MONDAY, "08:00", "12:00", "13:00", "17:00")
    engine.ledger.record(1, reference_date=MONDAY, minutes=30, justification="approved overtime", today=MONDAY)

    with_adj = engine.balances.period_balance(1, MONDAY, MONDAY)
    without_adj = engine.balances.period_balance(1, MONDAY, MONDAY, include_adjustments=False)

    assert with_adj.balance_minutes == 30
    assert without_adj.balance_minutes == 0


def test_company_day_off_zeroes_expected():
    engine = _engine()
    engine.absences.items.append(
        Absence(
            absence_id=1,
            employer_id=1,
            kind=AbsenceKind.DAY_OFF,
            day_off_kind=DayOffKind.COMPANY_DAY_OFF,
            start_date=MONDAY,
            end_date=date(2025, 6, 3),
        )
    )

    days = engine.summaries.summaries_for_range(1, MONDAY, date(2025, 6, 3))

    assert [d.day_type for d in days] == [DayType.COMPANY_DAY_OFF, DayType.COMPANY_DAY_OFF]
    assert all(d.balance_minutes == 0 for d in days)


def test_annual_holiday_recurs_every_year():
    holiday = Holiday(holiday_id=1, name="New Year", kind=HolidayKind.NATIONAL, recurrence=HolidayRecurrence.ANNUAL, month=1, day=1)

    assert holiday.occurs_on(date(2024, 1, 1))
    assert holiday.occurs_on(date(2031, 1, 1))
    assert not holiday.occurs_on(date(2031, 1, 2))
