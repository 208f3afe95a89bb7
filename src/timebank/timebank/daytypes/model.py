from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..core.enums import (
    AbsenceKind,
    DayOffKind,
    DayType,
    HolidayKind,
    HolidayRecurrence,
    HolidayScope,
)


@dataclass(frozen=True)
class Absence:
    """Absence covering ``start_date``..``end_date`` (inclusive)."""

    absence_id: int
    employer_id: int
    kind: AbsenceKind
    start_date: date
    end_date: date
    abatement_minutes: Optional[int] = None
    day_off_kind: Optional[DayOffKind] = None
    note: Optional[str] = None
    active: bool = True

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    @property
    def is_declaration(self) -> bool:
        return self.kind == AbsenceKind.DECLARATION

    @property
    def day_type(self) -> DayType:
        if self.kind == AbsenceKind.DAY_OFF:
            if (self.day_off_kind or DayOffKind.COMPENSATION) == DayOffKind.COMPANY_DAY_OFF:
                return DayType.COMPANY_DAY_OFF
            return DayType.COMPENSATION_DAY_OFF
        return {
            AbsenceKind.VACATION: DayType.VACATION,
            AbsenceKind.SICK_NOTE: DayType.SICK_NOTE,
            AbsenceKind.DECLARATION: DayType.SICK_NOTE,
            AbsenceKind.JUSTIFIED_ABSENCE: DayType.JUSTIFIED_ABSENCE,
            AbsenceKind.UNJUSTIFIED_ABSENCE: DayType.UNJUSTIFIED_ABSENCE,
        }[self.kind]


@dataclass(frozen=True)
class Holiday:
    """Holiday, either annual (month/day) or one-off (exact date)."""

    holiday_id: int
    name: str
    kind: HolidayKind
    recurrence: HolidayRecurrence
    scope: HolidayScope = HolidayScope.GLOBAL
    employer_id: Optional[int] = None
    month: Optional[int] = None
    day: Optional[int] = None
    specific_date: Optional[date] = None
    active: bool = True

    def applies_to(self, employer_id: int) -> bool:
        if not self.active:
            return False
        return self.scope == HolidayScope.GLOBAL or self.employer_id == employer_id

    def occurs_on(self, day: date) -> bool:
        if self.recurrence == HolidayRecurrence.ANNUAL:
            return self.month == day.month and self.day == day.day
        return self.specific_date == day

    @property
    def day_type(self) -> DayType:
        if self.kind == HolidayKind.BRIDGE:
            return DayType.BRIDGE
        if self.kind == HolidayKind.OPTIONAL:
            return DayType.OPTIONAL_HOLIDAY
        return DayType.HOLIDAY


@dataclass(frozen=True)
class DayTypeResolution:
    """Outcome of day-type precedence for one date."""

    work_date: date
    day_type: DayType = DayType.NORMAL
    description: Optional[str] = None
    absences: tuple[Absence, ...] = field(default_factory=tuple)
    holidays: tuple[Holiday, ...] = field(default_factory=tuple)
    abatement_minutes: int = 0

    @property
    def zeroes_expected(self) -> bool:
        return self.day_type.zeroes_expected
