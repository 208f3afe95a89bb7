from __future__ import annotations

from enum import Enum


class Weekday(str, Enum):
    """Day of week, in ``date.weekday()`` order."""

    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @classmethod
    def of(cls, day) -> "Weekday":
        return list(cls)[day.weekday()]


class ClosureType(str, Enum):
    """How a banked-hours cycle got closed."""

    MANUAL = "MANUAL"
    AUTOMATIC = "AUTOMATIC"
    RETROACTIVE = "RETROACTIVE"

    @property
    def reversible(self) -> bool:
        return self in (ClosureType.AUTOMATIC, ClosureType.RETROACTIVE)


class AbsenceKind(str, Enum):
    """Absence kinds. A declaration only abates part of the day; the others set the day type."""

    VACATION = "VACATION"
    SICK_NOTE = "SICK_NOTE"
    DECLARATION = "DECLARATION"
    JUSTIFIED_ABSENCE = "JUSTIFIED_ABSENCE"
    DAY_OFF = "DAY_OFF"
    UNJUSTIFIED_ABSENCE = "UNJUSTIFIED_ABSENCE"


class DayOffKind(str, Enum):
    """Sub-kind of a day off: granted by the company or paid from the bank."""

    COMPANY_DAY_OFF = "COMPANY_DAY_OFF"
    COMPENSATION = "COMPENSATION"


class HolidayKind(str, Enum):
    NATIONAL = "NATIONAL"
    STATE = "STATE"
    MUNICIPAL = "MUNICIPAL"
    OPTIONAL = "OPTIONAL"
    BRIDGE = "BRIDGE"


class HolidayRecurrence(str, Enum):
    ANNUAL = "ANNUAL"
    ONE_OFF = "ONE_OFF"


class HolidayScope(str, Enum):
    GLOBAL = "GLOBAL"
    EMPLOYER = "EMPLOYER"


class DayType(str, Enum):
    """Resolved classification of a calendar date."""

    NORMAL = "NORMAL"
    HOLIDAY = "HOLIDAY"
    OPTIONAL_HOLIDAY = "OPTIONAL_HOLIDAY"
    BRIDGE = "BRIDGE"
    VACATION = "VACATION"
    SICK_NOTE = "SICK_NOTE"
    JUSTIFIED_ABSENCE = "JUSTIFIED_ABSENCE"
    COMPANY_DAY_OFF = "COMPANY_DAY_OFF"
    COMPENSATION_DAY_OFF = "COMPENSATION_DAY_OFF"
    UNJUSTIFIED_ABSENCE = "UNJUSTIFIED_ABSENCE"

    @property
    def zeroes_expected(self) -> bool:
        return self not in (
            DayType.NORMAL,
            DayType.COMPENSATION_DAY_OFF,
            DayType.UNJUSTIFIED_ABSENCE,
        )


class CycleState(str, Enum):
    """States of the banked-hours cycle machine."""

    NO_CYCLE = "NO_CYCLE"
    ACTIVE = "ACTIVE"
    LAPSE_DETECTED = "LAPSE_DETECTED"
    ERRORED = "ERRORED"
