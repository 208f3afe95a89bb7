from __future__ import annotations

from datetime import date
from typing import Iterable

from ..core.enums import DayType
from .model import Absence, DayTypeResolution, Holiday


class DayTypeResolver:
    """Precedence: non-declaration absence > holiday > normal day.

    Declarations never change the day type; they only add abatement minutes.
    """

    def resolve(self, *, work_date: date, absences: Iterable[Absence], holidays: Iterable[Holiday]) -> DayTypeResolution:
        day_absences = tuple(a for a in absences if a.active and a.covers(work_date))
        day_holidays = tuple(h for h in holidays if h.active and h.occurs_on(work_date))

        abatement = sum(int(a.abatement_minutes or 0) for a in day_absences if a.is_declaration)

        main_absence = next((a for a in day_absences if not a.is_declaration), None)
        if main_absence is not None:
            description = main_absence.kind.value.replace("_", " ").title()
            if main_absence.note:
                description = f"{description} - {main_absence.note}"
            return DayTypeResolution(
                work_date=work_date,
                day_type=main_absence.day_type,
                description=description,
                absences=day_absences,
                holidays=day_holidays,
                abatement_minutes=abatement,
            )

        if day_holidays:
            holiday = day_holidays[0]
            return DayTypeResolution(
                work_date=work_date,
                day_type=holiday.day_type,
                description=holiday.name,
                absences=day_absences,
                holidays=day_holidays,
                abatement_minutes=abatement,
            )

        return DayTypeResolution(
            work_date=work_date,
            day_type=DayType.NORMAL,
            absences=day_absences,
            holidays=day_holidays,
            abatement_minutes=abatement,
        )
