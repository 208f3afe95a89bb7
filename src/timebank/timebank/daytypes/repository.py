from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence

from .model import Absence, Holiday


class AbsenceRepository(Protocol):
    def list_overlapping(self, *, employer_id: int, start: date, end: date) -> Sequence[Absence]:
        """Active absences of the employer intersecting [start, end]."""

        raise NotImplementedError


class HolidayRepository(Protocol):
    def list_for_employer(self, *, employer_id: int) -> Sequence[Holiday]:
        """Active holidays visible to the employer (global + employer-specific)."""

        raise NotImplementedError
