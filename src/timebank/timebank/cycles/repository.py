from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import CycleClosure, EmployerConfig


class EmployerConfigRepository(Protocol):
    def get(self, employer_id: int) -> Optional[EmployerConfig]:
        raise NotImplementedError

    def save(self, config: EmployerConfig) -> None:
        raise NotImplementedError

    def list_cycle_enabled(self) -> Sequence[int]:
        """Employer ids with banked-hours cycling switched on."""

        raise NotImplementedError


class ClosureRepository(Protocol):
    def list_for_employer(self, employer_id: int) -> Sequence[CycleClosure]:
        """Closures ordered by period start."""

        raise NotImplementedError


class NotificationSink(Protocol):
    def cycle_closed(self, closure: CycleClosure) -> None:
        raise NotImplementedError
