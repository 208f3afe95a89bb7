from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import BalanceAdjustment


class AdjustmentRepository(Protocol):
    def insert(self, adjustment: BalanceAdjustment) -> BalanceAdjustment:
        """Store and return the adjustment with its assigned id."""

        raise NotImplementedError

    def get_by_id(self, adjustment_id: int) -> Optional[BalanceAdjustment]:
        raise NotImplementedError

    def list_for_employer(
        self,
        *,
        employer_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[BalanceAdjustment]:
        """Adjustments ordered by reference date, optionally restricted to [start, end]."""

        raise NotImplementedError

    def delete(self, adjustment_id: int) -> bool:
        raise NotImplementedError
