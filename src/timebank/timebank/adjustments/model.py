from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import format_minutes
from ..core.constants import CYCLE_ZEROING_TAG

_ZEROING_PATTERN = re.compile(re.escape(CYCLE_ZEROING_TAG) + r"\s+(\d{4}-\d{2}-\d{2})\.\.(\d{4}-\d{2}-\d{2})")


@dataclass(frozen=True)
class BalanceAdjustment:
    """Signed correction of the banked-hours balance, dated to the day it applies."""

    adjustment_id: Optional[int]
    employer_id: int
    reference_date: date
    minutes: int
    justification: str
    created_at: Optional[datetime] = None

    @property
    def is_cycle_zeroing(self) -> bool:
        return self.justification.startswith(CYCLE_ZEROING_TAG)

    @property
    def zeroed_window(self) -> Optional[tuple[date, date]]:
        return parse_zeroing_window(self.justification)


def zeroing_justification(start: date, end: date, balance_minutes: int) -> str:
    return (
        f"{CYCLE_ZEROING_TAG} {start.isoformat()}..{end.isoformat()} "
        f"cycle closed with balance {format_minutes(balance_minutes)}"
    )


def parse_zeroing_window(justification: str) -> Optional[tuple[date, date]]:
    m = _ZEROING_PATTERN.match(justification or "")
    if not m:
        return None
    return date.fromisoformat(m.group(1)), date.fromisoformat(m.group(2))
