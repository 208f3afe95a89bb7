from __future__ import annotations

from typing import TYPE_CHECKING, ContextManager, Protocol

if TYPE_CHECKING:
    from ..adjustments.model import BalanceAdjustment
    from ..cycles.model import CycleClosure, EmployerConfig


class CycleTransaction(Protocol):
    """Writes of one cycle step; all of them land or none does."""

    def insert_closure(self, closure: "CycleClosure") -> "CycleClosure":
        raise NotImplementedError

    def delete_closure(self, closure_id: int) -> bool:
        raise NotImplementedError

    def insert_adjustment(self, adjustment: "BalanceAdjustment") -> "BalanceAdjustment":
        raise NotImplementedError

    def delete_adjustment(self, adjustment_id: int) -> bool:
        raise NotImplementedError

    def save_config(self, config: "EmployerConfig") -> None:
        raise NotImplementedError


class UnitOfWork(Protocol):
    def begin(self) -> ContextManager[CycleTransaction]:
        """Open a transaction; commit on clean exit, roll back when an exception escapes."""

        raise NotImplementedError
