from __future__ import annotations

from datetime import date, timedelta
from typing import Optional, Sequence

from ..adjustments.model import BalanceAdjustment, zeroing_justification
from ..adjustments.repository import AdjustmentRepository
from ..core.constants import CYCLE_SAFETY_LIMIT
from ..core.enums import ClosureType, CycleState
from ..core.exceptions import (
    ConfigurationError,
    DomainError,
    NotFoundError,
    SafetyLimitExceeded,
    StepFailedError,
    ValidationError,
)
from ..core.locks import EmployerLocks
from ..database.unit_of_work import UnitOfWork
from ..logging_config import LogContext, get_logger
from ..periods.calculator import Period
from ..punches.repository import PunchRepository
from ..summary.balance import BalanceService
from .model import Cycle, CycleClosure, EmployerConfig
from .repository import ClosureRepository, EmployerConfigRepository, NotificationSink
from .results import (
    AdvanceResult,
    BootstrapCreated,
    BootstrapNoData,
    BootstrapResult,
    CloseResult,
    CycleActive,
    CycleAdvanced,
    CycleErrored,
    NoCycle,
    PendingDisabled,
    PendingInProgress,
    PendingNearingEnd,
    PendingNoConfig,
    PendingNotConfigured,
    PendingOverdue,
    PendingStatus,
    ReversalResult,
)

logger = get_logger("cycles.service")


class CycleManager:
    """Banked-hours cycle state machine.

    Closing a window writes, in one transaction, the closure record, an
    adjustment of minus the window balance dated on the window's last day, and
    (when the live cycle moves) the employer config. All mutations of an
    employer run under that employer's lock.
    """

    def __init__(
        self,
        configs: EmployerConfigRepository,
        closures: ClosureRepository,
        adjustments: AdjustmentRepository,
        punches: PunchRepository,
        balances: BalanceService,
        unit_of_work: UnitOfWork,
        *,
        locks: EmployerLocks | None = None,
        notifications: NotificationSink | None = None,
        safety_limit: int = CYCLE_SAFETY_LIMIT,
    ):
        self._configs = configs
        self._closures = closures
        self._adjustments = adjustments
        self._punches = punches
        self._balances = balances
        self._uow = unit_of_work
        self._locks = locks or EmployerLocks()
        self._notifications = notifications
        self._safety_limit = int(safety_limit)

    # ------------------------------------------------------------------ helpers

    def _window_balance(self, employer_id: int, window: Period, today: date) -> int:
        """Balance of a window up to today, ignoring the zeroing entries of earlier closures."""

        end = min(window.end, today)
        if end < window.start:
            return 0
        return self._balances.period_balance(
            employer_id,
            window.start,
            end,
            include_adjustments=True,
            exclude_cycle_zeroing=True,
        ).balance_minutes

    def _live_cycle(self, config: EmployerConfig, today: date) -> Cycle:
        window = config.current_window()
        end = min(window.end, today)
        balance = 0
        if end >= window.start:
            balance = self._balances.period_balance(config.employer_id, window.start, end).balance_minutes
        return Cycle(window=window, balance_minutes=balance)

    def _zeroing_adjustments(self, employer_id: int) -> list[BalanceAdjustment]:
        return [a for a in self._adjustments.list_for_employer(employer_id=employer_id) if a.is_cycle_zeroing]

    def _notify(self, closure: CycleClosure) -> None:
        if self._notifications is None:
            return
        try:
            self._notifications.cycle_closed(closure)
        except Exception:
            logger.warning(
                "cycle_notification_failed",
                extra={"employer_id": closure.employer_id, "closure_id": closure.closure_id},
                exc_info=True,
            )

    def _commit_closure(
        self,
        operation: str,
        *,
        employer_id: int,
        window: Period,
        balance: int,
        closure_type: ClosureType,
        note: Optional[str] = None,
        new_config: Optional[EmployerConfig] = None,
        replacing: Sequence[CycleClosure] = (),
        replacing_adjustments: Sequence[BalanceAdjustment] = (),
    ) -> tuple[CycleClosure, Optional[BalanceAdjustment]]:
        closure = CycleClosure(
            closure_id=None,
            employer_id=employer_id,
            period_start=window.start,
            period_end=window.end,
            prior_balance_minutes=balance,
            closure_type=closure_type,
            note=note,
        )
        adjustment = None
        if balance != 0:
            adjustment = BalanceAdjustment(
                adjustment_id=None,
                employer_id=employer_id,
                reference_date=window.end,
                minutes=-balance,
                justification=zeroing_justification(window.start, window.end, balance),
            )

        try:
            with self._uow.begin() as tx:
                for old in replacing:
                    tx.delete_closure(old.closure_id)
                for old_adjustment in replacing_adjustments:
                    tx.delete_adjustment(old_adjustment.adjustment_id)
                closure = tx.insert_closure(closure)
                if adjustment is not None:
                    adjustment = tx.insert_adjustment(adjustment)
                if new_config is not None:
                    tx.save_config(new_config)
        except DomainError:
            raise
        except Exception as exc:
            raise StepFailedError(
                operation,
                employer_id=employer_id,
                step=f"closing {window.start.isoformat()}..{window.end.isoformat()}",
                cause=exc,
            ) from exc

        logger.info(
            "cycle_closed",
            extra={
                "employer_id": employer_id,
                "closure_id": closure.closure_id,
                "period_start": window.start,
                "period_end": window.end,
                "balance_minutes": balance,
                "closure_type": closure_type.value,
            },
        )
        if adjustment is None:
            logger.info(
                "cycle_closed_at_zero",
                extra={"employer_id": employer_id, "closure_id": closure.closure_id, "period_start": window.start, "period_end": window.end},
            )
        self._notify(closure)
        return closure, adjustment

    def _require_config(self, employer_id: int) -> EmployerConfig:
        config = self._configs.get(employer_id)
        if config is None:
            raise NotFoundError(f"no configuration for employer {employer_id}")
        return config

    def _require_cycle(self, employer_id: int) -> EmployerConfig:
        config = self._require_config(employer_id)
        if not config.cycle_enabled:
            raise ConfigurationError(f"banked-hours cycle is disabled for employer {employer_id}")
        if not config.has_cycle_length:
            raise ConfigurationError(f"banked-hours cycle of employer {employer_id} has no cycle length")
        if config.current_cycle_start is None:
            raise ConfigurationError(f"banked-hours cycle of employer {employer_id} has no start date")
        return config

    # --------------------------------------------------------------- operations

    def detect_and_advance(self, employer_id: int, *, today: date | None = None) -> AdvanceResult:
        """Close every window that ended before today, oldest first, then report the live cycle."""

        today = today or date.today()
        with self._locks.hold(employer_id), LogContext.bind(employer_id=employer_id, operation="detect_and_advance"):
            config = self._configs.get(employer_id)
            if config is None:
                logger.warning("cycle_config_missing", extra={"employer_id": employer_id})
                return CycleErrored(employer_id=employer_id, message="employer configuration not found")
            if not config.cycle_enabled:
                return NoCycle(employer_id=employer_id, reason="banked-hours cycle disabled")
            if not config.has_cycle_length:
                return NoCycle(employer_id=employer_id, reason="banked-hours cycle unconfigured: no cycle length")
            if config.current_cycle_start is None:
                logger.warning("cycle_start_missing", extra={"employer_id": employer_id})
                return CycleErrored(employer_id=employer_id, message="cycle enabled without a start date")

            lapsed: list[Period] = []
            start = config.current_cycle_start
            while config.next_start(start) <= today:
                if len(lapsed) >= self._safety_limit:
                    raise SafetyLimitExceeded(
                        f"more than {self._safety_limit} lapsed cycles for employer {employer_id}",
                        employer_id=employer_id,
                        limit=self._safety_limit,
                    )
                lapsed.append(config.window_from(start))
                start = config.next_start(start)

            if not lapsed:
                return CycleActive(config=config, cycle=self._live_cycle(config, today))

            logger.info(
                "cycle_lapse_detected",
                extra={"employer_id": employer_id, "state": CycleState.LAPSE_DETECTED.value, "lapsed": len(lapsed)},
            )
            closed: list[CycleClosure] = []
            for window in lapsed:
                next_config = config.starting_at(window.end + timedelta(days=1))
                closure, _ = self._commit_closure(
                    "detect_and_advance",
                    employer_id=employer_id,
                    window=window,
                    balance=self._window_balance(employer_id, window, today),
                    closure_type=ClosureType.AUTOMATIC,
                    new_config=next_config,
                )
                config = next_config
                closed.append(closure)

            logger.info(
                "cycle_advanced",
                extra={"employer_id": employer_id, "closed": len(closed), "current_cycle_start": config.current_cycle_start},
            )
            return CycleAdvanced(config=config, closed=tuple(closed), cycle=self._live_cycle(config, today))

    def close_current_cycle(self, employer_id: int, *, note: Optional[str] = None, today: date | None = None) -> CloseResult:
        """Close the live cycle early.

        The closed window keeps its configured bounds and the next cycle starts
        on the configured boundary; only the balance is taken as of ``today``.
        """

        today = today or date.today()
        with self._locks.hold(employer_id), LogContext.bind(employer_id=employer_id, operation="close_current_cycle"):
            config = self._require_cycle(employer_id)
            if config.next_start(config.current_cycle_start) <= today:
                self.detect_and_advance(employer_id, today=today)
                config = self._require_cycle(employer_id)

            if today < config.current_cycle_start:
                raise ValidationError("the current cycle has not started yet")

            window = config.current_window()
            next_config = config.starting_at(config.next_start(config.current_cycle_start))
            closure, adjustment = self._commit_closure(
                "close_current_cycle",
                employer_id=employer_id,
                window=window,
                balance=self._window_balance(employer_id, window, today),
                closure_type=ClosureType.MANUAL,
                note=note,
                new_config=next_config,
            )
            return CloseResult(
                closure=closure,
                adjustment=adjustment,
                config=next_config,
                cycle=Cycle(window=next_config.current_window(), balance_minutes=0),
            )

    def bootstrap_retroactive_cycles(
        self,
        employer_id: int,
        *,
        force: bool = False,
        today: date | None = None,
    ) -> BootstrapResult:
        """Synthesize closures for the windows between the first punch and the current cycle start."""

        today = today or date.today()
        with self._locks.hold(employer_id), LogContext.bind(employer_id=employer_id, operation="bootstrap_retroactive_cycles"):
            config = self._configs.get(employer_id)
            if config is None:
                return CycleErrored(employer_id=employer_id, message="employer configuration not found")
            if not config.cycle_enabled:
                return NoCycle(employer_id=employer_id, reason="banked-hours cycle disabled")
            if not config.has_cycle_length:
                return NoCycle(employer_id=employer_id, reason="banked-hours cycle unconfigured: no cycle length")
            if config.current_cycle_start is None:
                return CycleErrored(employer_id=employer_id, message="cycle enabled without a start date")

            first_punch = self._punches.earliest_date(employer_id=employer_id)
            if first_punch is None:
                return BootstrapNoData(employer_id=employer_id)

            windows: list[Period] = []
            start = config.current_cycle_start
            while True:
                previous = config.previous_start(start)
                window = config.window_from(previous)
                if window.end < first_punch:
                    break
                if len(windows) >= self._safety_limit:
                    raise SafetyLimitExceeded(
                        f"more than {self._safety_limit} retroactive cycles for employer {employer_id}",
                        employer_id=employer_id,
                        limit=self._safety_limit,
                    )
                windows.append(window)
                start = previous
            windows.reverse()

            existing = list(self._closures.list_for_employer(employer_id))
            zeroing = self._zeroing_adjustments(employer_id)

            created: list[CycleClosure] = []
            skipped: list[Period] = []
            conflicts: list[Period] = []
            for window in windows:
                exact = [c for c in existing if c.matches(window)]
                overlapping = [c for c in existing if c.overlaps(window) and not c.matches(window)]

                if exact and not force:
                    skipped.append(window)
                    continue
                if overlapping and not force:
                    logger.warning(
                        "retroactive_cycle_conflict",
                        extra={"employer_id": employer_id, "period_start": window.start, "period_end": window.end},
                    )
                    conflicts.append(window)
                    continue

                replacing = exact + overlapping
                if any(not c.closure_type.reversible for c in replacing):
                    conflicts.append(window)
                    continue

                replaced_windows = {(c.period_start, c.period_end) for c in replacing}
                replacing_adjustments = [a for a in zeroing if a.zeroed_window in replaced_windows]

                closure, _ = self._commit_closure(
                    "bootstrap_retroactive_cycles",
                    employer_id=employer_id,
                    window=window,
                    balance=self._window_balance(employer_id, window, today),
                    closure_type=ClosureType.RETROACTIVE,
                    replacing=replacing,
                    replacing_adjustments=replacing_adjustments,
                )
                existing = [c for c in existing if c not in replacing] + [closure]
                zeroing = [a for a in zeroing if a not in replacing_adjustments]
                created.append(closure)
                logger.info(
                    "retroactive_cycle_created",
                    extra={"employer_id": employer_id, "period_start": window.start, "period_end": window.end},
                )

            return BootstrapCreated(
                employer_id=employer_id,
                created=tuple(created),
                skipped=tuple(skipped),
                conflicts=tuple(conflicts),
            )

    def reverse_closures(self, employer_id: int, *, correct_cycle_start: date) -> ReversalResult:
        """Undo automatic/retroactive closures and their zeroing entries; restart the cycle at ``correct_cycle_start``.

        Manual closures and their adjustments stay.
        """

        with self._locks.hold(employer_id), LogContext.bind(employer_id=employer_id, operation="reverse_closures"):
            config = self._require_config(employer_id)
            if not config.has_cycle:
                raise ConfigurationError(f"banked-hours cycle is disabled for employer {employer_id}")

            closures = list(self._closures.list_for_employer(employer_id))
            to_remove = [c for c in closures if c.closure_type.reversible]
            kept_windows = {(c.period_start, c.period_end) for c in closures if not c.closure_type.reversible}
            adjustments = [a for a in self._zeroing_adjustments(employer_id) if a.zeroed_window not in kept_windows]

            new_config = config.starting_at(correct_cycle_start)
            try:
                with self._uow.begin() as tx:
                    for closure in to_remove:
                        tx.delete_closure(closure.closure_id)
                    for adjustment in adjustments:
                        tx.delete_adjustment(adjustment.adjustment_id)
                    tx.save_config(new_config)
            except DomainError:
                raise
            except Exception as exc:
                raise StepFailedError("reverse_closures", employer_id=employer_id, step="removing closures", cause=exc) from exc

            logger.info(
                "closures_reversed",
                extra={
                    "employer_id": employer_id,
                    "closures_removed": len(to_remove),
                    "adjustments_removed": len(adjustments),
                    "current_cycle_start": correct_cycle_start,
                },
            )
            return ReversalResult(
                employer_id=employer_id,
                closures_removed=tuple(to_remove),
                adjustments_removed=tuple(adjustments),
                config=new_config,
            )

    def pending_cycle_status(self, employer_id: int, *, today: date | None = None) -> PendingStatus:
        today = today or date.today()
        config = self._configs.get(employer_id)
        if config is None:
            return PendingNoConfig(employer_id=employer_id)
        if not config.cycle_enabled:
            return PendingDisabled(employer_id=employer_id)
        window = config.current_window()
        if window is None:
            return PendingNotConfigured(employer_id=employer_id)

        if today > window.end:
            return PendingOverdue(
                window=window,
                days_late=(today - window.end).days,
                balance_minutes=self._window_balance(employer_id, window, today),
            )

        days_left = (window.end - today).days
        balance = self._live_cycle(config, today).balance_minutes
        if days_left <= int(config.closure_reminder_days):
            return PendingNearingEnd(window=window, days_left=days_left, balance_minutes=balance)
        return PendingInProgress(window=window, days_left=days_left, balance_minutes=balance)

    def cycle_for_date(self, employer_id: int, day: date, *, today: date | None = None) -> Optional[Cycle]:
        """Closed cycle containing ``day``, else the live cycle when ``day`` falls in it."""

        today = today or date.today()
        for closure in self._closures.list_for_employer(employer_id):
            if closure.window.contains(day):
                return Cycle(window=closure.window, balance_minutes=closure.prior_balance_minutes, closure=closure)

        config = self._require_config(employer_id)
        window = config.current_window() if config.has_cycle else None
        if window is not None and window.contains(day):
            return self._live_cycle(config, today)
        return None
