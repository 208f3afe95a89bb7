from __future__ import annotations

import threading
from datetime import date

import pytest

from timebank.core.enums import ClosureType, CycleState
from timebank.core.exceptions import ConfigurationError, NotFoundError, SafetyLimitExceeded, StepFailedError, ValidationError
from timebank.cycles.model import CycleClosure, EmployerConfig
from timebank.cycles.results import (
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
)

from fakes import RecordingSink, build_engine, work_day


def monthly(start: date | None, **kwargs) -> EmployerConfig:
    return EmployerConfig(employer_id=1, cycle_enabled=True, cycle_length_months=1, current_cycle_start=start, **kwargs)


def _engine(config: EmployerConfig | None = None, **kwargs):
    engine = build_engine(*([config] if config else []), **kwargs)
    # no workdays: every balance is simply the time worked
    engine.schedules.set_week(1, weekdays=())
    return engine


def _april_and_may(engine):
    work_day(engine.punches, 1, date(2025, 4, 7), "08:00", "10:00")
    work_day(engine.punches, 1, date(2025, 5, 12), "08:00", "09:00")
    work_day(engine.punches, 1, date(2025, 6, 2), "08:00", "08:30")


# ------------------------------------------------------------- detect_and_advance


def test_missing_config_is_errored():
    result = _engine().cycles.detect_and_advance(1, today=date(2025, 6, 10))

    assert isinstance(result, CycleErrored)
    assert result.state == CycleState.ERRORED


def test_disabled_cycle_is_no_cycle():
    engine = _engine(EmployerConfig(employer_id=1))

    assert isinstance(engine.cycles.detect_and_advance(1, today=date(2025, 6, 10)), NoCycle)


def test_enabled_without_length_is_reported_unconfigured():
    engine = _engine(EmployerConfig(employer_id=1, cycle_enabled=True, current_cycle_start=date(2025, 6, 1)))

    result = engine.cycles.detect_and_advance(1, today=date(2025, 6, 10))

    assert isinstance(result, NoCycle)
    assert "unconfigured" in result.reason
    assert isinstance(engine.cycles.pending_cycle_status(1, today=date(2025, 6, 10)), PendingNotConfigured)


def test_enabled_without_start_is_errored():
    engine = _engine(monthly(None))

    assert isinstance(engine.cycles.detect_and_advance(1, today=date(2025, 6, 10)), CycleErrored)


def test_active_cycle_reports_live_balance():
    engine = _engine(monthly(date(2025, 6, 1)))
    _april_and_may(engine)

    result = engine.cycles.detect_and_advance(1, today=date(2025, 6, 10))

    assert isinstance(result, CycleActive)
    assert result.cycle.window.end == date(2025, 6, 30)
    assert result.cycle.balance_minutes == 30
    assert engine.closures.rows == {}


def test_lapsed_cycles_close_oldest_first_and_zero_out():
    engine = _engine(monthly(date(2025, 4, 1)))
    _april_and_may(engine)

    result = engine.cycles.detect_and_advance(1, today=date(2025, 6, 10))

    assert isinstance(result, CycleAdvanced)
    assert [(c.period_start, c.period_end) for c in result.closed] == [
        (date(2025, 4, 1), date(2025, 4, 30)),
        (date(2025, 5, 1), date(2025, 5, 31)),
    ]
    assert [c.prior_balance_minutes for c in result.closed] == [120, 60]
    assert all(c.closure_type == ClosureType.AUTOMATIC for c in result.closed)
    assert engine.configs.get(1).current_cycle_start == date(2025, 6, 1)
    assert result.cycle.balance_minutes == 30

    for closure in result.closed:
        closed = engine.balances.period_balance(1, closure.period_start, closure.period_end)
        assert closed.balance_minutes == 0

    zeroing = engine.ledger.list_for(1)
    assert [(a.reference_date, a.minutes) for a in zeroing] == [(date(2025, 4, 30), -120), (date(2025, 5, 31), -60)]
    assert all(a.is_cycle_zeroing for a in zeroing)


def test_zero_balance_window_writes_no_adjustment():
    engine = _engine(monthly(date(2025, 5, 1)))

    result = engine.cycles.detect_and_advance(1, today=date(2025, 6, 1))

    assert result.closed[0].prior_balance_minutes == 0
    assert engine.adjustments.rows == {}


def test_safety_limit_is_fatal_and_writes_nothing():
    engine = _engine(EmployerConfig(employer_id=1, cycle_enabled=True, cycle_length_weeks=1, current_cycle_start=date(2020, 1, 6)))

    with pytest.raises(SafetyLimitExceeded) as exc:
        engine.cycles.detect_and_advance(1, today=date(2025, 6, 10))

    assert exc.value.limit == 20
    assert engine.closures.rows == {}
    assert engine.configs.get(1).current_cycle_start == date(2020, 1, 6)


def test_failed_write_rolls_back_the_whole_step():
    engine = _engine(monthly(date(2025, 5, 1)))
    work_day(engine.punches, 1, date(2025, 5, 12), "08:00", "09:00")
    engine.uow.fail_on = "save_config"

    with pytest.raises(StepFailedError) as exc:
        engine.cycles.detect_and_advance(1, today=date(2025, 6, 10))

    assert isinstance(exc.value.__cause__, RuntimeError)
    assert "2025-05-01..2025-05-31" in str(exc.value)
    assert engine.closures.rows == {}
    assert engine.adjustments.rows == {}
    assert engine.configs.get(1).current_cycle_start == date(2025, 5, 1)


def test_notification_failure_does_not_undo_the_closure():
    sink = RecordingSink(fail=True)
    engine = _engine(monthly(date(2025, 5, 1)), notifications=sink)

    result = engine.cycles.detect_and_advance(1, today=date(2025, 6, 10))

    assert isinstance(result, CycleAdvanced)
    assert len(engine.closures.rows) == 1


def test_notification_sink_receives_each_closure():
    sink = RecordingSink()
    engine = _engine(monthly(date(2025, 4, 1)), notifications=sink)

    engine.cycles.detect_and_advance(1, today=date(2025, 6, 10))

    assert [c.period_start for c in sink.closures] == [date(2025, 4, 1), date(2025, 5, 1)]


def test_concurrent_detection_closes_each_window_once():
    engine = _engine(monthly(date(2025, 4, 1)))
    _april_and_may(engine)
    results = []

    def run():
        results.append(engine.cycles.detect_and_advance(1, today=date(2025, 6, 10)))

    threads = [threading.Thread(target=run) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(engine.closures.rows) == 2
    assert sum(isinstance(r, CycleAdvanced) for r in results) == 1


# ------------------------------------------------------------ close_current_cycle


def test_manual_close_keeps_configured_window_and_restarts_at_zero():
    engine = _engine(monthly(date(2025, 6, 1)))
    work_day(engine.punches, 1, date(2025, 6, 2), "08:00", "10:00")

    result = engine.cycles.close_current_cycle(1, note="contract change", today=date(2025, 6, 10))

    assert result.closure.closure_type == ClosureType.MANUAL
    assert (result.closure.period_start, result.closure.period_end) == (date(2025, 6, 1), date(2025, 6, 30))
    assert result.closure.prior_balance_minutes == 120
    assert result.adjustment.minutes == -120
    assert result.adjustment.reference_date == date(2025, 6, 30)
    assert result.config.current_cycle_start == date(2025, 7, 1)
    assert (result.cycle.window.start, result.cycle.window.end) == (date(2025, 7, 1), date(2025, 7, 31))
    assert result.cycle.balance_minutes == 0
    assert engine.uow.commits == 1


def test_manual_close_advances_lapsed_windows_first():
    engine = _engine(monthly(date(2025, 5, 1)))

    result = engine.cycles.close_current_cycle(1, today=date(2025, 6, 10))

    types = [c.closure_type for c in engine.closures.list_for_employer(1)]
    assert types == [ClosureType.AUTOMATIC, ClosureType.MANUAL]
    assert result.closure.period_start == date(2025, 6, 1)


def test_manual_close_keeps_cycles_on_the_configured_boundaries():
    engine = _engine(monthly(date(2025, 6, 1)))

    engine.cycles.close_current_cycle(1, today=date(2025, 6, 10))
    engine.cycles.detect_and_advance(1, today=date(2025, 8, 5))

    windows = [(c.period_start, c.period_end) for c in engine.closures.list_for_employer(1)]
    assert windows == [
        (date(2025, 6, 1), date(2025, 6, 30)),
        (date(2025, 7, 1), date(2025, 7, 31)),
    ]
    config = engine.configs.get(1)
    assert config.current_cycle_start == date(2025, 8, 1)
    assert config.next_start(config.current_cycle_start) == date(2025, 9, 1)


def test_manual_close_of_a_weekly_cycle_restarts_on_the_next_week():
    engine = _engine(EmployerConfig(employer_id=1, cycle_enabled=True, cycle_length_weeks=2, current_cycle_start=date(2025, 6, 2)))

    result = engine.cycles.close_current_cycle(1, today=date(2025, 6, 4))

    assert (result.closure.period_start, result.closure.period_end) == (date(2025, 6, 2), date(2025, 6, 15))
    assert result.config.current_cycle_start == date(2025, 6, 16)


def test_manual_close_refuses_without_cycle():
    with pytest.raises(NotFoundError):
        _engine().cycles.close_current_cycle(1, today=date(2025, 6, 10))
    with pytest.raises(ConfigurationError):
        _engine(EmployerConfig(employer_id=1)).cycles.close_current_cycle(1, today=date(2025, 6, 10))
    with pytest.raises(ConfigurationError):
        _engine(monthly(None)).cycles.close_current_cycle(1, today=date(2025, 6, 10))


def test_manual_close_before_cycle_start():
    engine = _engine(monthly(date(2025, 7, 1)))

    with pytest.raises(ValidationError):
        engine.cycles.close_current_cycle(1, today=date(2025, 6, 10))


# ----------------------------------------------------- bootstrap_retroactive_cycles


def _semester_engine():
    config = EmployerConfig(employer_id=1, cycle_enabled=True, cycle_length_months=6, current_cycle_start=date(2026, 2, 11))
    engine = _engine(config)
    work_day(engine.punches, 1, date(2025, 3, 15), "08:00", "12:00")
    work_day(engine.punches, 1, date(2025, 9, 1), "08:00", "09:00")
    return engine


def test_bootstrap_creates_windows_back_to_first_punch():
    engine = _semester_engine()

    result = engine.cycles.bootstrap_retroactive_cycles(1, today=date(2026, 2, 20))

    assert result.count == 2
    assert [(c.period_start, c.period_end) for c in result.created] == [
        (date(2025, 2, 11), date(2025, 8, 10)),
        (date(2025, 8, 11), date(2026, 2, 10)),
    ]
    assert [c.prior_balance_minutes for c in result.created] == [240, 60]
    assert all(c.closure_type == ClosureType.RETROACTIVE for c in result.created)
    assert engine.configs.get(1).current_cycle_start == date(2026, 2, 11)


def test_bootstrap_skips_existing_windows_unless_forced():
    engine = _semester_engine()
    engine.cycles.bootstrap_retroactive_cycles(1, today=date(2026, 2, 20))

    again = engine.cycles.bootstrap_retroactive_cycles(1, today=date(2026, 2, 20))
    forced = engine.cycles.bootstrap_retroactive_cycles(1, force=True, today=date(2026, 2, 20))

    assert again.count == 0
    assert len(again.skipped) == 2
    assert forced.count == 2
    assert len(engine.closures.rows) == 2
    assert len(engine.adjustments.rows) == 2


def test_bootstrap_reports_overlap_with_manual_closure():
    engine = _semester_engine()
    engine.closures.rows[99] = CycleClosure(
        closure_id=99,
        employer_id=1,
        period_start=date(2025, 5, 1),
        period_end=date(2025, 5, 31),
        prior_balance_minutes=0,
        closure_type=ClosureType.MANUAL,
    )

    result = engine.cycles.bootstrap_retroactive_cycles(1, force=True, today=date(2026, 2, 20))

    assert [w.start for w in result.conflicts] == [date(2025, 2, 11)]
    assert result.count == 1
    assert 99 in engine.closures.rows


def test_bootstrap_without_punches_reports_no_data():
    config = EmployerConfig(employer_id=1, cycle_enabled=True, cycle_length_months=6, current_cycle_start=date(2026, 2, 11))

    result = _engine(config).cycles.bootstrap_retroactive_cycles(1, today=date(2026, 2, 20))

    assert type(result).__name__ == "BootstrapNoData"


# ------------------------------------------------------------------ reverse_closures


def test_reverse_then_advance_restores_live_balance():
    engine = _engine(monthly(date(2025, 4, 1)))
    _april_and_may(engine)
    before = engine.cycles.detect_and_advance(1, today=date(2025, 6, 10))

    reversal = engine.cycles.reverse_closures(1, correct_cycle_start=date(2025, 4, 1))

    assert len(reversal.closures_removed) == 2
    assert len(reversal.adjustments_removed) == 2
    assert engine.closures.rows == {}
    assert engine.configs.get(1).current_cycle_start == date(2025, 4, 1)

    after = engine.cycles.detect_and_advance(1, today=date(2025, 6, 10))
    assert after.cycle.balance_minutes == before.cycle.balance_minutes
    assert [c.prior_balance_minutes for c in after.closed] == [120, 60]


def test_reverse_keeps_manual_closures_and_unrelated_adjustments():
    engine = _engine(monthly(date(2025, 5, 1)))
    work_day(engine.punches, 1, date(2025, 5, 12), "08:00", "09:00")
    engine.cycles.detect_and_advance(1, today=date(2025, 6, 10))
    engine.cycles.close_current_cycle(1, today=date(2025, 6, 10))
    work_day(engine.punches, 1, date(2025, 6, 5), "08:00", "09:00")
    engine.ledger.record(1, reference_date=date(2025, 6, 5), minutes=15, justification="approved by manager", today=date(2025, 6, 10))

    reversal = engine.cycles.reverse_closures(1, correct_cycle_start=date(2025, 5, 1))

    assert [c.closure_type for c in reversal.closures_removed] == [ClosureType.AUTOMATIC]
    assert [c.closure_type for c in engine.closures.list_for_employer(1)] == [ClosureType.MANUAL]
    assert any(not a.is_cycle_zeroing for a in engine.ledger.list_for(1))


def test_reverse_requires_enabled_cycle():
    with pytest.raises(ConfigurationError):
        _engine(EmployerConfig(employer_id=1)).cycles.reverse_closures(1, correct_cycle_start=date(2025, 1, 1))


# -------------------------------------------------------------- pending + queries


def test_pending_status_variants():
    assert isinstance(_engine().cycles.pending_cycle_status(1), PendingNoConfig)
    assert isinstance(_engine(EmployerConfig(employer_id=1)).cycles.pending_cycle_status(1), PendingDisabled)
    assert isinstance(_engine(monthly(None)).cycles.pending_cycle_status(1), PendingNotConfigured)


def test_pending_overdue():
    engine = _engine(monthly(date(2025, 5, 1)))
    work_day(engine.punches, 1, date(2025, 5, 12), "08:00", "09:00")

    status = engine.cycles.pending_cycle_status(1, today=date(2025, 6, 3))

    assert isinstance(status, PendingOverdue)
    assert status.days_late == 3
    assert status.balance_minutes == 60


@pytest.mark.parametrize(
    "today, expected_type, days_left",
    [
        (date(2025, 6, 27), PendingNearingEnd, 3),
        (date(2025, 6, 30), PendingNearingEnd, 0),
        (date(2025, 6, 10), PendingInProgress, 20),
    ],
)
def test_pending_days_left(today, expected_type, days_left):
    status = _engine(monthly(date(2025, 6, 1))).cycles.pending_cycle_status(1, today=today)

    assert isinstance(status, expected_type)
    assert status.days_left == days_left


def test_cycle_for_date():
    engine = _engine(monthly(date(2025, 4, 1)))
    _april_and_may(engine)
    engine.cycles.detect_and_advance(1, today=date(2025, 6, 10))

    past = engine.cycles.cycle_for_date(1, date(2025, 4, 15), today=date(2025, 6, 10))
    live = engine.cycles.cycle_for_date(1, date(2025, 6, 5), today=date(2025, 6, 10))

    assert past.is_closed and past.balance_minutes == 120
    assert not live.is_closed and live.balance_minutes == 30
    assert engine.cycles.cycle_for_date(1, date(2025, 3, 1), today=date(2025, 6, 10)) is None


def test_manual_adjustment_waits_for_a_running_closure():
    engine = _engine(monthly(date(2025, 5, 1)))
    work_day(engine.punches, 1, date(2025, 5, 12), "08:00", "09:00")
    read_balance = engine.balances.period_balance
    writer_blocked = []

    def record_late_entry():
        engine.ledger.record(
            1, reference_date=date(2025, 5, 20), minutes=30, justification="overtime approved late", today=date(2025, 6, 10)
        )

    def balance_with_concurrent_write(*args, **kwargs):
        if not writer_blocked:
            writer = threading.Thread(target=record_late_entry)
            writer.start()
            writer.join(timeout=0.2)
            writer_blocked.append((writer, writer.is_alive()))
        return read_balance(*args, **kwargs)

    engine.balances.period_balance = balance_with_concurrent_write
    engine.cycles.detect_and_advance(1, today=date(2025, 6, 10))
    writer, was_blocked = writer_blocked[0]
    writer.join()

    assert was_blocked is True
    (closure,) = engine.closures.list_for_employer(1)
    assert closure.prior_balance_minutes == 60
    zeroing, late = sorted(engine.adjustments.rows.values(), key=lambda a: a.adjustment_id)
    assert zeroing.is_cycle_zeroing and zeroing.minutes == -60
    assert late.minutes == 30 and not late.is_cycle_zeroing
