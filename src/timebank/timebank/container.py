from __future__ import annotations

from dataclasses import dataclass

from .adjustments.mysql_adjustment_repository import MySQLAdjustmentRepository
from .adjustments.service import BalanceAdjustmentLedger
from .core.constants import (
    ADJUSTMENT_MAX_MINUTES,
    CYCLE_SAFETY_LIMIT,
    DEFAULT_EXPECTED_MINUTES,
    JUSTIFICATION_MAX_LENGTH,
    JUSTIFICATION_MIN_LENGTH,
)
from .core.locks import EmployerLocks
from .cycles.mysql_cycle_repository import MySQLClosureRepository, MySQLEmployerConfigRepository, MySQLUnitOfWork
from .cycles.service import CycleManager
from .database.connection import DBConfig, DatabaseConnection
from .daytypes.mysql_daytype_repository import MySQLAbsenceRepository, MySQLHolidayRepository
from .punches.mysql_punch_repository import MySQLPunchRepository
from .punches.service import PunchService
from .punches.tolerance import ToleranceEngine
from .reports.service import ReportService
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .summary.balance import BalanceService
from .summary.service import DaySummaryService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    locks: EmployerLocks

    punches_repo: MySQLPunchRepository
    schedules_repo: MySQLScheduleRepository
    absences_repo: MySQLAbsenceRepository
    holidays_repo: MySQLHolidayRepository
    adjustments_repo: MySQLAdjustmentRepository
    configs_repo: MySQLEmployerConfigRepository
    closures_repo: MySQLClosureRepository

    tolerance_engine: ToleranceEngine
    punch_service: PunchService
    day_summary_service: DaySummaryService
    adjustment_ledger: BalanceAdjustmentLedger
    balance_service: BalanceService
    cycle_manager: CycleManager
    report_service: ReportService


def build_container(*, db_config: dict, settings: object | None = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    locks = EmployerLocks()

    punches_repo = MySQLPunchRepository(conn)
    schedules_repo = MySQLScheduleRepository(conn)
    absences_repo = MySQLAbsenceRepository(conn)
    holidays_repo = MySQLHolidayRepository(conn)
    adjustments_repo = MySQLAdjustmentRepository(conn)
    configs_repo = MySQLEmployerConfigRepository(conn)
    closures_repo = MySQLClosureRepository(conn)

    tolerance_engine = ToleranceEngine(schedules_repo)
    punch_service = PunchService(punches_repo, tolerance_engine, locks=locks)
    day_summary_service = DaySummaryService(
        punches_repo,
        schedules_repo,
        absences_repo,
        holidays_repo,
        configs_repo,
        default_expected_minutes=int(getattr(settings, "DEFAULT_EXPECTED_MINUTES", DEFAULT_EXPECTED_MINUTES)),
    )
    adjustment_ledger = BalanceAdjustmentLedger(
        adjustments_repo,
        max_minutes=int(getattr(settings, "ADJUSTMENT_MAX_MINUTES", ADJUSTMENT_MAX_MINUTES)),
        justification_min_length=int(getattr(settings, "JUSTIFICATION_MIN_LENGTH", JUSTIFICATION_MIN_LENGTH)),
        justification_max_length=int(getattr(settings, "JUSTIFICATION_MAX_LENGTH", JUSTIFICATION_MAX_LENGTH)),
        locks=locks,
    )
    balance_service = BalanceService(day_summary_service, adjustment_ledger)
    cycle_manager = CycleManager(
        configs_repo,
        closures_repo,
        adjustments_repo,
        punches_repo,
        balance_service,
        MySQLUnitOfWork(conn),
        locks=locks,
        safety_limit=int(getattr(settings, "CYCLE_SAFETY_LIMIT", CYCLE_SAFETY_LIMIT)),
    )
    report_service = ReportService(day_summary_service, balance_service, configs_repo)

    return Container(
        conn=conn,
        locks=locks,
        punches_repo=punches_repo,
        schedules_repo=schedules_repo,
        absences_repo=absences_repo,
        holidays_repo=holidays_repo,
        adjustments_repo=adjustments_repo,
        configs_repo=configs_repo,
        closures_repo=closures_repo,
        tolerance_engine=tolerance_engine,
        punch_service=punch_service,
        day_summary_service=day_summary_service,
        adjustment_ledger=adjustment_ledger,
        balance_service=balance_service,
        cycle_manager=cycle_manager,
        report_service=report_service,
    )
