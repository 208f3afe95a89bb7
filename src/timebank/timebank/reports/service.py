from __future__ import annotations

import io
from dataclasses import dataclass
from datetime import date

import pandas as pd

from ..common.datetime_utils import format_minutes
from ..core.exceptions import NotFoundError
from ..cycles.repository import EmployerConfigRepository
from ..periods.calculator import Period, period_for
from ..summary.balance import BalanceService
from ..summary.service import DaySummaryService


@dataclass(frozen=True)
class ReportData:
    employer_id: int
    period: Period
    rows: list[dict]
    totals: dict


def _hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


class ReportService:
    def __init__(
        self,
        summaries: DaySummaryService,
        balances: BalanceService,
        configs: EmployerConfigRepository,
    ):
        self._summaries = summaries
        self._balances = balances
        self._configs = configs

    def build_period_report(self, employer_id: int, *, start: date, end: date) -> ReportData:
        rows: list[dict] = []
        for s in self._summaries.summaries_for_range(employer_id, start, end):
            rows.append(
                {
                    "work_date": s.work_date.strftime("%Y-%m-%d"),
                    "day_type": s.day_type.value,
                    "description": s.description or "",
                    "punches": " ".join(p.considered_time.strftime("%H:%M") for p in s.punches),
                    "worked": _hhmm(s.worked_minutes),
                    "expected": _hhmm(s.expected_minutes),
                    "balance": format_minutes(s.balance_minutes),
                    "balance_minutes": s.balance_minutes,
                    "complete": s.is_complete,
                }
            )

        balance = self._balances.period_balance(employer_id, start, end)
        totals = {
            "worked": _hhmm(balance.worked_minutes),
            "expected": _hhmm(balance.expected_minutes),
            "day_balance": format_minutes(balance.day_balance_minutes),
            "adjustments": format_minutes(balance.adjustment_minutes),
            "balance": balance.balance_label,
            "balance_minutes": balance.balance_minutes,
            "days_worked": balance.days_worked,
        }
        return ReportData(employer_id=employer_id, period=Period(start=start, end=end), rows=rows, totals=totals)

    def build_rh_report(self, employer_id: int, *, reference_date: date) -> ReportData:
        """Report over the RH (payroll) period containing ``reference_date``."""

        config = self._configs.get(employer_id)
        if config is None:
            raise NotFoundError(f"no configuration for employer {employer_id}")
        period = period_for(reference_date, config.rh_period_start_day)
        return self.build_period_report(employer_id, start=period.start, end=period.end)


def export_xlsx(report: ReportData) -> io.BytesIO:
    """Write the report to an in-memory workbook: one sheet of days, one of totals."""

    days = pd.DataFrame(report.rows).drop(columns=["balance_minutes"], errors="ignore")
    totals = pd.DataFrame([{k: v for k, v in report.totals.items() if k != "balance_minutes"}])

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        days.to_excel(writer, index=False, sheet_name="Days")
        totals.to_excel(writer, index=False, sheet_name="Totals")

    output.seek(0)
    return output
