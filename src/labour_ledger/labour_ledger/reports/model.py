from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from ..attendance.model import AttendanceRecord


@dataclass(frozen=True)
class DailySummary:
    work_date: date
    marked: int
    total: int
    pending: int


@dataclass(frozen=True)
class WorkerSummary:
    worker_id: str
    start_date: date
    end_date: date
    present_days: int
    half_days: int
    absent_days: int
    total_wage: Decimal


@dataclass(frozen=True)
class TrendPoint:
    work_date: date
    present_count: int
    total_active: int
    percentage: int


@dataclass(frozen=True)
class CostPoint:
    work_date: date
    cost: Decimal


@dataclass(frozen=True)
class DashboardStats:
    total_workers: int
    active_workers: int
    inactive_workers: int
    present_today: int
    month_cost: Decimal


@dataclass(frozen=True)
class WorkerPayrollRow:
    """Read-model for one worker in the payroll report (export friendly)."""

    worker_id: str
    name: str
    national_id: str
    present_days: int
    half_days: int
    days_worked: Decimal
    total_wage: Decimal
    daily_history: list[AttendanceRecord] = field(default_factory=list)


@dataclass(frozen=True)
class DatePayrollGroup:
    work_date: date
    records: list[AttendanceRecord]
    total_wage: Decimal


@dataclass(frozen=True)
class PayrollReport:
    start_date: date
    end_date: date
    rows: list[WorkerPayrollRow]
    by_date: list[DatePayrollGroup]
    total_wage: Decimal

    def as_rows(self) -> list[dict]:
        """Flat rows with named columns for an external PDF/spreadsheet formatter."""
        return [
            {
                "worker_id": r.worker_id,
                "name": r.name,
                "national_id": r.national_id,
                "present_days": r.present_days,
                "half_days": r.half_days,
                "days_worked": r.days_worked,
                "total_wage": r.total_wage,
                "details": ", ".join(
                    f"{h.work_date.strftime('%d %b')}: {h.status.value}" for h in r.daily_history
                ),
            }
            for r in self.rows
        ]
