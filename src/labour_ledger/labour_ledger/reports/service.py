from __future__ import annotations

from collections import defaultdict
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import coerce_date, iter_days, month_bounds, parse_year_month, today_local
from ..common.validators import require_date_range
from ..core.constants import DEFAULT_TIMEZONE, DEFAULT_TREND_DAYS
from ..core.enums import AttendanceStatus, WorkerStatus
from ..core.exceptions import ValidationError
from ..roster.repository import RosterProvider
from .model import (
    CostPoint,
    DailySummary,
    DashboardStats,
    DatePayrollGroup,
    PayrollReport,
    TrendPoint,
    WorkerPayrollRow,
    WorkerSummary,
)

_ZERO = Decimal("0")
_HALF = Decimal("0.5")
_WORKED = (AttendanceStatus.PRESENT, AttendanceStatus.HALF_DAY)


def _sum_wages(records) -> Decimal:
    return sum((r.wage_calculated for r in records), _ZERO)


def _percentage(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return int((Decimal(part) * 100 / Decimal(whole)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


class ReportService:
    """Read-only aggregation over the ledger and the roster.

    Each call reads its candidate records with a single query and derives all
    grouped figures in memory, so one result never mixes two ledger states.
    """

    def __init__(self, attendance: AttendanceRepository, roster: RosterProvider, *, timezone: str = DEFAULT_TIMEZONE):
        self._attendance = attendance
        self._roster = roster
        self._tz = timezone

    def _today(self, today: Optional[date]) -> date:
        return today or today_local(self._tz)

    async def _active_worker_count(self) -> int:
        return len(await self._roster.list_workers(status=WorkerStatus.ACTIVE))

    async def daily_summary(self, work_date: Union[date, str]) -> DailySummary:
        work_date = coerce_date(work_date)
        total = await self._active_worker_count()
        marked = len(await self._attendance.list_for_date(work_date))
        return DailySummary(work_date=work_date, marked=marked, total=total, pending=max(total - marked, 0))

    async def monthly_payroll_total(self, year_month: Union[str, tuple[int, int]]) -> Decimal:
        start, end = month_bounds(*parse_year_month(year_month))
        return _sum_wages(await self._attendance.list_in_range(start_date=start, end_date=end))

    async def per_worker_summary(
        self,
        worker_id: str,
        start_date: Union[date, str],
        end_date: Union[date, str],
    ) -> WorkerSummary:
        start, end = coerce_date(start_date), coerce_date(end_date)
        if start > end:
            raise ValidationError("Start date must be before or equal to end date")
        await self._roster.get_worker(worker_id)

        records = await self._attendance.list_in_range(start_date=start, end_date=end, worker_id=worker_id)
        counts = defaultdict(int)
        for r in records:
            counts[r.status] += 1
        return WorkerSummary(
            worker_id=worker_id,
            start_date=start,
            end_date=end,
            present_days=counts[AttendanceStatus.PRESENT],
            half_days=counts[AttendanceStatus.HALF_DAY],
            absent_days=counts[AttendanceStatus.ABSENT],
            total_wage=_sum_wages(records),
        )

    async def _window(self, days: int, today: Optional[date]) -> tuple[date, date, list[AttendanceRecord]]:
        if int(days) < 1:
            raise ValidationError("days must be at least 1")
        end = self._today(today)
        start = end - timedelta(days=int(days) - 1)
        records = await self._attendance.list_in_range(start_date=start, end_date=end)
        return start, end, list(records)

    async def attendance_trend(self, days: int = DEFAULT_TREND_DAYS, *, today: Optional[date] = None) -> list[TrendPoint]:
        start, end, records = await self._window(days, today)
        total_active = await self._active_worker_count()

        worked: dict[date, set[str]] = defaultdict(set)
        for r in records:
            if r.status in _WORKED:
                worked[r.work_date].add(r.worker_id)

        return [
            TrendPoint(
                work_date=day,
                present_count=len(worked[day]),
                total_active=total_active,
                percentage=_percentage(len(worked[day]), total_active),
            )
            for day in iter_days(start, end)
        ]

    async def cost_trend(self, days: int = DEFAULT_TREND_DAYS, *, today: Optional[date] = None) -> list[CostPoint]:
        start, end, records = await self._window(days, today)
        cost: dict[date, Decimal] = defaultdict(lambda: _ZERO)
        for r in records:
            cost[r.work_date] += r.wage_calculated
        return [CostPoint(work_date=day, cost=cost[day]) for day in iter_days(start, end)]

    async def dashboard_stats(self, *, today: Optional[date] = None) -> DashboardStats:
        today = self._today(today)
        workers = await self._roster.list_workers()
        month_start, month_end = month_bounds(today.year, today.month)
        records = await self._attendance.list_in_range(start_date=month_start, end_date=month_end)

        active = sum(1 for w in workers if w.is_active)
        return DashboardStats(
            total_workers=len(workers),
            active_workers=active,
            inactive_workers=len(workers) - active,
            present_today=sum(1 for r in records if r.work_date == today and r.status == AttendanceStatus.PRESENT),
            month_cost=_sum_wages(records),
        )

    async def payroll_report(
        self,
        start_date: Union[date, str],
        end_date: Union[date, str],
        *,
        search: Optional[str] = None,
    ) -> PayrollReport:
        start, end = coerce_date(start_date), coerce_date(end_date)
        require_date_range(start, end)

        workers = await self._roster.list_workers(search=search)
        records = await self._attendance.list_in_range(start_date=start, end_date=end)

        by_worker: dict[str, list[AttendanceRecord]] = defaultdict(list)
        for r in records:
            by_worker[r.worker_id].append(r)

        rows: list[WorkerPayrollRow] = []
        for w in workers:
            history = by_worker.get(w.worker_id, [])
            present = sum(1 for r in history if r.status == AttendanceStatus.PRESENT)
            half = sum(1 for r in history if r.status == AttendanceStatus.HALF_DAY)
            rows.append(
                WorkerPayrollRow(
                    worker_id=w.worker_id,
                    name=w.name,
                    national_id=w.national_id,
                    present_days=present,
                    half_days=half,
                    days_worked=Decimal(present) + Decimal(half) * _HALF,
                    total_wage=_sum_wages(history),
                    daily_history=list(history),
                )
            )

        included = {w.worker_id for w in workers}
        groups: dict[date, list[AttendanceRecord]] = defaultdict(list)
        for r in records:
            if r.worker_id in included:
                groups[r.work_date].append(r)
        by_date = [
            DatePayrollGroup(work_date=day, records=groups[day], total_wage=_sum_wages(groups[day]))
            for day in sorted(groups, reverse=True)
        ]

        return PayrollReport(
            start_date=start,
            end_date=end,
            rows=rows,
            by_date=by_date,
            total_wage=sum((r.total_wage for r in rows), _ZERO),
        )
