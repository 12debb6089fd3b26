from __future__ import annotations

from flask import Flask, request

from ..common.http import json_response, query_int, require_arg
from ..container import Container
from ..core.constants import DEFAULT_TREND_DAYS


def register(app: Flask, container: Container) -> None:
    reports = container.report_service

    @app.route("/api/reports/daily", methods=["GET"], endpoint="reports_daily")
    async def reports_daily():
        return json_response({"summary": await reports.daily_summary(require_arg("date"))})

    @app.route("/api/reports/monthly", methods=["GET"], endpoint="reports_monthly")
    async def reports_monthly():
        month = require_arg("month")
        total = await reports.monthly_payroll_total(month)
        return json_response({"month": month, "total": total})

    @app.route("/api/reports/workers/<worker_id>", methods=["GET"], endpoint="reports_worker")
    async def reports_worker(worker_id: str):
        summary = await reports.per_worker_summary(worker_id, require_arg("start"), require_arg("end"))
        return json_response({"summary": summary})

    @app.route("/api/reports/trend/attendance", methods=["GET"], endpoint="reports_attendance_trend")
    async def reports_attendance_trend():
        return json_response({"trend": await reports.attendance_trend(query_int("days", DEFAULT_TREND_DAYS))})

    @app.route("/api/reports/trend/cost", methods=["GET"], endpoint="reports_cost_trend")
    async def reports_cost_trend():
        return json_response({"trend": await reports.cost_trend(query_int("days", DEFAULT_TREND_DAYS))})

    @app.route("/api/reports/dashboard", methods=["GET"], endpoint="reports_dashboard")
    async def reports_dashboard():
        return json_response({"stats": await reports.dashboard_stats()})

    @app.route("/api/reports/payroll", methods=["GET"], endpoint="reports_payroll")
    async def reports_payroll():
        report = await reports.payroll_report(
            require_arg("start"),
            require_arg("end"),
            search=request.args.get("search") or None,
        )
        return json_response({"report": report, "rows": report.as_rows()})
