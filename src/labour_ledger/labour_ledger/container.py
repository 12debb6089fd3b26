from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.service import AttendanceLedger
from .attendance.store_attendance_repository import StoreAttendanceRepository
from .core.constants import DEFAULT_TIMEZONE
from .database.connection import DBConfig, DatabaseConnection
from .reports.live import DashboardFeed
from .reports.service import ReportService
from .roster.service import RosterService
from .roster.store_worker_repository import StoreCategoryRepository, StoreWorkerRepository
from .store.base import RecordStore
from .store.memory import InMemoryRecordStore
from .store.mysql_store import MySQLRecordStore


@dataclass(frozen=True)
class Container:
    store: RecordStore
    tenant_id: str
    timezone: str

    workers_repo: StoreWorkerRepository
    categories_repo: StoreCategoryRepository
    attendance_repo: StoreAttendanceRepository

    roster_service: RosterService
    ledger: AttendanceLedger
    report_service: ReportService
    dashboard_feed: DashboardFeed


def build_store(*, backend: str, db_config: Optional[dict] = None) -> RecordStore:
    backend = (backend or "mysql").lower()
    if backend == "memory":
        return InMemoryRecordStore()
    if backend == "mysql":
        if not db_config:
            raise ValueError("DB_CONFIG is required for the mysql store backend")
        return MySQLRecordStore(DatabaseConnection.get_instance(DBConfig.from_dict(db_config)))
    raise ValueError(f"Unknown store backend: {backend!r}")


def build_container(
    *,
    db_config: Optional[dict] = None,
    backend: str = "mysql",
    tenant_id: str = "default",
    timezone: str = DEFAULT_TIMEZONE,
    store: Optional[RecordStore] = None,
) -> Container:
    store = store or build_store(backend=backend, db_config=db_config)

    workers_repo = StoreWorkerRepository(store, tenant_id=tenant_id)
    categories_repo = StoreCategoryRepository(store, tenant_id=tenant_id)
    attendance_repo = StoreAttendanceRepository(store, tenant_id=tenant_id)

    roster_service = RosterService(workers_repo, categories_repo, attendance_repo, timezone=timezone)
    ledger = AttendanceLedger(attendance_repo, roster_service, timezone=timezone)
    report_service = ReportService(attendance_repo, roster_service, timezone=timezone)
    dashboard_feed = DashboardFeed(report_service, ledger, roster_service)

    return Container(
        store=store,
        tenant_id=tenant_id,
        timezone=timezone,
        workers_repo=workers_repo,
        categories_repo=categories_repo,
        attendance_repo=attendance_repo,
        roster_service=roster_service,
        ledger=ledger,
        report_service=report_service,
        dashboard_feed=dashboard_feed,
    )
