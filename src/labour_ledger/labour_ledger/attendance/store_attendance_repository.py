from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..core.constants import ATTENDANCE_TABLE
from ..core.enums import AttendanceStatus
from ..core.exceptions import DuplicateActiveRecordError, UniqueViolation
from ..store.base import ChangeListener, Condition, OrderBy, RecordStore, Row, Unsubscribe
from .model import Active, AttendanceRecord, Voided
from .repository import AttendanceRepository

_NOT_VOIDED = Condition("status", "neq", AttendanceStatus.VOIDED.value)
CONFLICT_KEY = ("worker_id", "work_date")


def record_from_row(r: Row) -> AttendanceRecord:
    status = AttendanceStatus(r["status"])
    if status == AttendanceStatus.VOIDED:
        previous = r.get("previous_status")
        state = Voided(
            # Rows voided before previous_status existed carry no original status.
            previous_status=AttendanceStatus(previous) if previous else AttendanceStatus.VOIDED,
            voided_at=r.get("voided_at"),
            voided_by=r.get("voided_by") or "",
        )
    else:
        state = Active(status=status)
    return AttendanceRecord(
        record_id=str(r["id"]),
        worker_id=str(r["worker_id"]),
        work_date=r["work_date"],
        state=state,
        wage_calculated=Decimal(r["wage_calculated"]),
        created_at=r.get("created_at"),
    )


class StoreAttendanceRepository(AttendanceRepository):
    def __init__(self, store: RecordStore, *, tenant_id: str):
        self._store = store
        self._tenant_id = tenant_id

    def _scope(self) -> list[Condition]:
        return [Condition("tenant_id", "eq", self._tenant_id)]

    def _to_row(self, record: AttendanceRecord) -> Row:
        return {
            "id": record.record_id,
            "tenant_id": self._tenant_id,
            "worker_id": record.worker_id,
            "work_date": record.work_date,
            "status": record.status.value,
            "wage_calculated": record.wage_calculated,
            "previous_status": record.previous_status.value if record.previous_status else None,
            "voided_at": record.voided_at,
            "voided_by": record.voided_by,
            "created_at": record.created_at,
        }

    async def get(self, record_id: str) -> Optional[AttendanceRecord]:
        rows = await self._store.query(ATTENDANCE_TABLE, [*self._scope(), Condition("id", "eq", record_id)])
        return record_from_row(rows[0]) if rows else None

    async def find_active(self, worker_id: str, work_date: date) -> Optional[AttendanceRecord]:
        rows = await self._store.query(
            ATTENDANCE_TABLE,
            [
                *self._scope(),
                Condition("worker_id", "eq", worker_id),
                Condition("work_date", "eq", work_date),
                _NOT_VOIDED,
            ],
        )
        return record_from_row(rows[0]) if rows else None

    async def list_for_date(self, work_date: date, *, include_voided: bool = False) -> Sequence[AttendanceRecord]:
        conditions = [*self._scope(), Condition("work_date", "eq", work_date)]
        if not include_voided:
            conditions.append(_NOT_VOIDED)
        rows = await self._store.query(ATTENDANCE_TABLE, conditions, [OrderBy("created_at")])
        return [record_from_row(r) for r in rows]

    async def list_in_range(
        self,
        *,
        start_date: date,
        end_date: date,
        worker_id: Optional[str] = None,
        include_voided: bool = False,
    ) -> Sequence[AttendanceRecord]:
        conditions = [
            *self._scope(),
            Condition("work_date", "gte", start_date),
            Condition("work_date", "lte", end_date),
        ]
        if worker_id is not None:
            conditions.append(Condition("worker_id", "eq", worker_id))
        if not include_voided:
            conditions.append(_NOT_VOIDED)
        rows = await self._store.query(
            ATTENDANCE_TABLE,
            conditions,
            [OrderBy("work_date", descending=True), OrderBy("worker_id"), OrderBy("created_at")],
        )
        return [record_from_row(r) for r in rows]

    async def list_active_for_worker(self, worker_id: str) -> Sequence[AttendanceRecord]:
        rows = await self._store.query(
            ATTENDANCE_TABLE,
            [*self._scope(), Condition("worker_id", "eq", worker_id), _NOT_VOIDED],
            [OrderBy("work_date")],
        )
        return [record_from_row(r) for r in rows]

    async def add(self, record: AttendanceRecord) -> AttendanceRecord:
        try:
            row = await self._store.insert(ATTENDANCE_TABLE, self._to_row(record))
        except UniqueViolation:
            raise DuplicateActiveRecordError(
                f"Attendance already marked for worker {record.worker_id} on {record.work_date.isoformat()}"
            )
        return record_from_row(row)

    async def add_many(self, records: Sequence[AttendanceRecord]) -> Sequence[tuple[AttendanceRecord, bool]]:
        if not records:
            return []
        results = await self._store.upsert(ATTENDANCE_TABLE, [self._to_row(r) for r in records], CONFLICT_KEY)
        return [(record_from_row(row), inserted) for row, inserted in results]

    async def mark_voided(
        self,
        record_id: str,
        *,
        previous_status: AttendanceStatus,
        voided_at: datetime,
        voided_by: str,
    ) -> Optional[AttendanceRecord]:
        row = await self._store.update(
            ATTENDANCE_TABLE,
            record_id,
            {
                "status": AttendanceStatus.VOIDED.value,
                "wage_calculated": Decimal("0"),
                "previous_status": previous_status.value,
                "voided_at": voided_at,
                "voided_by": voided_by,
            },
            [*self._scope(), _NOT_VOIDED],
        )
        return record_from_row(row) if row else None

    def subscribe(self, on_change: ChangeListener) -> Unsubscribe:
        def forward(event):
            if event.row.get("tenant_id") != self._tenant_id:
                return None
            return on_change(event)

        return self._store.subscribe(ATTENDANCE_TABLE, forward)
