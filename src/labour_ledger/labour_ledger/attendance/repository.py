from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from ..store.base import ChangeListener, Unsubscribe
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    async def get(self, record_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    async def find_active(self, worker_id: str, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    async def list_for_date(self, work_date: date, *, include_voided: bool = False) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    async def list_in_range(
        self,
        *,
        start_date: date,
        end_date: date,
        worker_id: Optional[str] = None,
        include_voided: bool = False,
    ) -> Sequence[AttendanceRecord]:
        """Records with start_date <= work_date <= end_date, newest date first."""

        raise NotImplementedError

    async def list_active_for_worker(self, worker_id: str) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    async def add(self, record: AttendanceRecord) -> AttendanceRecord:
        """Persist an active record; raises DuplicateActiveRecordError on a key collision."""

        raise NotImplementedError

    async def add_many(self, records: Sequence[AttendanceRecord]) -> Sequence[tuple[AttendanceRecord, bool]]:
        """Batch insert keyed on (worker_id, work_date).

        Returns ``(record, created)`` pairs; when a key already has an active
        record that record is returned with ``created=False``.
        """

        raise NotImplementedError

    async def mark_voided(
        self,
        record_id: str,
        *,
        previous_status: AttendanceStatus,
        voided_at: datetime,
        voided_by: str,
    ) -> Optional[AttendanceRecord]:
        """Void the record if it is still active; None otherwise."""

        raise NotImplementedError

    def subscribe(self, on_change: ChangeListener) -> Unsubscribe:
        raise NotImplementedError
