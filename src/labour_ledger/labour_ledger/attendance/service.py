from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from typing import Callable, Iterable, Union

from ..common.datetime_utils import coerce_date, now_local, today_local
from ..core.constants import DEFAULT_TIMEZONE
from ..core.enums import AttendanceStatus
from ..core.exceptions import (
    AlreadyVoidedError,
    BulkMarkError,
    DomainError,
    DuplicateActiveRecordError,
    FutureDateError,
    InvalidStatus,
    NotFoundError,
    UniqueViolation,
    ValidationError,
)
from ..payroll.calculator.base import WageCalculator
from ..payroll.calculator.standard_calculator import StandardWageCalculator, coerce_status
from ..roster.model import Worker
from ..roster.repository import RosterProvider
from ..store.base import ChangeListener, Unsubscribe
from .model import Active, AttendanceRecord, BulkEntry, BulkMarkResult, EntryFailure
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

EntryLike = Union[BulkEntry, tuple[str, Union[AttendanceStatus, str]]]


def _new_id() -> str:
    return str(uuid.uuid4())


class AttendanceLedger:
    """Use case: record, void and query attendance.

    Guarantees at most one non-voided record per (worker, date); voided
    records are kept for audit. ``today``/``now`` default to the tenant's
    local clock but can be passed explicitly.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        roster: RosterProvider,
        *,
        calculator: WageCalculator | None = None,
        timezone: str = DEFAULT_TIMEZONE,
        id_factory: Callable[[], str] = _new_id,
    ):
        self._attendance = attendance
        self._roster = roster
        self._calculator = calculator or StandardWageCalculator()
        self._tz = timezone
        self._new_id = id_factory

    @staticmethod
    def _require_active_status(status: Union[AttendanceStatus, str]) -> AttendanceStatus:
        status = coerce_status(status)
        if status == AttendanceStatus.VOIDED:
            raise InvalidStatus("Attendance cannot be marked as voided; void an existing record instead")
        return status

    @staticmethod
    def _require_not_future(work_date: date, today: date) -> None:
        if work_date > today:
            raise FutureDateError(
                f"Cannot mark attendance for a future date ({work_date.isoformat()})",
                errors={"date": "Attendance date cannot be in the future"},
            )

    def _new_record(self, worker: Worker, work_date: date, status: AttendanceStatus, now: datetime) -> AttendanceRecord:
        return AttendanceRecord(
            record_id=self._new_id(),
            worker_id=worker.worker_id,
            work_date=work_date,
            state=Active(status=status),
            wage_calculated=self._calculator.compute_wage(worker.daily_wage, status),
            created_at=now,
        )

    async def mark_attendance(
        self,
        worker_id: str,
        work_date: Union[date, str],
        status: Union[AttendanceStatus, str],
        *,
        today: date | None = None,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        work_date = coerce_date(work_date)
        status = self._require_active_status(status)
        self._require_not_future(work_date, today or today_local(self._tz))

        worker = await self._roster.get_worker(worker_id)
        existing = await self._attendance.find_active(worker.worker_id, work_date)
        if existing:
            raise DuplicateActiveRecordError(
                f"Attendance already marked for worker {worker_id} on {work_date.isoformat()}; void it first"
            )

        record = await self._attendance.add(
            self._new_record(worker, work_date, status, now or now_local(self._tz))
        )
        logger.info(
            "Marked worker %s %s on %s (wage %s)",
            worker_id, status.value, work_date.isoformat(), record.wage_calculated,
        )
        return record

    async def bulk_mark_attendance(
        self,
        work_date: Union[date, str],
        entries: Iterable[EntryLike],
        *,
        today: date | None = None,
        now: datetime | None = None,
    ) -> BulkMarkResult:
        """Mark many workers for one date as a single batch.

        Nothing is written when any entry fails validation; the raised
        BulkMarkError reports every failure and the entries that were
        skipped. Re-running a batch leaves already-marked entries unchanged.
        """

        work_date = coerce_date(work_date)
        self._require_not_future(work_date, today or today_local(self._tz))
        now = now or now_local(self._tz)

        result = BulkMarkResult(work_date=work_date)
        normalized: list[BulkEntry] = []
        for raw in entries:
            entry = raw if isinstance(raw, BulkEntry) else BulkEntry(worker_id=str(raw[0]), status=raw[1])
            normalized.append(entry)

        workers = {w.worker_id: w for w in await self._roster.list_workers()}
        active_by_worker = {r.worker_id: r for r in await self._attendance.list_for_date(work_date)}

        pending: list[tuple[BulkEntry, AttendanceRecord]] = []
        # Same-status repeats of a pending entry; they share its outcome.
        repeats: list[tuple[BulkEntry, AttendanceStatus]] = []
        seen: dict[str, AttendanceStatus] = {}
        for entry in normalized:
            try:
                status = self._require_active_status(entry.status)
                worker = workers.get(entry.worker_id)
                if worker is None:
                    raise NotFoundError(f"Worker {entry.worker_id} not found")
                if entry.worker_id in seen:
                    if seen[entry.worker_id] != status:
                        raise DuplicateActiveRecordError(
                            f"Worker {entry.worker_id} appears twice in the batch with different statuses"
                        )
                    existing = active_by_worker.get(entry.worker_id)
                    if existing is not None:
                        result.unchanged.append(existing)
                    else:
                        repeats.append((entry, status))
                    continue

                existing = active_by_worker.get(entry.worker_id)
                if existing is not None and existing.status != status:
                    raise DuplicateActiveRecordError(
                        f"Attendance already marked {existing.status.value} for worker "
                        f"{entry.worker_id} on {work_date.isoformat()}; void it first"
                    )
                seen[entry.worker_id] = status
                if existing is not None:
                    result.unchanged.append(existing)
                    continue
                pending.append((entry, self._new_record(worker, work_date, status, now)))
            except DomainError as exc:
                result.failures.append(EntryFailure(entry=entry, error=exc))

        if result.failures:
            result.skipped = [entry for entry, _ in pending] + [entry for entry, _ in repeats]
            logger.warning(
                "Bulk mark for %s aborted: %d failure(s), %d entry(ies) skipped",
                work_date.isoformat(), len(result.failures), len(result.skipped),
            )
            raise BulkMarkError(self._failure_message(result), result=result)

        try:
            saved = await self._attendance.add_many([record for _, record in pending])
        except UniqueViolation as exc:
            # The store rolled the batch back.
            result.failures = [
                EntryFailure(entry=entry, error=DuplicateActiveRecordError(str(exc)))
                for entry in [e for e, _ in pending] + [e for e, _ in repeats]
            ]
            raise BulkMarkError(self._failure_message(result), result=result)

        written: dict[str, AttendanceRecord] = {}
        for (entry, requested), (record, created) in zip(pending, saved):
            written[entry.worker_id] = record
            if created:
                result.created.append(record)
            elif record.status == requested.status:
                result.unchanged.append(record)
            else:
                result.failures.append(EntryFailure(entry=entry, error=self._concurrent_mark(entry, record)))

        for entry, status in repeats:
            record = written[entry.worker_id]
            if record.status == status:
                result.unchanged.append(record)
            else:
                result.failures.append(EntryFailure(entry=entry, error=self._concurrent_mark(entry, record)))

        logger.info(
            "Bulk marked %s: %d created, %d unchanged, %d failed",
            work_date.isoformat(), len(result.created), len(result.unchanged), len(result.failures),
        )
        if result.failures:
            raise BulkMarkError(self._failure_message(result), result=result)
        return result

    @staticmethod
    def _concurrent_mark(entry: BulkEntry, record: AttendanceRecord) -> DuplicateActiveRecordError:
        return DuplicateActiveRecordError(
            f"Attendance for worker {entry.worker_id} was marked {record.status.value} concurrently"
        )

    @staticmethod
    def _failure_message(result: BulkMarkResult) -> str:
        first = result.failures[0]
        return f"Bulk mark failed for {len(result.failures)} entry(ies); first: worker {first.entry.worker_id}: {first.error}"

    async def void_record(self, record_id: str, actor_id: str, *, now: datetime | None = None) -> AttendanceRecord:
        if not actor_id or not str(actor_id).strip():
            raise ValidationError("Actor is required to void a record", errors={"actor_id": "Actor is required"})

        record = await self._attendance.get(record_id)
        if record is None:
            raise NotFoundError(f"Attendance record {record_id} not found")
        if record.is_voided:
            raise AlreadyVoidedError(f"Attendance record {record_id} is already voided")

        voided = await self._attendance.mark_voided(
            record_id,
            previous_status=record.status,
            voided_at=now or now_local(self._tz),
            voided_by=str(actor_id).strip(),
        )
        if voided is None:
            raise AlreadyVoidedError(f"Attendance record {record_id} is already voided")
        logger.info("Voided record %s (was %s) by %s", record_id, record.status.value, actor_id)
        return voided

    async def edit_attendance(
        self,
        record_id: str,
        status: Union[AttendanceStatus, str],
        actor_id: str,
        *,
        today: date | None = None,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        """Change a record's status by voiding it and marking a fresh record."""
        status = self._require_active_status(status)
        record = await self._attendance.get(record_id)
        if record is None:
            raise NotFoundError(f"Attendance record {record_id} not found")
        if record.is_voided:
            raise AlreadyVoidedError(f"Attendance record {record_id} is already voided")
        if record.status == status:
            return record

        await self._roster.get_worker(record.worker_id)
        await self.void_record(record_id, actor_id, now=now)
        return await self.mark_attendance(record.worker_id, record.work_date, status, today=today, now=now)

    async def get_records_for_date(self, work_date: Union[date, str], *, audit: bool = False) -> list[AttendanceRecord]:
        records = await self._attendance.list_for_date(coerce_date(work_date), include_voided=audit)
        if not audit:
            return list(records)
        voided = sorted((r for r in records if r.is_voided), key=lambda r: (r.voided_at is not None, r.voided_at))
        return voided + [r for r in records if not r.is_voided]

    async def get_records_in_range(self, start_date: Union[date, str], end_date: Union[date, str]) -> list[AttendanceRecord]:
        start, end = coerce_date(start_date), coerce_date(end_date)
        if start > end:
            raise ValidationError("Start date must be before or equal to end date")
        return list(await self._attendance.list_in_range(start_date=start, end_date=end))

    def subscribe(self, on_change: ChangeListener) -> Unsubscribe:
        return self._attendance.subscribe(on_change)
