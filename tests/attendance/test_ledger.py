from __future__ import annotations

import asyncio
from datetime import date, timedelta
from decimal import Decimal

import pytest

from src.labour_ledger.labour_ledger.core.enums import AttendanceStatus
from src.labour_ledger.labour_ledger.core.exceptions import (
    AlreadyVoidedError,
    DuplicateActiveRecordError,
    FutureDateError,
    InvalidStatus,
    NotFoundError,
    ValidationError,
)

MARCH_1 = date(2024, 3, 1)


def test_mark_computes_wage_from_daily_wage(container, add_worker, today, fixed_now):
    ledger = container.ledger
    worker = add_worker(daily_wage="500")

    record = asyncio.run(ledger.mark_attendance(worker.worker_id, MARCH_1, "present", today=today, now=fixed_now))

    assert record.status == AttendanceStatus.PRESENT
    assert record.wage_calculated == Decimal("500")
    assert record.created_at == fixed_now
    assert not record.is_voided


def test_mark_rejects_future_date_but_allows_today(container, add_worker, today, fixed_now):
    ledger = container.ledger
    worker = add_worker()

    with pytest.raises(FutureDateError):
        asyncio.run(ledger.mark_attendance(worker.worker_id, today + timedelta(days=1), "present", today=today))

    record = asyncio.run(ledger.mark_attendance(worker.worker_id, today, "absent", today=today, now=fixed_now))
    assert record.wage_calculated == Decimal("0")


def test_mark_rejects_second_active_record_for_same_day(container, add_worker, today):
    ledger = container.ledger
    worker = add_worker()
    asyncio.run(ledger.mark_attendance(worker.worker_id, MARCH_1, "present", today=today))

    with pytest.raises(DuplicateActiveRecordError):
        asyncio.run(ledger.mark_attendance(worker.worker_id, MARCH_1, "half-day", today=today))


def test_mark_rejects_unknown_worker_and_bad_status(container, add_worker, today):
    ledger = container.ledger
    worker = add_worker()

    with pytest.raises(NotFoundError):
        asyncio.run(ledger.mark_attendance("missing", MARCH_1, "present", today=today))
    with pytest.raises(InvalidStatus):
        asyncio.run(ledger.mark_attendance(worker.worker_id, MARCH_1, "late", today=today))
    with pytest.raises(InvalidStatus):
        asyncio.run(ledger.mark_attendance(worker.worker_id, MARCH_1, "voided", today=today))


def test_void_then_remark_keeps_audit_trail(container, add_worker, today, fixed_now):
    ledger = container.ledger
    worker = add_worker(daily_wage="500")

    first = asyncio.run(ledger.mark_attendance(worker.worker_id, MARCH_1, "present", today=today, now=fixed_now))
    assert first.wage_calculated == Decimal("500")

    voided = asyncio.run(ledger.void_record(first.record_id, "supervisor-1", now=fixed_now))
    assert voided.status == AttendanceStatus.VOIDED
    assert voided.wage_calculated == Decimal("0")
    assert voided.previous_status == AttendanceStatus.PRESENT
    assert voided.voided_by == "supervisor-1"
    assert voided.voided_at == fixed_now
    assert asyncio.run(ledger.get_records_for_date(MARCH_1)) == []

    later = fixed_now + timedelta(minutes=5)
    second = asyncio.run(ledger.mark_attendance(worker.worker_id, MARCH_1, "half-day", today=today, now=later))
    assert second.wage_calculated == Decimal("250")

    visible = asyncio.run(ledger.get_records_for_date(MARCH_1))
    assert [r.record_id for r in visible] == [second.record_id]

    audit = asyncio.run(ledger.get_records_for_date(MARCH_1, audit=True))
    assert [r.record_id for r in audit] == [first.record_id, second.record_id]
    assert audit[0].is_voided


def test_void_twice_fails_and_leaves_record_unchanged(container, add_worker, today, fixed_now):
    ledger = container.ledger
    worker = add_worker()
    record = asyncio.run(ledger.mark_attendance(worker.worker_id, MARCH_1, "present", today=today))
    voided = asyncio.run(ledger.void_record(record.record_id, "supervisor-1", now=fixed_now))

    with pytest.raises(AlreadyVoidedError):
        asyncio.run(ledger.void_record(record.record_id, "supervisor-2", now=fixed_now + timedelta(hours=1)))

    audit = asyncio.run(ledger.get_records_for_date(MARCH_1, audit=True))
    assert audit == [voided]


def test_void_requires_existing_record_and_actor(container, add_worker, today):
    ledger = container.ledger
    worker = add_worker()
    record = asyncio.run(ledger.mark_attendance(worker.worker_id, MARCH_1, "present", today=today))

    with pytest.raises(NotFoundError):
        asyncio.run(ledger.void_record("missing", "supervisor-1"))
    with pytest.raises(ValidationError):
        asyncio.run(ledger.void_record(record.record_id, "  "))


def test_range_is_inclusive_and_newest_date_first(container, add_worker, today):
    ledger = container.ledger
    worker = add_worker()
    for day in (date(2024, 3, 1), date(2024, 3, 2), date(2024, 3, 3), date(2024, 3, 4)):
        asyncio.run(ledger.mark_attendance(worker.worker_id, day, "present", today=today))

    records = asyncio.run(ledger.get_records_in_range("2024-03-02", "2024-03-04"))

    assert [r.work_date for r in records] == [date(2024, 3, 4), date(2024, 3, 3), date(2024, 3, 2)]

    with pytest.raises(ValidationError):
        asyncio.run(ledger.get_records_in_range("2024-03-04", "2024-03-02"))


def test_edit_voids_and_recreates(container, add_worker, today, fixed_now):
    ledger = container.ledger
    worker = add_worker(daily_wage="400")
    record = asyncio.run(ledger.mark_attendance(worker.worker_id, MARCH_1, "present", today=today, now=fixed_now))

    edited = asyncio.run(
        ledger.edit_attendance(record.record_id, "half-day", "supervisor-1", today=today, now=fixed_now)
    )

    assert edited.record_id != record.record_id
    assert edited.wage_calculated == Decimal("200")
    audit = asyncio.run(ledger.get_records_for_date(MARCH_1, audit=True))
    assert {r.status for r in audit} == {AttendanceStatus.VOIDED, AttendanceStatus.HALF_DAY}


def test_edit_to_same_status_is_a_no_op(container, add_worker, today):
    ledger = container.ledger
    worker = add_worker()
    record = asyncio.run(ledger.mark_attendance(worker.worker_id, MARCH_1, "absent", today=today))

    assert asyncio.run(ledger.edit_attendance(record.record_id, "absent", "supervisor-1", today=today)) == record


def test_wage_change_does_not_rewrite_saved_records(container, add_worker, today):
    ledger = container.ledger
    worker = add_worker(daily_wage="500")
    asyncio.run(ledger.mark_attendance(worker.worker_id, MARCH_1, "present", today=today))

    asyncio.run(container.roster_service.update_worker(worker.worker_id, {"daily_wage": "600"}, today=today))
    asyncio.run(ledger.mark_attendance(worker.worker_id, date(2024, 3, 2), "present", today=today))

    wages = [r.wage_calculated for r in asyncio.run(ledger.get_records_in_range(MARCH_1, date(2024, 3, 2)))]
    assert wages == [Decimal("600"), Decimal("500")]


def test_subscribers_see_writes(container, add_worker, today):
    ledger = container.ledger
    worker = add_worker()
    seen = []
    stop = ledger.subscribe(lambda event: seen.append((event.kind.value, event.row["status"])))

    record = asyncio.run(ledger.mark_attendance(worker.worker_id, MARCH_1, "present", today=today))
    asyncio.run(ledger.void_record(record.record_id, "supervisor-1"))
    stop()
    asyncio.run(ledger.mark_attendance(worker.worker_id, MARCH_1, "absent", today=today))

    assert seen == [("INSERT", "present"), ("UPDATE", "voided")]


def test_audit_mode_tolerates_voids_without_timestamp(container, add_worker, today, fixed_now, store):
    from src.labour_ledger.labour_ledger.core.constants import ATTENDANCE_TABLE

    ledger = container.ledger
    worker = add_worker()
    asyncio.run(
        store.insert(
            ATTENDANCE_TABLE,
            {
                "id": "legacy-void",
                "tenant_id": container.tenant_id,
                "worker_id": worker.worker_id,
                "work_date": MARCH_1,
                "status": "voided",
                "wage_calculated": Decimal("0"),
                "created_at": fixed_now,
            },
        )
    )
    record = asyncio.run(ledger.mark_attendance(worker.worker_id, MARCH_1, "present", today=today))
    asyncio.run(ledger.void_record(record.record_id, "supervisor-1", now=fixed_now))

    audit = asyncio.run(ledger.get_records_for_date(MARCH_1, audit=True))

    assert [r.record_id for r in audit] == ["legacy-void", record.record_id]
    assert audit[0].voided_at is None
