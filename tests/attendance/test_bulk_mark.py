from __future__ import annotations

import asyncio
from datetime import date, timedelta
from decimal import Decimal

import pytest

from src.labour_ledger.labour_ledger.attendance.model import BulkEntry
from src.labour_ledger.labour_ledger.core.exceptions import (
    BulkMarkError,
    DuplicateActiveRecordError,
    FutureDateError,
    NotFoundError,
)

MARCH_5 = date(2024, 3, 5)


def test_bulk_mark_creates_one_record_per_worker(container, add_worker, today):
    a = add_worker("Asha Devi", daily_wage="400")
    b = add_worker("Bhim Singh", daily_wage="300")

    result = asyncio.run(
        container.ledger.bulk_mark_attendance(
            "2024-03-05",
            [(a.worker_id, "present"), BulkEntry(worker_id=b.worker_id, status="absent")],
            today=today,
        )
    )

    assert result.ok
    wages = {r.worker_id: r.wage_calculated for r in result.created}
    assert wages == {a.worker_id: Decimal("400"), b.worker_id: Decimal("0")}
    assert asyncio.run(container.report_service.monthly_payroll_total("2024-03")) == Decimal("400")


def test_rerunning_a_batch_is_idempotent(container, add_worker, today):
    a = add_worker("Asha Devi")
    b = add_worker("Bhim Singh")
    ledger = container.ledger
    asyncio.run(ledger.mark_attendance(a.worker_id, MARCH_5, "present", today=today))

    result = asyncio.run(
        ledger.bulk_mark_attendance(MARCH_5, [(a.worker_id, "present"), (b.worker_id, "half-day")], today=today)
    )

    assert [r.worker_id for r in result.created] == [b.worker_id]
    assert [r.worker_id for r in result.unchanged] == [a.worker_id]

    again = asyncio.run(
        ledger.bulk_mark_attendance(MARCH_5, [(a.worker_id, "present"), (b.worker_id, "half-day")], today=today)
    )
    assert again.created == []
    assert len(again.unchanged) == 2
    assert len(asyncio.run(ledger.get_records_for_date(MARCH_5))) == 2


def test_conflicting_entry_aborts_whole_batch(container, add_worker, today):
    a = add_worker("Asha Devi")
    b = add_worker("Bhim Singh")
    ledger = container.ledger
    asyncio.run(ledger.mark_attendance(a.worker_id, MARCH_5, "absent", today=today))

    with pytest.raises(BulkMarkError) as excinfo:
        asyncio.run(
            ledger.bulk_mark_attendance(MARCH_5, [(a.worker_id, "present"), (b.worker_id, "present")], today=today)
        )

    result = excinfo.value.result
    assert [f.entry.worker_id for f in result.failures] == [a.worker_id]
    assert isinstance(excinfo.value.first_failure.error, DuplicateActiveRecordError)
    assert [e.worker_id for e in result.skipped] == [b.worker_id]
    assert result.created == []

    records = asyncio.run(ledger.get_records_for_date(MARCH_5))
    assert [r.worker_id for r in records] == [a.worker_id]


def test_every_failure_is_reported(container, add_worker, today):
    a = add_worker("Asha Devi")

    with pytest.raises(BulkMarkError) as excinfo:
        asyncio.run(
            container.ledger.bulk_mark_attendance(
                MARCH_5,
                [("ghost", "present"), (a.worker_id, "late"), (a.worker_id, "present")],
                today=today,
            )
        )

    failures = excinfo.value.result.failures
    assert [f.kind for f in failures] == ["NotFoundError", "InvalidStatus"]
    assert isinstance(failures[0].error, NotFoundError)
    assert asyncio.run(container.ledger.get_records_for_date(MARCH_5)) == []


def test_repeated_worker_in_one_batch(container, add_worker, today):
    a = add_worker("Asha Devi")
    ledger = container.ledger

    result = asyncio.run(
        ledger.bulk_mark_attendance(MARCH_5, [(a.worker_id, "present"), (a.worker_id, "present")], today=today)
    )
    assert len(result.created) == 1
    assert result.unchanged == result.created

    with pytest.raises(BulkMarkError):
        asyncio.run(
            ledger.bulk_mark_attendance(
                date(2024, 3, 6), [(a.worker_id, "present"), (a.worker_id, "absent")], today=today
            )
        )


def test_bulk_mark_rejects_future_date(container, add_worker, today):
    a = add_worker("Asha Devi")

    with pytest.raises(FutureDateError):
        asyncio.run(
            container.ledger.bulk_mark_attendance(
                today + timedelta(days=1), [(a.worker_id, "present")], today=today
            )
        )


def test_repeated_entries_are_accounted_for_when_batch_aborts(container, add_worker, today):
    a = add_worker("Asha Devi")
    b = add_worker("Bhim Singh")
    ledger = container.ledger
    asyncio.run(ledger.mark_attendance(b.worker_id, MARCH_5, "present", today=today))

    with pytest.raises(BulkMarkError) as excinfo:
        asyncio.run(
            ledger.bulk_mark_attendance(
                MARCH_5,
                [(a.worker_id, "present"), (a.worker_id, "present"), (b.worker_id, "present"), ("ghost", "absent")],
                today=today,
            )
        )

    result = excinfo.value.result
    assert [e.worker_id for e in result.skipped] == [a.worker_id, a.worker_id]
    assert [r.worker_id for r in result.unchanged] == [b.worker_id]
    assert [f.entry.worker_id for f in result.failures] == ["ghost"]
