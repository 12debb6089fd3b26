from __future__ import annotations

import asyncio
from datetime import date, timedelta
from decimal import Decimal

import pytest

from src.labour_ledger.labour_ledger.core.enums import AttendanceStatus, WorkerStatus
from src.labour_ledger.labour_ledger.core.exceptions import (
    DuplicateNationalIdError,
    NotFoundError,
    ValidationError,
)
from src.labour_ledger.labour_ledger.roster.model import NewWorker


def _new(**overrides):
    data = dict(
        name="Ravi Kumar",
        national_id="1234 5678 9012",
        daily_wage="450.50",
        joining_date=date(2024, 1, 15),
        phone="98765 43210",
    )
    data.update(overrides)
    return NewWorker(**data)


def test_create_worker_normalizes_input(container, today):
    worker = asyncio.run(container.roster_service.create_worker(_new(), today=today))

    assert worker.national_id == "123456789012"
    assert worker.phone == "9876543210"
    assert worker.daily_wage == Decimal("450.50")
    assert worker.status == WorkerStatus.ACTIVE
    assert asyncio.run(container.roster_service.get_worker(worker.worker_id)) == worker


def test_create_worker_collects_every_field_error(container, today):
    with pytest.raises(ValidationError) as excinfo:
        asyncio.run(
            container.roster_service.create_worker(
                _new(
                    name="R",
                    national_id="1234",
                    daily_wage="0",
                    joining_date=today + timedelta(days=1),
                    phone="12ab",
                ),
                today=today,
            )
        )

    assert set(excinfo.value.errors) == {"name", "national_id", "daily_wage", "joining_date", "phone"}


@pytest.mark.parametrize("wage", ["-5", "100001", "12.345", "abc"])
def test_create_worker_rejects_bad_wages(container, today, wage):
    with pytest.raises(ValidationError) as excinfo:
        asyncio.run(container.roster_service.create_worker(_new(daily_wage=wage), today=today))
    assert "daily_wage" in excinfo.value.errors


def test_national_id_is_unique_per_tenant(container, today):
    asyncio.run(container.roster_service.create_worker(_new(), today=today))

    with pytest.raises(DuplicateNationalIdError):
        asyncio.run(container.roster_service.create_worker(_new(name="Someone Else"), today=today))


def test_list_workers_filters_by_status_and_search(container, add_worker):
    asha = add_worker("Asha Devi")
    bhim = add_worker("Bhim Singh", status="inactive")
    roster = container.roster_service

    assert [w.worker_id for w in asyncio.run(roster.list_workers(status="active"))] == [asha.worker_id]
    assert [w.worker_id for w in asyncio.run(roster.list_workers(search="SINGH"))] == [bhim.worker_id]
    assert [w.worker_id for w in asyncio.run(roster.list_workers(search=asha.national_id[-6:]))] == [asha.worker_id]
    with pytest.raises(ValidationError):
        asyncio.run(roster.list_workers(status="retired"))


def test_update_worker_validates_changes(container, add_worker, today):
    worker = add_worker()
    roster = container.roster_service

    updated = asyncio.run(roster.update_worker(worker.worker_id, {"name": "Ravi K", "daily_wage": "520"}, today=today))
    assert (updated.name, updated.daily_wage) == ("Ravi K", Decimal("520"))

    with pytest.raises(ValidationError):
        asyncio.run(roster.update_worker(worker.worker_id, {"salary": 1}, today=today))
    with pytest.raises(NotFoundError):
        asyncio.run(roster.update_worker("ghost", {"name": "Nobody"}, today=today))


def test_remove_worker_voids_history_and_archives(container, add_worker, today, fixed_now):
    worker = add_worker(daily_wage="500")
    other = add_worker("Bhim Singh")
    ledger = container.ledger
    for day in (date(2024, 3, 1), date(2024, 3, 2)):
        asyncio.run(ledger.mark_attendance(worker.worker_id, day, "present", today=today))
    asyncio.run(ledger.mark_attendance(other.worker_id, date(2024, 3, 1), "present", today=today))

    voided = asyncio.run(container.roster_service.remove_worker(worker.worker_id, "admin-1", now=fixed_now))

    assert voided == 2
    with pytest.raises(NotFoundError):
        asyncio.run(container.roster_service.get_worker(worker.worker_id))
    remaining = asyncio.run(ledger.get_records_in_range(date(2024, 3, 1), date(2024, 3, 2)))
    assert [r.worker_id for r in remaining] == [other.worker_id]

    audit = asyncio.run(ledger.get_records_for_date(date(2024, 3, 1), audit=True))
    trail = [r for r in audit if r.worker_id == worker.worker_id]
    assert trail[0].status == AttendanceStatus.VOIDED
    assert trail[0].previous_status == AttendanceStatus.PRESENT
    assert trail[0].voided_by == "admin-1"

    assert [w.worker_id for w in asyncio.run(container.roster_service.list_workers())] == [other.worker_id]


def test_categories(container, add_worker, today):
    roster = container.roster_service
    masons = asyncio.run(roster.create_category("Masons"))
    asyncio.run(roster.create_category("Carpenters"))

    assert [c.name for c in asyncio.run(roster.list_categories())] == ["Carpenters", "Masons"]
    with pytest.raises(ValidationError):
        asyncio.run(roster.create_category("Masons"))

    worker = add_worker(category_id=masons.category_id)
    assert [w.worker_id for w in asyncio.run(roster.list_workers(category_id=masons.category_id))] == [worker.worker_id]
    with pytest.raises(ValidationError):
        add_worker("Bhim Singh", category_id="ghost")


def test_tenants_do_not_see_each_other(store, today):
    from src.labour_ledger.labour_ledger.container import build_container

    site_a = build_container(backend="memory", tenant_id="site-a", store=store)
    site_b = build_container(backend="memory", tenant_id="site-b", store=store)

    asyncio.run(site_a.roster_service.create_worker(_new(), today=today))
    asyncio.run(site_b.roster_service.create_worker(_new(), today=today))

    assert len(asyncio.run(site_a.roster_service.list_workers())) == 1
    assert len(asyncio.run(site_b.roster_service.list_workers())) == 1


def test_removed_worker_national_id_can_be_registered_again(container, today, fixed_now):
    roster = container.roster_service
    original = asyncio.run(roster.create_worker(_new(), today=today))
    asyncio.run(roster.remove_worker(original.worker_id, "admin-1", now=fixed_now))

    again = asyncio.run(roster.create_worker(_new(name="Ravi Kumar Rejoined"), today=today))

    assert again.worker_id != original.worker_id
    assert again.national_id == original.national_id
    assert asyncio.run(container.workers_repo.get_by_national_id(original.national_id)) == again
    archived = asyncio.run(container.workers_repo.get_by_id(original.worker_id))
    assert archived.archived_at == fixed_now
    assert not archived.is_active

    with pytest.raises(DuplicateNationalIdError):
        asyncio.run(roster.create_worker(_new(name="Third Person"), today=today))
