from __future__ import annotations

import asyncio
import itertools
from datetime import date, datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from src.labour_ledger.labour_ledger.container import build_container
from src.labour_ledger.labour_ledger.roster.model import NewWorker
from src.labour_ledger.labour_ledger.store.memory import InMemoryRecordStore

TZ = "Asia/Kolkata"


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 3, 10, 9, 30, tzinfo=ZoneInfo(TZ))


@pytest.fixture
def today(fixed_now) -> date:
    return fixed_now.date()


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def container(store):
    return build_container(backend="memory", tenant_id="site-1", timezone=TZ, store=store)


@pytest.fixture
def add_worker(container, today):
    """Register a worker through the roster service and return it."""

    national_ids = itertools.count(100000000001)

    def _add(name: str = "Ravi Kumar", daily_wage="500", joining_date=date(2024, 1, 1), **extra):
        new = NewWorker(
            name=name,
            national_id=str(next(national_ids)),
            daily_wage=Decimal(str(daily_wage)),
            joining_date=joining_date,
            **extra,
        )
        return asyncio.run(container.roster_service.create_worker(new, today=today))

    return _add
