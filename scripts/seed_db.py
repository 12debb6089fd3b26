from __future__ import annotations

import asyncio
import importlib
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.labour_ledger.labour_ledger.common.datetime_utils import today_local
from src.labour_ledger.labour_ledger.container import build_container
from src.labour_ledger.labour_ledger.roster.model import NewWorker

DEMO_WORKERS = (
    ("Ramesh Yadav", "482915730016", "650", "Masons"),
    ("Sunita Devi", "593027184422", "450", "Helpers"),
    ("Abdul Karim", "604138295538", "700", "Carpenters"),
    ("Lakshmi Naidu", "715249306644", "450", "Helpers"),
)


async def seed(container, *, days: int = 5) -> int:
    roster = container.roster_service
    today = today_local(container.timezone)

    categories = {c.name: c for c in await roster.list_categories()}
    workers = []
    for name, national_id, wage, category in DEMO_WORKERS:
        if category not in categories:
            categories[category] = await roster.create_category(category)
        existing = await container.workers_repo.get_by_national_id(national_id)
        if existing is not None:
            workers.append(existing)
            continue
        workers.append(
            await roster.create_worker(
                NewWorker(
                    name=name,
                    national_id=national_id,
                    daily_wage=Decimal(wage),
                    joining_date=today - timedelta(days=90),
                    category_id=categories[category].category_id,
                ),
                today=today,
            )
        )

    statuses = ("present", "present", "half-day", "absent")
    created = 0
    for offset in range(days, 0, -1):
        work_date: date = today - timedelta(days=offset)
        if await container.ledger.get_records_for_date(work_date):
            continue
        entries = [(w.worker_id, statuses[(i + offset) % len(statuses)]) for i, w in enumerate(workers)]
        result = await container.ledger.bulk_mark_attendance(work_date, entries, today=today)
        created += len(result.created)
    return created


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = build_container(
        db_config=dict(settings.DB_CONFIG),
        backend=settings.STORE_BACKEND,
        tenant_id=settings.TENANT_ID,
        timezone=settings.TIMEZONE,
    )
    created = asyncio.run(seed(container))
    print(f"OK: Seeded {len(DEMO_WORKERS)} workers and {created} attendance record(s) for tenant {settings.TENANT_ID}")


if __name__ == "__main__":
    main()
