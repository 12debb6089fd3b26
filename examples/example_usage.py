"""Example: drive the services directly (no Flask), on the in-memory store.

Controllers stay thin; the business rules live in the services.
"""

import asyncio
from datetime import timedelta
from decimal import Decimal

from src.labour_ledger.labour_ledger.common.datetime_utils import today_local
from src.labour_ledger.labour_ledger.common.formatting import mask_national_id
from src.labour_ledger.labour_ledger.container import build_container
from src.labour_ledger.labour_ledger.reports.tabular import to_frame
from src.labour_ledger.labour_ledger.roster.model import NewWorker


async def run():
    container = build_container(backend="memory", tenant_id="demo-site")
    today = today_local(container.timezone)

    worker = await container.roster_service.create_worker(
        NewWorker(name="Ramesh Yadav", national_id="482915730016", daily_wage=Decimal("500"), joining_date=today)
    )
    yesterday = today - timedelta(days=1)
    record = await container.ledger.mark_attendance(worker.worker_id, yesterday, "present")
    await container.ledger.void_record(record.record_id, "supervisor-1")
    await container.ledger.mark_attendance(worker.worker_id, yesterday, "half-day")

    report = await container.report_service.payroll_report(yesterday, today)
    print(mask_national_id(worker.national_id), report.total_wage)
    print(to_frame(report.as_rows()).to_string(index=False))


if __name__ == "__main__":
    asyncio.run(run())
