from __future__ import annotations

import asyncio
from decimal import Decimal

from src.labour_ledger.labour_ledger.reports.live import DashboardFeed


def test_feed_pushes_fresh_stats_on_each_write(container, add_worker, today):
    worker = add_worker("Asha Devi", daily_wage="400")
    feed = DashboardFeed(container.report_service, container.ledger, container.roster_service, today=lambda: today)
    updates = []

    stop = feed.start(updates.append)
    asyncio.run(container.ledger.mark_attendance(worker.worker_id, today, "present", today=today))
    add_worker("Bhim Singh")
    stop()
    add_worker("Chandan Rao")

    assert [u.present_today for u in updates] == [1, 1]
    assert [u.total_workers for u in updates] == [1, 2]
    assert updates[0].month_cost == Decimal("400")


def test_snapshot_matches_dashboard_stats(container, add_worker, today):
    add_worker("Asha Devi")
    feed = DashboardFeed(container.report_service, container.ledger, today=lambda: today)

    snapshot = asyncio.run(feed.snapshot())

    assert snapshot == asyncio.run(container.report_service.dashboard_stats(today=today))


def test_failing_listener_does_not_break_writes(container, add_worker, today):
    worker = add_worker("Asha Devi")

    def explode(_stats):
        raise RuntimeError("screen went away")

    stop = DashboardFeed(container.report_service, container.ledger, today=lambda: today).start(explode)
    record = asyncio.run(container.ledger.mark_attendance(worker.worker_id, today, "present", today=today))
    stop()

    assert record.wage_calculated == Decimal("500")
