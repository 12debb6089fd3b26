from __future__ import annotations

import inspect
import logging
from datetime import date
from typing import Awaitable, Callable, Optional, Protocol, Union

from ..store.base import ChangeEvent, ChangeListener, Unsubscribe
from .model import DashboardStats
from .service import ReportService

logger = logging.getLogger(__name__)

DashboardListener = Callable[[DashboardStats], Union[Awaitable[None], None]]


class ChangeSource(Protocol):
    def subscribe(self, on_change: ChangeListener) -> Unsubscribe:
        raise NotImplementedError


class DashboardFeed:
    """Re-run the dashboard figures whenever the roster or the ledger changes.

    Sources are anything exposing ``subscribe(on_change)``, e.g. the
    attendance ledger and the roster service.
    """

    def __init__(
        self,
        reports: ReportService,
        *sources: ChangeSource,
        today: Optional[Callable[[], date]] = None,
    ):
        self._reports = reports
        self._sources = sources
        self._today = today

    async def snapshot(self) -> DashboardStats:
        return await self._reports.dashboard_stats(today=self._today() if self._today else None)

    def start(self, on_update: DashboardListener) -> Unsubscribe:
        async def refresh(event: ChangeEvent) -> None:
            logger.debug("Refreshing dashboard after %s on %s", event.kind.value, event.table)
            stats = await self.snapshot()
            result = on_update(stats)
            if inspect.isawaitable(result):
                await result

        unsubscribers = [source.subscribe(refresh) for source in self._sources]

        def stop() -> None:
            for unsubscribe in unsubscribers:
                unsubscribe()

        return stop
