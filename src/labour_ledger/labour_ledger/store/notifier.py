from __future__ import annotations

import inspect
import logging
from collections import defaultdict

from .base import ChangeEvent, ChangeListener, Unsubscribe

logger = logging.getLogger(__name__)


class ChangeNotifier:
    """Observer registry used by store implementations to publish writes."""

    def __init__(self):
        self._listeners: dict[str, list[ChangeListener]] = defaultdict(list)

    def subscribe(self, table: str, on_change: ChangeListener) -> Unsubscribe:
        self._listeners[table].append(on_change)

        def unsubscribe() -> None:
            listeners = self._listeners.get(table, [])
            if on_change in listeners:
                listeners.remove(on_change)

        return unsubscribe

    async def publish(self, events: list[ChangeEvent]) -> None:
        for event in events:
            for listener in list(self._listeners.get(event.table, [])):
                try:
                    result = listener(event)
                    if inspect.isawaitable(result):
                        await result
                except Exception:
                    # The write is already committed; keep notifying the others.
                    logger.exception("Change listener failed for %s %s", event.table, event.kind.value)
