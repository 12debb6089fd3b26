from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import WorkerStatus
from ..store.base import ChangeListener, Unsubscribe
from .model import Category, Worker


class WorkerRepository(Protocol):
    """Repository interface for workers.

    Note (DIP): services depend on this interface, not on a concrete store.
    """

    async def get_by_id(self, worker_id: str) -> Optional[Worker]:
        raise NotImplementedError

    async def get_by_national_id(self, national_id: str) -> Optional[Worker]:
        """Current (non-archived) holder of the national id, if any."""
        raise NotImplementedError

    async def list(
        self,
        *,
        status: Optional[WorkerStatus] = None,
        category_id: Optional[str] = None,
        include_archived: bool = False,
    ) -> Sequence[Worker]:
        raise NotImplementedError

    async def add(self, worker: Worker) -> Worker:
        raise NotImplementedError

    async def update(self, worker_id: str, changes: dict) -> Optional[Worker]:
        raise NotImplementedError

    def subscribe(self, on_change: ChangeListener) -> Unsubscribe:
        raise NotImplementedError


class CategoryRepository(Protocol):
    async def get_by_id(self, category_id: str) -> Optional[Category]:
        raise NotImplementedError

    async def list(self) -> Sequence[Category]:
        raise NotImplementedError

    async def add(self, category: Category) -> Category:
        raise NotImplementedError


class RosterProvider(Protocol):
    """What the ledger and the report engine need from the roster."""

    async def list_workers(
        self,
        *,
        status: Optional[WorkerStatus] = None,
        category_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Sequence[Worker]:
        raise NotImplementedError

    async def get_worker(self, worker_id: str) -> Worker:
        raise NotImplementedError
