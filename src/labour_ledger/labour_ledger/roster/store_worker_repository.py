from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional, Sequence

from ..core.constants import CATEGORIES_TABLE, WORKERS_TABLE
from ..core.enums import WorkerStatus
from ..core.exceptions import DuplicateNationalIdError, UniqueViolation, ValidationError
from ..store.base import ChangeListener, Condition, OrderBy, RecordStore, Row, Unsubscribe
from .model import Category, Worker
from .repository import CategoryRepository, WorkerRepository

_WORKER_FIELDS = {
    "name": "name",
    "national_id": "national_id",
    "daily_wage": "daily_wage",
    "status": "status",
    "joining_date": "joining_date",
    "category_id": "category_id",
    "phone": "phone",
    "designation": "designation",
    "photo_url": "photo_url",
    "archived_at": "archived_at",
}


def worker_from_row(r: Row) -> Worker:
    return Worker(
        worker_id=str(r["id"]),
        name=r["name"],
        national_id=r["national_id"],
        daily_wage=Decimal(r["daily_wage"]),
        status=WorkerStatus(r["status"]),
        joining_date=r["joining_date"],
        category_id=r.get("category_id"),
        phone=r.get("phone"),
        designation=r.get("designation"),
        photo_url=r.get("photo_url"),
        created_at=r.get("created_at"),
        archived_at=r.get("archived_at"),
    )


def _to_column(value: Any) -> Any:
    return value.value if isinstance(value, WorkerStatus) else value


class StoreWorkerRepository(WorkerRepository):
    def __init__(self, store: RecordStore, *, tenant_id: str):
        self._store = store
        self._tenant_id = tenant_id

    def _scope(self) -> list[Condition]:
        return [Condition("tenant_id", "eq", self._tenant_id)]

    async def get_by_id(self, worker_id: str) -> Optional[Worker]:
        rows = await self._store.query(WORKERS_TABLE, [*self._scope(), Condition("id", "eq", worker_id)])
        return worker_from_row(rows[0]) if rows else None

    async def get_by_national_id(self, national_id: str) -> Optional[Worker]:
        rows = await self._store.query(
            WORKERS_TABLE,
            [*self._scope(), Condition("national_id", "eq", national_id), Condition("archived_at", "eq", None)],
        )
        return worker_from_row(rows[0]) if rows else None

    async def list(
        self,
        *,
        status: Optional[WorkerStatus] = None,
        category_id: Optional[str] = None,
        include_archived: bool = False,
    ) -> Sequence[Worker]:
        conditions = self._scope()
        if status is not None:
            conditions.append(Condition("status", "eq", status.value))
        if category_id is not None:
            conditions.append(Condition("category_id", "eq", category_id))
        if not include_archived:
            conditions.append(Condition("archived_at", "eq", None))
        rows = await self._store.query(WORKERS_TABLE, conditions, [OrderBy("created_at", descending=True)])
        return [worker_from_row(r) for r in rows]

    async def add(self, worker: Worker) -> Worker:
        row = {
            "id": worker.worker_id,
            "tenant_id": self._tenant_id,
            "created_at": worker.created_at,
            **{column: _to_column(getattr(worker, name)) for name, column in _WORKER_FIELDS.items()},
        }
        try:
            return worker_from_row(await self._store.insert(WORKERS_TABLE, row))
        except UniqueViolation:
            raise DuplicateNationalIdError(
                "A worker with this national id already exists",
                errors={"national_id": "National id is already registered"},
            )

    async def update(self, worker_id: str, changes: dict) -> Optional[Worker]:
        unknown = set(changes) - set(_WORKER_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown worker field(s): {', '.join(sorted(unknown))}")
        patch = {_WORKER_FIELDS[k]: _to_column(v) for k, v in changes.items()}
        try:
            row = await self._store.update(WORKERS_TABLE, worker_id, patch, self._scope())
        except UniqueViolation:
            raise DuplicateNationalIdError(
                "A worker with this national id already exists",
                errors={"national_id": "National id is already registered"},
            )
        return worker_from_row(row) if row else None

    def subscribe(self, on_change: ChangeListener) -> Unsubscribe:
        def forward(event):
            if event.row.get("tenant_id") != self._tenant_id:
                return None
            return on_change(event)

        return self._store.subscribe(WORKERS_TABLE, forward)


class StoreCategoryRepository(CategoryRepository):
    def __init__(self, store: RecordStore, *, tenant_id: str):
        self._store = store
        self._tenant_id = tenant_id

    async def get_by_id(self, category_id: str) -> Optional[Category]:
        rows = await self._store.query(
            CATEGORIES_TABLE,
            [Condition("tenant_id", "eq", self._tenant_id), Condition("id", "eq", category_id)],
        )
        return Category(category_id=rows[0]["id"], name=rows[0]["name"]) if rows else None

    async def list(self) -> Sequence[Category]:
        rows = await self._store.query(
            CATEGORIES_TABLE,
            [Condition("tenant_id", "eq", self._tenant_id)],
            [OrderBy("name")],
        )
        return [Category(category_id=r["id"], name=r["name"]) for r in rows]

    async def add(self, category: Category) -> Category:
        try:
            row = await self._store.insert(
                CATEGORIES_TABLE,
                {"id": category.category_id, "tenant_id": self._tenant_id, "name": category.name},
            )
        except UniqueViolation:
            raise ValidationError("Category already exists", errors={"name": "Category already exists"})
        return Category(category_id=row["id"], name=row["name"])
