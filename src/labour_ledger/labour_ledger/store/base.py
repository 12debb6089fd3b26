from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping, Optional, Protocol, Sequence, Union

from ..core import constants
from ..core.enums import AttendanceStatus, ChangeKind

Row = dict[str, Any]

OPERATORS = ("eq", "neq", "gte", "lte", "in")


@dataclass(frozen=True)
class Condition:
    """Single column predicate, e.g. ``Condition("work_date", "gte", start)``."""

    column: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in OPERATORS:
            raise ValueError(f"Unsupported operator: {self.op!r}")

    def matches(self, row: Mapping[str, Any]) -> bool:
        actual = row.get(self.column)
        if self.op == "eq":
            return actual == self.value
        if self.op == "neq":
            return actual != self.value
        if self.op == "in":
            return actual in self.value
        if actual is None:
            return False
        if self.op == "gte":
            return actual >= self.value
        return actual <= self.value


@dataclass(frozen=True)
class OrderBy:
    column: str
    descending: bool = False


@dataclass(frozen=True)
class UniqueIndex:
    """Unique index over ``columns``, optionally restricted to rows matching ``where``."""

    name: str
    table: str
    columns: tuple[str, ...]
    where: tuple[Condition, ...] = field(default_factory=tuple)

    def applies_to(self, row: Mapping[str, Any]) -> bool:
        return all(c.matches(row) for c in self.where)

    def key(self, row: Mapping[str, Any]) -> tuple:
        return tuple(row.get(c) for c in self.columns)


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    kind: ChangeKind
    row: Row


ChangeListener = Callable[[ChangeEvent], Union[Awaitable[None], None]]
Unsubscribe = Callable[[], None]


TABLE_COLUMNS: dict[str, tuple[str, ...]] = {
    constants.WORKERS_TABLE: (
        "id",
        "tenant_id",
        "name",
        "national_id",
        "daily_wage",
        "status",
        "joining_date",
        "category_id",
        "phone",
        "designation",
        "photo_url",
        "created_at",
        "archived_at",
    ),
    constants.CATEGORIES_TABLE: ("id", "tenant_id", "name"),
    constants.ATTENDANCE_TABLE: (
        "id",
        "tenant_id",
        "worker_id",
        "work_date",
        "status",
        "wage_calculated",
        "previous_status",
        "voided_at",
        "voided_by",
        "created_at",
    ),
}

UNIQUE_INDEXES: tuple[UniqueIndex, ...] = (
    UniqueIndex(
        name="uq_workers_tenant_national_id",
        table=constants.WORKERS_TABLE,
        columns=("tenant_id", "national_id"),
        where=(Condition("archived_at", "eq", None),),
    ),
    UniqueIndex(
        name="uq_categories_tenant_name",
        table=constants.CATEGORIES_TABLE,
        columns=("tenant_id", "name"),
    ),
    UniqueIndex(
        name="uq_attendance_active_key",
        table=constants.ATTENDANCE_TABLE,
        columns=("worker_id", "work_date"),
        where=(Condition("status", "neq", AttendanceStatus.VOIDED.value),),
    ),
)


def indexes_for(table: str) -> tuple[UniqueIndex, ...]:
    return tuple(ix for ix in UNIQUE_INDEXES if ix.table == table)


def conflict_index(table: str, conflict_key: Sequence[str]) -> Optional[UniqueIndex]:
    """Find the unique index an upsert's conflict key refers to."""
    for ix in indexes_for(table):
        if tuple(ix.columns) == tuple(conflict_key):
            return ix
    return None


def require_columns(table: str, columns: Sequence[str]) -> None:
    known = TABLE_COLUMNS.get(table)
    if known is None:
        raise ValueError(f"Unknown table: {table!r}")
    unknown = [c for c in columns if c not in known]
    if unknown:
        raise ValueError(f"Unknown column(s) for {table}: {', '.join(unknown)}")


class RecordStore(Protocol):
    """Generic async record store used by the repositories.

    Implementations enforce ``UNIQUE_INDEXES`` and report violations with
    ``UniqueViolation``; transport failures surface as ``StoreUnavailable``.
    """

    async def query(
        self,
        table: str,
        conditions: Sequence[Condition] = (),
        order: Sequence[OrderBy] = (),
    ) -> list[Row]:
        raise NotImplementedError

    async def insert(self, table: str, row: Row) -> Row:
        raise NotImplementedError

    async def upsert(self, table: str, rows: Sequence[Row], conflict_key: Sequence[str]) -> list[tuple[Row, bool]]:
        """Insert ``rows`` in one batch.

        A row colliding with an existing row on the unique index named by
        ``conflict_key`` is not written; the existing row is returned in its
        place. Returns ``(row, inserted)`` pairs in input order.
        """

        raise NotImplementedError

    async def update(
        self,
        table: str,
        row_id: str,
        patch: Row,
        conditions: Sequence[Condition] = (),
    ) -> Optional[Row]:
        """Apply ``patch`` if the row exists and matches ``conditions``."""

        raise NotImplementedError

    def subscribe(self, table: str, on_change: ChangeListener) -> Unsubscribe:
        raise NotImplementedError
