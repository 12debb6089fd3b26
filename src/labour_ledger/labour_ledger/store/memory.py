from __future__ import annotations

import copy
import threading
from functools import cmp_to_key
from typing import Optional, Sequence

from ..core.enums import ChangeKind
from ..core.exceptions import StoreUnavailable, UniqueViolation
from .base import (
    TABLE_COLUMNS,
    ChangeEvent,
    ChangeListener,
    Condition,
    OrderBy,
    Row,
    Unsubscribe,
    conflict_index,
    indexes_for,
    require_columns,
)
from .notifier import ChangeNotifier


def _compare(a: Row, b: Row, order: Sequence[OrderBy]) -> int:
    for o in order:
        x, y = a.get(o.column), b.get(o.column)
        if x == y:
            continue
        # NULLs sort first ascending, last descending (MySQL semantics).
        if x is None:
            result = -1
        elif y is None:
            result = 1
        else:
            result = -1 if x < y else 1
        return -result if o.descending else result
    return 0


class InMemoryRecordStore:
    """Record store kept in process memory.

    Used by the test-suite and the ``memory`` backend. Rows are copied on the
    way in and out so callers never share mutable state with the store.
    """

    def __init__(self):
        self._tables: dict[str, dict[str, Row]] = {name: {} for name in TABLE_COLUMNS}
        self._lock = threading.Lock()
        self._notifier = ChangeNotifier()
        self.available = True

    def _check_available(self) -> None:
        if not self.available:
            raise StoreUnavailable("In-memory store is marked unavailable")

    def _table(self, table: str) -> dict[str, Row]:
        if table not in self._tables:
            raise ValueError(f"Unknown table: {table!r}")
        return self._tables[table]

    def _violated_index(self, table: str, candidate: Row, *, ignore_id: Optional[str] = None):
        for ix in indexes_for(table):
            if not ix.applies_to(candidate):
                continue
            key = ix.key(candidate)
            for row in self._tables[table].values():
                if row["id"] == ignore_id:
                    continue
                if ix.applies_to(row) and ix.key(row) == key:
                    return ix, row
        return None

    async def query(
        self,
        table: str,
        conditions: Sequence[Condition] = (),
        order: Sequence[OrderBy] = (),
    ) -> list[Row]:
        self._check_available()
        require_columns(table, [c.column for c in conditions] + [o.column for o in order])
        with self._lock:
            rows = [copy.deepcopy(r) for r in self._table(table).values() if all(c.matches(r) for c in conditions)]
        if order:
            rows.sort(key=cmp_to_key(lambda a, b: _compare(a, b, order)))
        return rows

    async def insert(self, table: str, row: Row) -> Row:
        self._check_available()
        require_columns(table, list(row))
        stored = {column: row.get(column) for column in TABLE_COLUMNS[table]}
        with self._lock:
            rows = self._table(table)
            if stored["id"] in rows:
                raise UniqueViolation(f"Duplicate id {stored['id']!r} in {table}", index="PRIMARY")
            hit = self._violated_index(table, stored)
            if hit:
                raise UniqueViolation(f"Duplicate entry for {hit[0].name}", index=hit[0].name)
            rows[stored["id"]] = stored
            result = copy.deepcopy(stored)
        await self._notifier.publish([ChangeEvent(table, ChangeKind.INSERT, copy.deepcopy(result))])
        return result

    async def upsert(self, table: str, rows: Sequence[Row], conflict_key: Sequence[str]) -> list[tuple[Row, bool]]:
        self._check_available()
        index = conflict_index(table, conflict_key)
        if index is None:
            raise ValueError(f"No unique index on {table}({', '.join(conflict_key)})")

        results: list[tuple[Row, bool]] = []
        events: list[ChangeEvent] = []
        with self._lock:
            existing = self._table(table)
            staged: dict[str, Row] = {}
            for row in rows:
                require_columns(table, list(row))
                stored = {column: row.get(column) for column in TABLE_COLUMNS[table]}
                if stored["id"] in existing or stored["id"] in staged:
                    raise UniqueViolation(f"Duplicate id {stored['id']!r} in {table}", index="PRIMARY")
                collision = None
                if index.applies_to(stored):
                    key = index.key(stored)
                    for other in list(existing.values()) + list(staged.values()):
                        if index.applies_to(other) and index.key(other) == key:
                            collision = other
                            break
                if collision is not None:
                    results.append((copy.deepcopy(collision), False))
                    continue
                staged[stored["id"]] = stored
                results.append((copy.deepcopy(stored), True))
            # Other unique indexes are checked before anything becomes visible.
            for stored in staged.values():
                for ix in indexes_for(table):
                    if ix is index or not ix.applies_to(stored):
                        continue
                    key = ix.key(stored)
                    for other in list(existing.values()) + [r for r in staged.values() if r is not stored]:
                        if ix.applies_to(other) and ix.key(other) == key:
                            raise UniqueViolation(f"Duplicate entry for {ix.name}", index=ix.name)
            existing.update(staged)
            events = [ChangeEvent(table, ChangeKind.INSERT, copy.deepcopy(r)) for r in staged.values()]
        await self._notifier.publish(events)
        return results

    async def update(
        self,
        table: str,
        row_id: str,
        patch: Row,
        conditions: Sequence[Condition] = (),
    ) -> Optional[Row]:
        self._check_available()
        require_columns(table, list(patch) + [c.column for c in conditions])
        with self._lock:
            rows = self._table(table)
            current = rows.get(row_id)
            if current is None or not all(c.matches(current) for c in conditions):
                return None
            updated = {**current, **patch, "id": row_id}
            hit = self._violated_index(table, updated, ignore_id=row_id)
            if hit:
                raise UniqueViolation(f"Duplicate entry for {hit[0].name}", index=hit[0].name)
            rows[row_id] = updated
            result = copy.deepcopy(updated)
        await self._notifier.publish([ChangeEvent(table, ChangeKind.UPDATE, copy.deepcopy(result))])
        return result

    def subscribe(self, table: str, on_change: ChangeListener) -> Unsubscribe:
        self._table(table)
        return self._notifier.subscribe(table, on_change)
