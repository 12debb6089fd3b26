from __future__ import annotations

from typing import Any, Optional, Sequence

from ..core.enums import ChangeKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, translate_mysql_errors
from .base import (
    TABLE_COLUMNS,
    ChangeEvent,
    ChangeListener,
    Condition,
    OrderBy,
    Row,
    Unsubscribe,
    conflict_index,
    require_columns,
)
from .notifier import ChangeNotifier


def _quote(column: str) -> str:
    return f"`{column}`"


def build_where(conditions: Sequence[Condition]) -> tuple[str, list[Any]]:
    """Render conditions as a SQL WHERE fragment with %s placeholders."""
    clauses: list[str] = []
    params: list[Any] = []
    for c in conditions:
        col = _quote(c.column)
        if c.op == "eq":
            if c.value is None:
                clauses.append(f"{col} IS NULL")
            else:
                clauses.append(f"{col}=%s")
                params.append(c.value)
        elif c.op == "neq":
            if c.value is None:
                clauses.append(f"{col} IS NOT NULL")
            else:
                clauses.append(f"({col}<>%s OR {col} IS NULL)")
                params.append(c.value)
        elif c.op == "in":
            values = list(c.value)
            if not values:
                clauses.append("1=0")
            else:
                clauses.append(f"{col} IN ({', '.join(['%s'] * len(values))})")
                params.extend(values)
        elif c.op == "gte":
            clauses.append(f"{col}>=%s")
            params.append(c.value)
        else:
            clauses.append(f"{col}<=%s")
            params.append(c.value)
    return (" AND ".join(clauses) or "1=1"), params


def build_order(order: Sequence[OrderBy]) -> str:
    if not order:
        return ""
    return " ORDER BY " + ", ".join(f"{_quote(o.column)} {'DESC' if o.descending else 'ASC'}" for o in order)


class MySQLRecordStore:
    """Record store backed by MySQL through mysql-connector's asyncio API.

    Change notifications cover writes made through this store instance.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory
        self._notifier = ChangeNotifier()

    @staticmethod
    def _select(table: str) -> str:
        return f"SELECT {', '.join(_quote(c) for c in TABLE_COLUMNS[table])} FROM {_quote(table)}"

    async def query(
        self,
        table: str,
        conditions: Sequence[Condition] = (),
        order: Sequence[OrderBy] = (),
    ) -> list[Row]:
        require_columns(table, [c.column for c in conditions] + [o.column for o in order])
        where, params = build_where(conditions)
        with translate_mysql_errors(f"query {table}"):
            async with db_cursor(self._conn_factory) as (_, cur):
                await cur.execute(f"{self._select(table)} WHERE {where}{build_order(order)}", tuple(params))
                return await fetchall(cur)

    async def _insert_row(self, cur, table: str, row: Row) -> Row:
        stored = {column: row.get(column) for column in TABLE_COLUMNS[table]}
        columns = list(stored)
        await cur.execute(
            f"INSERT INTO {_quote(table)}({', '.join(_quote(c) for c in columns)}) "
            f"VALUES({', '.join(['%s'] * len(columns))})",
            tuple(stored[c] for c in columns),
        )
        return stored

    async def insert(self, table: str, row: Row) -> Row:
        require_columns(table, list(row))
        with translate_mysql_errors(f"insert {table}"):
            async with db_cursor(self._conn_factory) as (_, cur):
                stored = await self._insert_row(cur, table, row)
        await self._notifier.publish([ChangeEvent(table, ChangeKind.INSERT, dict(stored))])
        return stored

    async def upsert(self, table: str, rows: Sequence[Row], conflict_key: Sequence[str]) -> list[tuple[Row, bool]]:
        index = conflict_index(table, conflict_key)
        if index is None:
            raise ValueError(f"No unique index on {table}({', '.join(conflict_key)})")

        results: list[tuple[Row, bool]] = []
        with translate_mysql_errors(f"upsert {table}"):
            async with db_cursor(self._conn_factory) as (_, cur):
                for row in rows:
                    require_columns(table, list(row))
                    existing = None
                    if index.applies_to(row):
                        key_conditions = [Condition(col, "eq", row.get(col)) for col in index.columns]
                        where, params = build_where(key_conditions + list(index.where))
                        await cur.execute(f"{self._select(table)} WHERE {where} FOR UPDATE", tuple(params))
                        existing = await fetchone(cur)
                    if existing is not None:
                        results.append((existing, False))
                    else:
                        results.append((await self._insert_row(cur, table, row), True))
        await self._notifier.publish(
            [ChangeEvent(table, ChangeKind.INSERT, dict(r)) for r, inserted in results if inserted]
        )
        return results

    async def update(
        self,
        table: str,
        row_id: str,
        patch: Row,
        conditions: Sequence[Condition] = (),
    ) -> Optional[Row]:
        require_columns(table, list(patch) + [c.column for c in conditions])
        where, params = build_where([Condition("id", "eq", row_id), *conditions])
        with translate_mysql_errors(f"update {table}"):
            async with db_cursor(self._conn_factory) as (_, cur):
                await cur.execute(f"{self._select(table)} WHERE {where} FOR UPDATE", tuple(params))
                current = await fetchone(cur)
                if current is None:
                    return None
                assignments = ", ".join(f"{_quote(c)}=%s" for c in patch)
                await cur.execute(
                    f"UPDATE {_quote(table)} SET {assignments} WHERE `id`=%s",
                    (*patch.values(), row_id),
                )
                updated = {**current, **patch}
        await self._notifier.publish([ChangeEvent(table, ChangeKind.UPDATE, dict(updated))])
        return updated

    def subscribe(self, table: str, on_change: ChangeListener) -> Unsubscribe:
        require_columns(table, [])
        return self._notifier.subscribe(table, on_change)
