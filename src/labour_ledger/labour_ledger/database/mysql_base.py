from __future__ import annotations

import logging
from contextlib import asynccontextmanager, contextmanager
from typing import Any, AsyncIterator, Dict, Iterator, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import StoreUnavailable, UniqueViolation
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


@contextmanager
def translate_mysql_errors(action: str) -> Iterator[None]:
    """Map mysql-connector errors onto the store error taxonomy."""
    try:
        yield
    except mysql.connector.IntegrityError as exc:
        if exc.errno == errorcode.ER_DUP_ENTRY:
            raise UniqueViolation(str(exc.msg or exc)) from exc
        logger.exception("MySQL integrity error during %s", action)
        raise StoreUnavailable(f"{action} failed: {exc}") from exc
    except mysql.connector.Error as exc:
        logger.exception("MySQL error during %s", action)
        raise StoreUnavailable(f"{action} failed: {exc}") from exc


@asynccontextmanager
async def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True) -> AsyncIterator[tuple[Any, Any]]:
    conn = await conn_factory.connect()
    try:
        cur = await conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            await conn.commit()
        finally:
            await cur.close()
    except Exception:
        await conn.rollback()
        raise
    finally:
        await conn.close()


async def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = await cur.fetchone()
    return row if row else None


async def fetchall(cur) -> List[Dict[str, Any]]:
    rows = await cur.fetchall()
    return list(rows or [])
