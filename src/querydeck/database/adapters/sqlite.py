"""SQLite database adapter implementation."""

import logging
import sqlite3
from urllib.parse import quote

import aiosqlite

from ...coercion import build_result
from ...constants import DB_CONNECT_TIMEOUT, DB_POOL_SIZE, SQLITE_DATABASE_NAME
from ...models import (
    ColumnInfo,
    ConnectionConfig,
    DatabaseSchema,
    EngineKind,
    QueryResult,
    TableInfo,
)
from ..connection import ConnectionPool
from ..handle import ConnectionHandle

logger = logging.getLogger(__name__)

# aiosqlite raises ValueError when used after its connection was closed
DRIVER_ERRORS = (sqlite3.Error, OSError, ValueError)

TABLES_QUERY = "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"


def _database_uri(path: str) -> str:
    # mode=rw: an existing file is required, a missing one is an error
    return f"file:{quote(path)}?mode=rw"


def _quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


async def connect(config: ConnectionConfig, dsn: str) -> ConnectionHandle:
    """Create a pool of autocommit aiosqlite connections to the database file.

    Connections are opened lazily; the connect probe opens the first one.
    """
    uri = _database_uri(config.database)

    async def open_connection() -> aiosqlite.Connection:
        return await aiosqlite.connect(
            uri,
            uri=True,
            isolation_level=None,
            timeout=DB_CONNECT_TIMEOUT,
        )

    pool = ConnectionPool(dsn, open_connection, pool_size=DB_POOL_SIZE)
    logger.debug(f"Created SQLite pool for {config.database}")
    return ConnectionHandle(kind=EngineKind.SQLITE, pool=pool, dsn=dsn)


async def _fetch(handle: ConnectionHandle, query: str):
    """Run ``query`` on a pooled connection, returning (description, rows)."""
    async with handle.pool.connection() as conn:
        async with conn.execute(query) as cursor:
            rows = await cursor.fetchall()
            return cursor.description, list(rows)


async def probe(handle: ConnectionHandle) -> None:
    await _fetch(handle, "SELECT 1")


async def get_schema(handle: ConnectionHandle) -> DatabaseSchema:
    """Read tables from sqlite_master and columns from ``PRAGMA table_info``."""
    _, table_rows = await _fetch(handle, TABLES_QUERY)

    tables = []
    for (table_name,) in table_rows:
        _, column_rows = await _fetch(handle, f"PRAGMA table_info({_quote_identifier(table_name)})")

        # cid, name, type, notnull, dflt_value, pk
        columns = tuple(
            ColumnInfo(
                name=name,
                data_type=declared_type or "",
                is_nullable=not_null == 0,
                is_primary_key=pk == 1,
            )
            for _cid, name, declared_type, not_null, _default, pk in column_rows
        )
        tables.append(TableInfo(name=table_name, columns=columns))

    return DatabaseSchema(tables=tuple(tables))


async def execute_query(handle: ConnectionHandle, query: str) -> QueryResult:
    description, rows = await _fetch(handle, query)
    if not rows:
        return QueryResult.empty()
    columns = [column[0] for column in description]
    return build_result(columns, rows)


async def list_databases(handle: ConnectionHandle) -> list[str]:
    # A database file has a single database
    return [SQLITE_DATABASE_NAME]


async def list_tables(handle: ConnectionHandle) -> list[str]:
    _, rows = await _fetch(handle, "SELECT name FROM sqlite_master WHERE type='table'")
    return [row[0] for row in rows]


async def close(handle: ConnectionHandle) -> None:
    await handle.pool.close_all()
