"""MySQL database adapter implementation."""

import asyncio
from typing import Any, Optional, Sequence

import aiomysql
import pymysql

from ...coercion import build_result
from ...constants import DB_CONNECT_TIMEOUT, DB_POOL_MIN_SIZE, DB_POOL_SIZE
from ...models import (
    ColumnInfo,
    ConnectionConfig,
    DatabaseSchema,
    EngineKind,
    QueryResult,
    TableInfo,
    optional_str,
)
from ..handle import ConnectionHandle

# aiomysql raises RuntimeError when acquiring from a closed pool
DRIVER_ERRORS = (pymysql.err.MySQLError, OSError, RuntimeError, asyncio.TimeoutError)

TABLES_QUERY = "SELECT TABLE_NAME FROM INFORMATION_SCHEMA.TABLES WHERE TABLE_SCHEMA = DATABASE()"

COLUMNS_QUERY = """
    SELECT
        COLUMN_NAME,
        DATA_TYPE,
        IS_NULLABLE,
        COLUMN_KEY
    FROM INFORMATION_SCHEMA.COLUMNS
    WHERE TABLE_SCHEMA = DATABASE() AND TABLE_NAME = %s
    ORDER BY ORDINAL_POSITION
"""


async def connect(config: ConnectionConfig, dsn: str) -> ConnectionHandle:
    """Create an autocommit aiomysql pool for ``config``."""
    connection_params = {
        "host": config.host,
        "port": config.port,
        "user": config.username or None,
        "password": config.password,
        "connect_timeout": DB_CONNECT_TIMEOUT,
        "charset": "utf8mb4",
        "autocommit": True,
        "minsize": DB_POOL_MIN_SIZE,
        "maxsize": DB_POOL_SIZE,
    }

    # Only select a database if one is configured
    if config.database:
        connection_params["db"] = config.database

    pool = await aiomysql.create_pool(**connection_params)
    return ConnectionHandle(kind=EngineKind.MYSQL, pool=pool, dsn=dsn)


async def _fetch(
    handle: ConnectionHandle, query: str, args: Optional[Sequence[Any]] = None
) -> tuple[Optional[tuple], list[tuple]]:
    """Run ``query`` on a pooled connection, returning (description, rows).

    ``args`` of None leaves the query text untouched (no %-interpolation).
    """
    async with handle.pool.acquire() as conn:
        async with conn.cursor() as cursor:
            await cursor.execute(query, args)
            rows = await cursor.fetchall()
            return cursor.description, list(rows)


async def probe(handle: ConnectionHandle) -> None:
    await _fetch(handle, "SELECT 1")


async def get_schema(handle: ConnectionHandle) -> DatabaseSchema:
    """Read tables and columns of the current database from INFORMATION_SCHEMA."""
    _, table_rows = await _fetch(handle, TABLES_QUERY)

    tables = []
    for table_row in table_rows:
        table_name = optional_str(table_row[0])
        _, column_rows = await _fetch(handle, COLUMNS_QUERY, (table_name,))

        columns = tuple(
            ColumnInfo(
                name=optional_str(column_name),
                data_type=optional_str(data_type),
                is_nullable=optional_str(is_nullable).upper() == "YES",
                is_primary_key=optional_str(column_key).upper() == "PRI",
            )
            for column_name, data_type, is_nullable, column_key in column_rows
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
    _, rows = await _fetch(handle, "SHOW DATABASES")
    return [optional_str(row[0]) for row in rows]


async def list_tables(handle: ConnectionHandle) -> list[str]:
    _, rows = await _fetch(handle, "SHOW TABLES")
    return [optional_str(row[0]) for row in rows]


async def close(handle: ConnectionHandle) -> None:
    handle.pool.close()
    await handle.pool.wait_closed()
