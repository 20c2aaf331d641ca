"""PostgreSQL database adapter implementation."""

import asyncio

import asyncpg

from ...coercion import build_result
from ...constants import DB_CONNECT_TIMEOUT, DB_POOL_MIN_SIZE, DB_POOL_SIZE
from ...models import (
    ColumnInfo,
    ConnectionConfig,
    DatabaseSchema,
    EngineKind,
    QueryResult,
    TableInfo,
)
from ..connection import build_connection_string
from ..handle import ConnectionHandle

# asyncpg raises InterfaceError for a closed pool and OSError for network failures
DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)

TABLES_QUERY = """
    SELECT table_name
    FROM information_schema.tables
    WHERE table_schema = 'public'
    ORDER BY table_name
"""

COLUMNS_QUERY = """
    SELECT
        c.column_name,
        c.data_type,
        c.is_nullable,
        CASE WHEN pk.column_name IS NOT NULL THEN true ELSE false END AS is_primary_key
    FROM information_schema.columns c
    LEFT JOIN (
        SELECT ku.table_name, ku.column_name
        FROM information_schema.table_constraints tc
        JOIN information_schema.key_column_usage ku
            ON tc.constraint_name = ku.constraint_name
            AND tc.table_schema = ku.table_schema
        WHERE tc.constraint_type = 'PRIMARY KEY'
            AND tc.table_schema = 'public'
    ) pk ON c.table_name = pk.table_name AND c.column_name = pk.column_name
    WHERE c.table_schema = 'public' AND c.table_name = $1
    ORDER BY c.ordinal_position
"""


async def connect(config: ConnectionConfig, dsn: str) -> ConnectionHandle:
    """Create an asyncpg pool from the configuration's connection string."""
    pool = await asyncpg.create_pool(
        dsn=build_connection_string(config),
        min_size=DB_POOL_MIN_SIZE,
        max_size=DB_POOL_SIZE,
        timeout=DB_CONNECT_TIMEOUT,
    )
    return ConnectionHandle(kind=EngineKind.POSTGRESQL, pool=pool, dsn=dsn)


async def probe(handle: ConnectionHandle) -> None:
    await handle.pool.fetchval("SELECT 1")


async def get_schema(handle: ConnectionHandle) -> DatabaseSchema:
    """Read tables and columns of the ``public`` schema from information_schema."""
    table_rows = await handle.pool.fetch(TABLES_QUERY)

    tables = []
    for table_row in table_rows:
        table_name = table_row["table_name"]
        column_rows = await handle.pool.fetch(COLUMNS_QUERY, table_name)

        columns = tuple(
            ColumnInfo(
                name=row["column_name"],
                data_type=row["data_type"],
                is_nullable=row["is_nullable"] == "YES",
                is_primary_key=bool(row["is_primary_key"]),
            )
            for row in column_rows
        )
        tables.append(TableInfo(name=table_name, columns=columns))

    return DatabaseSchema(tables=tuple(tables))


async def execute_query(handle: ConnectionHandle, query: str) -> QueryResult:
    records = await handle.pool.fetch(query)
    if not records:
        return QueryResult.empty()
    columns = list(records[0].keys())
    return build_result(columns, records)


async def list_databases(handle: ConnectionHandle) -> list[str]:
    rows = await handle.pool.fetch("SELECT datname FROM pg_database WHERE datistemplate = false")
    return [row["datname"] for row in rows]


async def list_tables(handle: ConnectionHandle) -> list[str]:
    rows = await handle.pool.fetch("SELECT tablename FROM pg_tables WHERE schemaname = 'public'")
    return [row["tablename"] for row in rows]


async def close(handle: ConnectionHandle) -> None:
    await handle.pool.close()
