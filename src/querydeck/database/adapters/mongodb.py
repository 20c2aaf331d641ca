"""MongoDB database adapter implementation.

MongoDB has no declared schema: columns are inferred from one sample
document per collection, so an empty collection has no columns and a
heterogeneous one reports only the fields of whichever document the server
returns first.
"""

import datetime
import logging
from collections.abc import Mapping
from typing import Any

from bson import Int64, ObjectId
from bson.datetime_ms import DatetimeMS
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from ...coercion import INT32_MAX, INT32_MIN
from ...constants import DB_CONNECT_TIMEOUT, DB_POOL_SIZE, MONGODB_DEFAULT_DATABASE
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

logger = logging.getLogger(__name__)

DRIVER_ERRORS = (PyMongoError,)

PRIMARY_KEY_FIELD = "_id"
SUMMARY_COLUMNS = ("collection", "count")


def bson_type_label(value: Any) -> str:
    """Name the BSON type of a decoded document value."""
    if isinstance(value, bool):
        return "Boolean"
    if isinstance(value, Int64):
        return "Int64"
    if isinstance(value, int):
        return "Int32" if INT32_MIN <= value <= INT32_MAX else "Int64"
    if isinstance(value, float):
        return "Double"
    if isinstance(value, str):
        return "String"
    if isinstance(value, (datetime.datetime, DatetimeMS)):
        return "DateTime"
    if isinstance(value, ObjectId):
        return "ObjectId"
    if isinstance(value, list):
        return "Array"
    if isinstance(value, Mapping):
        return "Document"
    return "Unknown"


def infer_columns(document: Mapping) -> tuple[ColumnInfo, ...]:
    """One nullable column per top-level field; ``_id`` is the primary key."""
    return tuple(
        ColumnInfo(
            name=str(key),
            data_type=bson_type_label(value),
            is_nullable=True,
            is_primary_key=key == PRIMARY_KEY_FIELD,
        )
        for key, value in document.items()
    )


async def connect(config: ConnectionConfig, dsn: str) -> ConnectionHandle:
    """Create the client and select the configured database (default ``admin``)."""
    timeout_ms = int(DB_CONNECT_TIMEOUT * 1000)
    client = AsyncMongoClient(
        build_connection_string(config),
        serverSelectionTimeoutMS=timeout_ms,
        connectTimeoutMS=timeout_ms,
        maxPoolSize=DB_POOL_SIZE,
    )
    database = client[config.database or MONGODB_DEFAULT_DATABASE]
    return ConnectionHandle(kind=EngineKind.MONGODB, pool=client, database=database, dsn=dsn)


async def probe(handle: ConnectionHandle) -> None:
    await handle.database.list_collection_names()


async def get_schema(handle: ConnectionHandle) -> DatabaseSchema:
    """Infer one table per collection from a single sample document."""
    collection_names = await handle.database.list_collection_names()

    tables = []
    for collection_name in collection_names:
        sample = await handle.database[collection_name].find_one()
        columns = infer_columns(sample) if sample else ()
        tables.append(TableInfo(name=collection_name, columns=columns))

    return DatabaseSchema(tables=tuple(tables))


async def execute_query(handle: ConnectionHandle, query: str) -> QueryResult:
    """Summarize the database as (collection, document count) rows.

    The query text is not interpreted.
    """
    logger.info("MongoDB query text is not interpreted; returning collection summary")
    collection_names = await handle.database.list_collection_names()

    rows = []
    for collection_name in collection_names:
        count = await handle.database[collection_name].count_documents({})
        rows.append((collection_name, int(count)))

    return QueryResult.from_rows(SUMMARY_COLUMNS, rows)


async def list_databases(handle: ConnectionHandle) -> list[str]:
    return list(await handle.pool.list_database_names())


async def list_tables(handle: ConnectionHandle) -> list[str]:
    return list(await handle.database.list_collection_names())


async def close(handle: ConnectionHandle) -> None:
    await handle.pool.close()
