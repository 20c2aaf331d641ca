"""Engine-independent database operations.

Every function takes the ConnectionHandle it works on; nothing here keeps
state between calls. Driver exceptions are wrapped into the error kinds of
``querydeck.errors`` with the driver's message preserved, and nothing is
retried.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from ..errors import (
    ConnectionFailedError,
    DatabaseError,
    NotConnectedError,
    QueryExecutionError,
    SchemaRetrievalError,
)
from ..models import ConnectionConfig, DatabaseSchema, QueryResult
from .adapters import get_adapter
from .connection import build_connection_string
from .handle import ConnectionHandle
from .logging import (
    QueryTimer,
    log_close,
    log_connection,
    log_query_execution,
    log_schema_introspection,
)

logger = logging.getLogger(__name__)


def _require(handle: Optional[ConnectionHandle]) -> ConnectionHandle:
    if handle is None:
        raise NotConnectedError()
    return handle


@contextmanager
def _wrap_driver_errors(handle: ConnectionHandle, error_class: type, action: str) -> Iterator[None]:
    """Re-raise the engine's driver errors as ``error_class``."""
    adapter = get_adapter(handle.kind)
    try:
        yield
    except DatabaseError:
        raise
    except adapter.DRIVER_ERRORS as e:
        error_msg = f"{handle.kind.display_name} {action} failed: {e}"
        logger.error(error_msg)
        raise error_class(error_msg) from e


async def connect(config: ConnectionConfig) -> ConnectionHandle:
    """Open a connection for ``config`` and verify it with a probe.

    Raises:
        InvalidConfigurationError: If the configuration is incomplete
        ConnectionFailedError: If the engine cannot be reached or the probe fails
    """
    config.validate()
    adapter = get_adapter(config.engine)
    dsn = build_connection_string(config, include_password=False)
    engine_name = config.engine.display_name

    timer = QueryTimer()
    handle = None
    connected = False

    def log_failure(error_msg: str) -> None:
        log_connection(dsn, success=False, error=error_msg, duration=timer.duration)
        logger.error(error_msg)

    try:
        with timer:
            handle = await adapter.connect(config, dsn)
            await adapter.probe(handle)
        connected = True
    except DatabaseError as e:
        log_failure(str(e))
        raise
    except Exception as e:
        error_msg = f"Failed to connect to {engine_name}: {e}"
        log_failure(error_msg)
        raise ConnectionFailedError(error_msg) from e
    finally:
        # A pool that opened but was not probed successfully is never handed
        # out, including when the task is cancelled
        if not connected and handle is not None:
            await close(handle)

    log_connection(dsn, success=True, duration=timer.duration)
    logger.info(f"Connected to {engine_name} database: {config.database or '(default)'}")
    return handle


async def test_connection(handle: Optional[ConnectionHandle]) -> None:
    """Re-run the connect probe against ``handle``.

    Raises:
        NotConnectedError: If ``handle`` is None
        ConnectionFailedError: If the probe fails
    """
    handle = _require(handle)
    with _wrap_driver_errors(handle, ConnectionFailedError, "connection test"):
        await get_adapter(handle.kind).probe(handle)


async def get_schema(handle: Optional[ConnectionHandle]) -> DatabaseSchema:
    """Introspect tables (collections) and their columns.

    Either the whole schema is returned or SchemaRetrievalError is raised;
    tables collected before a failure are discarded.
    """
    handle = _require(handle)
    timer = QueryTimer()
    try:
        with timer, _wrap_driver_errors(handle, SchemaRetrievalError, "schema retrieval"):
            schema = await get_adapter(handle.kind).get_schema(handle)
    except DatabaseError as e:
        log_schema_introspection(handle.dsn, success=False, duration=timer.duration, error=str(e))
        raise

    log_schema_introspection(
        handle.dsn, success=True, table_count=len(schema.tables), duration=timer.duration
    )
    return schema


async def execute_query(handle: Optional[ConnectionHandle], query: str) -> QueryResult:
    """Execute ``query`` verbatim and return the fully buffered result.

    For MongoDB the query text is ignored and a (collection, count)
    summary is returned.

    Raises:
        NotConnectedError: If ``handle`` is None
        QueryExecutionError: If the engine rejects or fails the query
    """
    handle = _require(handle)
    timer = QueryTimer()
    try:
        with timer, _wrap_driver_errors(handle, QueryExecutionError, "query"):
            result = await get_adapter(handle.kind).execute_query(handle, query)
    except DatabaseError as e:
        log_query_execution(query, handle.dsn, success=False, duration=timer.duration, error=str(e))
        raise

    log_query_execution(
        query, handle.dsn, success=True, row_count=result.row_count, duration=timer.duration
    )
    return result


async def list_databases(handle: Optional[ConnectionHandle]) -> list[str]:
    """Names of the databases visible on the server (``["main"]`` for SQLite)."""
    handle = _require(handle)
    with _wrap_driver_errors(handle, ConnectionFailedError, "database listing"):
        return await get_adapter(handle.kind).list_databases(handle)


async def list_tables(handle: Optional[ConnectionHandle]) -> list[str]:
    """Names of the tables (collections) in the current database."""
    handle = _require(handle)
    with _wrap_driver_errors(handle, ConnectionFailedError, "table listing"):
        return await get_adapter(handle.kind).list_tables(handle)


async def close(handle: ConnectionHandle) -> None:
    """Release the handle's pool or client.

    Errors raised while closing are logged, not propagated: the handle is
    unusable afterwards either way.
    """
    try:
        await get_adapter(handle.kind).close(handle)
    except Exception as e:
        logger.warning(f"Error closing {handle.kind.display_name} connection: {e}")
        log_close(handle.dsn, error=str(e))
        return
    log_close(handle.dsn)
