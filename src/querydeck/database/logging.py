"""Structured logging for database operations."""

import hashlib
import json
import logging
import re
import time
from typing import Optional

from ..constants import QUERY_PREVIEW_LENGTH

# Configure logger for database operations
db_logger = logging.getLogger("querydeck.database")


def sanitize_dsn(dsn: str) -> str:
    """Sanitize DSN by removing credentials.

    Args:
        dsn: Database connection string

    Returns:
        DSN with credentials masked
    """
    # Credentials end at the last @ that is followed by a host segment, so an
    # unencoded / or @ in the password is masked too. Paths (sqlite:///...) are kept.
    return re.sub(r"://(?!/).*@(?=[^@/]*(?:/|$))", "://***:***@", dsn)


def hash_query(query: str) -> str:
    """Generate hash of query for logging (deduplication).

    Args:
        query: SQL query

    Returns:
        SHA256 hash of query (first 16 characters)
    """
    return hashlib.sha256(query.encode()).hexdigest()[:16]


def _emit(log_data: dict, success: bool) -> None:
    if success:
        db_logger.info(json.dumps(log_data))
    else:
        db_logger.error(json.dumps(log_data))


def log_connection(dsn: str, success: bool, error: Optional[str] = None, duration: float = 0.0) -> None:
    """Log database connection attempt.

    Args:
        dsn: Database connection string (will be sanitized)
        success: Whether connection succeeded
        error: Error message if failed
        duration: Connection time in seconds
    """
    log_data = {
        "event": "database_connection",
        "dsn": sanitize_dsn(dsn),
        "success": success,
        "duration_seconds": round(duration, 3),
    }

    if error:
        log_data["error"] = error

    _emit(log_data, success)


def log_query_execution(
    query: str,
    dsn: str,
    success: bool,
    row_count: int = 0,
    duration: float = 0.0,
    error: Optional[str] = None,
) -> None:
    """Log query execution with metadata.

    Args:
        query: Query text (hashed, and previewed up to 100 characters)
        dsn: Database connection string (will be sanitized)
        success: Whether query executed successfully
        row_count: Number of rows returned
        duration: Query execution time in seconds
        error: Error message if failed
    """
    preview = query[:QUERY_PREVIEW_LENGTH]
    if len(query) > QUERY_PREVIEW_LENGTH:
        preview += "..."

    log_data = {
        "event": "query_execution",
        "query_hash": hash_query(query),
        "query_preview": preview,
        "dsn": sanitize_dsn(dsn),
        "success": success,
        "row_count": row_count,
        "duration_seconds": round(duration, 3),
        "timestamp": time.time(),
    }

    if error:
        log_data["error"] = error

    _emit(log_data, success)


def log_schema_introspection(
    dsn: str,
    success: bool,
    table_count: int = 0,
    duration: float = 0.0,
    error: Optional[str] = None,
) -> None:
    """Log a schema introspection call."""
    log_data = {
        "event": "schema_introspection",
        "dsn": sanitize_dsn(dsn),
        "success": success,
        "table_count": table_count,
        "duration_seconds": round(duration, 3),
    }

    if error:
        log_data["error"] = error

    _emit(log_data, success)


def log_pool_operation(dsn: str, operation: str, pool_size: int, active_connections: int) -> None:
    """Log connection pool operations.

    Args:
        dsn: Database connection string (will be sanitized)
        operation: Operation type (create, close_all)
        pool_size: Maximum pool size
        active_connections: Current number of open connections
    """
    log_data = {
        "event": "connection_pool",
        "dsn": sanitize_dsn(dsn),
        "operation": operation,
        "pool_size": pool_size,
        "active_connections": active_connections,
    }

    db_logger.debug(json.dumps(log_data))


def log_close(dsn: str, error: Optional[str] = None) -> None:
    """Log the release of a connection handle."""
    log_data = {
        "event": "connection_close",
        "dsn": sanitize_dsn(dsn),
        "success": error is None,
    }

    if error:
        log_data["error"] = error
        db_logger.warning(json.dumps(log_data))
    else:
        db_logger.info(json.dumps(log_data))


class QueryTimer:
    """Context manager for timing query execution."""

    def __init__(self):
        self.start_time: float = 0.0
        self.duration: float = 0.0

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.perf_counter() - self.start_time
