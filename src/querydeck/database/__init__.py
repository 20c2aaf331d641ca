"""Database integration module for querydeck.

This module connects to MySQL, PostgreSQL, SQLite and MongoDB and exposes
them through one set of async operations with a normalized result model.

Architecture:
- core.py: connect, probe, introspect, execute, list (engine-independent)
- handle.py: ConnectionHandle, the live connection of one engine
- connection.py: DSN parsing/building and the SQLite connection pool
- formatting.py: Result formatting for AI consumption
- logging.py: Structured JSON event logging
- adapters/: Database-specific implementations (MySQL, PostgreSQL, SQLite, MongoDB)
"""

from querydeck.database.connection import ConnectionPool, build_connection_string, parse_dsn
from querydeck.database.core import (
    close,
    connect,
    execute_query,
    get_schema,
    list_databases,
    list_tables,
    test_connection,
)
from querydeck.database.formatting import format_query_result, format_schema
from querydeck.database.handle import ConnectionHandle

__all__ = [
    "ConnectionHandle",
    "ConnectionPool",
    "build_connection_string",
    "close",
    "connect",
    "execute_query",
    "format_query_result",
    "format_schema",
    "get_schema",
    "list_databases",
    "list_tables",
    "parse_dsn",
    "test_connection",
]
