"""querydeck - one async interface to MySQL, PostgreSQL, SQLite and MongoDB."""

from .constants import SERVER_VERSION as __version__
from .errors import (
    ConnectionFailedError,
    DatabaseError,
    InvalidConfigurationError,
    NotConnectedError,
    QueryExecutionError,
    SchemaRetrievalError,
)
from .models import (
    ColumnInfo,
    ConnectionConfig,
    DatabaseSchema,
    EngineKind,
    QueryResult,
    TableInfo,
)
from .session import DatabaseSession

__all__ = [
    "ColumnInfo",
    "ConnectionConfig",
    "ConnectionFailedError",
    "DatabaseError",
    "DatabaseSchema",
    "DatabaseSession",
    "EngineKind",
    "InvalidConfigurationError",
    "NotConnectedError",
    "QueryExecutionError",
    "QueryResult",
    "SchemaRetrievalError",
    "TableInfo",
    "__version__",
]
