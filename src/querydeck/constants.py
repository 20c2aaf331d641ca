"""Constants and static configuration for the querydeck MCP server."""

# Application constants
SERVER_NAME = "querydeck"
SERVER_VERSION = "1.0.0"
EXIT_SUCCESS = 0
EXIT_FAILURE = 1

# Database constants
DB_POOL_SIZE = 5  # Maximum connections per pool
DB_POOL_MIN_SIZE = 1  # Connections opened eagerly when a pool is created
DB_CONNECT_TIMEOUT = 30.0  # Seconds allowed to open a connection (queries are not limited)

DEFAULT_PORTS = {
    "mysql": 3306,
    "postgresql": 5432,
    "sqlite": 0,  # Embedded engine, no network port
    "mongodb": 27017,
}

MONGODB_DEFAULT_DATABASE = "admin"  # Used when no database name is configured
SQLITE_DATABASE_NAME = "main"  # The only database an SQLite file exposes

# Value coercion
BLOB_SENTINEL = "BLOB_DATA"  # Binary cells that are not valid UTF-8
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M:%S"

# Logging
QUERY_PREVIEW_LENGTH = 100
