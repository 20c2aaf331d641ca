"""Error kinds raised by querydeck operations.

Every driver error is wrapped into one of these, with the driver's message
kept verbatim in ``detail``. Each kind also derives from the builtin
exception callers would naturally catch for it (``ConnectionError``,
``RuntimeError`` or ``ValueError``).
"""


class DatabaseError(Exception):
    """Base class for all querydeck errors."""

    description = "Database error"

    def __init__(self, detail: str = ""):
        self.detail = detail
        if detail:
            message = f"{self.description}: {detail}"
        else:
            message = self.description
        super().__init__(message)


class ConnectionFailedError(DatabaseError, ConnectionError):
    """Opening, probing or using a connection failed (network, auth, bad target)."""

    description = "Database connection failed"


class NotConnectedError(DatabaseError, ConnectionError):
    """An operation was attempted while no connection is active."""

    description = "Database not connected"


class QueryExecutionError(DatabaseError, RuntimeError):
    """The engine rejected or failed a query."""

    description = "Query execution failed"


class SchemaRetrievalError(DatabaseError, RuntimeError):
    """A catalog query failed during schema introspection."""

    description = "Schema retrieval failed"


class InvalidConfigurationError(DatabaseError, ValueError):
    """A connection configuration is missing a field its engine requires."""

    description = "Invalid configuration"
