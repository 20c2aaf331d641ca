"""Database adapters for different database types.

Each adapter module provides the same coroutine functions, all taking a
ConnectionHandle of its engine: ``connect(config, dsn)``, ``probe``,
``get_schema``, ``execute_query``, ``list_databases``, ``list_tables`` and
``close``, plus ``DRIVER_ERRORS``, the exceptions its driver raises.
"""

from types import ModuleType

from ...models import EngineKind
from . import mongodb, mysql, postgresql, sqlite

ADAPTERS: dict[EngineKind, ModuleType] = {
    EngineKind.MYSQL: mysql,
    EngineKind.POSTGRESQL: postgresql,
    EngineKind.SQLITE: sqlite,
    EngineKind.MONGODB: mongodb,
}

__all__ = [
    "ADAPTERS",
    "get_adapter",
    "mongodb",
    "mysql",
    "postgresql",
    "sqlite",
]


def get_adapter(kind) -> ModuleType:
    """Return the adapter module for an engine kind (or engine name).

    Raises:
        InvalidConfigurationError: If the engine is not supported
    """
    return ADAPTERS[EngineKind.parse(kind)]
