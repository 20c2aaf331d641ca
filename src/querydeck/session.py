"""The application's single active database connection."""

import asyncio
import logging
from typing import Optional

from .database import core
from .database.handle import ConnectionHandle
from .errors import NotConnectedError
from .models import ConnectionConfig, DatabaseSchema, QueryResult

logger = logging.getLogger(__name__)


class DatabaseSession:
    """Holds at most one active ConnectionHandle and its configuration.

    The lock is held only to read or swap the handle, never across I/O, so
    a slow query does not block other operations. A query that already
    picked up a handle keeps running against it even if the session
    disconnects meanwhile; the closed pool then reports connection errors.
    """

    def __init__(self):
        self._lock = asyncio.Lock()
        self._handle: Optional[ConnectionHandle] = None
        self._config: Optional[ConnectionConfig] = None

    @property
    def is_connected(self) -> bool:
        return self._handle is not None

    async def connect(self, config: ConnectionConfig) -> ConnectionHandle:
        """Connect with ``config`` and make it the active connection.

        The previous connection, if any, is closed once replaced. If
        connecting fails the previous connection stays active.
        """
        handle = await core.connect(config)

        async with self._lock:
            previous = self._handle
            self._handle = handle
            self._config = config

        if previous is not None:
            logger.info(f"Replacing active {previous.kind.display_name} connection")
            await core.close(previous)
        return handle

    async def disconnect(self) -> bool:
        """Close the active connection. Returns False if there was none."""
        async with self._lock:
            previous = self._handle
            self._handle = None
            self._config = None

        if previous is None:
            return False
        await core.close(previous)
        return True

    async def get_config(self) -> Optional[ConnectionConfig]:
        async with self._lock:
            return self._config

    async def current_handle(self) -> ConnectionHandle:
        """Return the active handle.

        Raises:
            NotConnectedError: If no connection is active
        """
        async with self._lock:
            if self._handle is None:
                raise NotConnectedError()
            return self._handle

    async def test_connection(self) -> None:
        await core.test_connection(await self.current_handle())

    async def get_schema(self) -> DatabaseSchema:
        return await core.get_schema(await self.current_handle())

    async def execute_query(self, query: str) -> QueryResult:
        return await core.execute_query(await self.current_handle(), query)

    async def list_databases(self) -> list[str]:
        return await core.list_databases(await self.current_handle())

    async def list_tables(self) -> list[str]:
        return await core.list_tables(await self.current_handle())
