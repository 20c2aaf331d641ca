"""Tests for the active-connection session."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from querydeck.database.adapters import sqlite as sqlite_adapter
from querydeck.errors import ConnectionFailedError, DatabaseError, NotConnectedError
from querydeck.models import ConnectionConfig, EngineKind, QueryResult
from querydeck.session import DatabaseSession


class TestNotConnected:
    @pytest.mark.asyncio
    async def test_operations_fail_before_connect(self):
        session = DatabaseSession()

        assert not session.is_connected
        assert await session.get_config() is None
        with pytest.raises(NotConnectedError):
            await session.test_connection()
        with pytest.raises(NotConnectedError):
            await session.get_schema()
        with pytest.raises(NotConnectedError):
            await session.execute_query("SELECT 1")
        with pytest.raises(NotConnectedError):
            await session.list_databases()
        with pytest.raises(NotConnectedError):
            await session.list_tables()

    @pytest.mark.asyncio
    async def test_disconnect_without_connection(self):
        assert await DatabaseSession().disconnect() is False

    @pytest.mark.asyncio
    async def test_operations_fail_after_disconnect(self, sqlite_config):
        session = DatabaseSession()
        await session.connect(sqlite_config)

        assert await session.disconnect() is True
        assert not session.is_connected
        with pytest.raises(NotConnectedError):
            await session.execute_query("SELECT 1")


class TestConnect:
    @pytest.mark.asyncio
    async def test_connect_and_query(self, sqlite_config):
        session = DatabaseSession()
        try:
            handle = await session.connect(sqlite_config)

            assert session.is_connected
            assert await session.current_handle() is handle
            assert await session.get_config() == sqlite_config
            result = await session.execute_query("SELECT COUNT(*) AS n FROM users")
            assert result.rows == ((3,),)
        finally:
            await session.disconnect()

    @pytest.mark.asyncio
    async def test_second_connect_replaces_first(self, sqlite_config, empty_sqlite_config):
        session = DatabaseSession()
        try:
            first = await session.connect(sqlite_config)
            second = await session.connect(empty_sqlite_config)

            assert first.pool.closed
            assert await session.current_handle() is second
            assert await session.get_config() == empty_sqlite_config
            assert (await session.get_schema()).tables == ()
            assert await session.list_tables() == []
        finally:
            await session.disconnect()

    @pytest.mark.asyncio
    async def test_failed_connect_keeps_previous(self, sqlite_config, tmp_path):
        session = DatabaseSession()
        try:
            first = await session.connect(sqlite_config)
            missing = ConnectionConfig(engine=EngineKind.SQLITE, database=str(tmp_path / "nope.db"))

            with pytest.raises(ConnectionFailedError):
                await session.connect(missing)

            assert await session.current_handle() is first
            assert not first.pool.closed
            await session.test_connection()
        finally:
            await session.disconnect()

    @pytest.mark.asyncio
    async def test_disconnect_closes_handle(self, sqlite_config):
        session = DatabaseSession()
        with patch("querydeck.session.core.close", new_callable=AsyncMock) as close:
            handle = await session.connect(sqlite_config)
            await session.disconnect()
        close.assert_awaited_once_with(handle)
        await handle.pool.close_all()


class TestConcurrency:
    """The lock guards only the handle swap, never a running operation."""

    @pytest.mark.asyncio
    async def test_session_stays_usable_during_slow_query(self, sqlite_config, empty_sqlite_config):
        started = asyncio.Event()
        release = asyncio.Event()
        run_query = sqlite_adapter.execute_query

        async def slow_query(handle, query):
            started.set()
            await release.wait()
            return await run_query(handle, query)

        session = DatabaseSession()
        try:
            first = await session.connect(sqlite_config)
            with patch.object(sqlite_adapter, "execute_query", slow_query):
                pending = asyncio.create_task(session.execute_query("SELECT id FROM users"))
                await asyncio.wait_for(started.wait(), timeout=5)

                assert await asyncio.wait_for(session.get_config(), timeout=5) == sqlite_config
                second = await asyncio.wait_for(session.connect(empty_sqlite_config), timeout=5)
                assert first.pool.closed
                assert not pending.done()

                assert await asyncio.wait_for(session.disconnect(), timeout=5) is True
                assert not pending.done()

                release.set()
                try:
                    result = await asyncio.wait_for(pending, timeout=5)
                except DatabaseError:
                    pass
                else:
                    assert isinstance(result, QueryResult)

            assert second.pool.closed
            assert not session.is_connected
            assert await session.get_config() is None
            with pytest.raises(NotConnectedError):
                await session.execute_query("SELECT 1")
        finally:
            release.set()
            await session.disconnect()

    @pytest.mark.asyncio
    async def test_query_on_replaced_handle_fails_cleanly(self, sqlite_config, empty_sqlite_config):
        started = asyncio.Event()
        release = asyncio.Event()
        run_query = sqlite_adapter.execute_query

        async def slow_query(handle, query):
            started.set()
            await release.wait()
            return await run_query(handle, query)

        session = DatabaseSession()
        try:
            await session.connect(sqlite_config)
            with patch.object(sqlite_adapter, "execute_query", slow_query):
                pending = asyncio.create_task(session.execute_query("SELECT id FROM users"))
                await asyncio.wait_for(started.wait(), timeout=5)
                await asyncio.wait_for(session.connect(empty_sqlite_config), timeout=5)
                release.set()

                with pytest.raises(ConnectionFailedError, match="is closed"):
                    await asyncio.wait_for(pending, timeout=5)

            assert await session.get_config() == empty_sqlite_config
            assert await session.list_tables() == []
        finally:
            await session.disconnect()
