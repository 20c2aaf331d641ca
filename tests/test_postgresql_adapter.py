"""Tests for the PostgreSQL adapter with a mocked asyncpg pool."""

import datetime
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import asyncpg
import pytest

from querydeck.database import core
from querydeck.database.adapters import postgresql as pg_adapter
from querydeck.database.handle import ConnectionHandle
from querydeck.errors import ConnectionFailedError, QueryExecutionError, SchemaRetrievalError
from querydeck.models import ConnectionConfig, EngineKind

DSN = "postgresql://postgres:***@db:5432/analytics"


class FakeRecord:
    """Indexable by position or column name, like asyncpg.Record."""

    def __init__(self, **values):
        self._keys = list(values)
        self._values = list(values.values())

    def __getitem__(self, key):
        if isinstance(key, int):
            return self._values[key]
        return self._values[self._keys.index(key)]

    def __len__(self):
        return len(self._values)

    def keys(self):
        return iter(self._keys)


def make_pool(fetch):
    pool = AsyncMock()
    pool.fetch.side_effect = fetch
    pool.fetchval.return_value = 1
    return pool


async def catalog_fetch(query, *args):
    if "information_schema.tables" in query:
        return [FakeRecord(table_name="accounts")]
    if "information_schema.columns" in query:
        assert args == ("accounts",)
        return [
            FakeRecord(column_name="id", data_type="integer", is_nullable="NO", is_primary_key=True),
            FakeRecord(column_name="balance", data_type="numeric", is_nullable="YES", is_primary_key=False),
        ]
    if "pg_database" in query:
        return [FakeRecord(datname="postgres"), FakeRecord(datname="analytics")]
    if "pg_tables" in query:
        return [FakeRecord(tablename="accounts")]
    if "FROM missing" in query:
        raise asyncpg.UndefinedTableError('relation "missing" does not exist')
    if "WHERE false" in query:
        return []
    return [
        FakeRecord(id=1, balance=Decimal("10.50"), opened=datetime.date(2024, 5, 1)),
        FakeRecord(id=2, balance=None, opened=datetime.date(2024, 6, 1)),
    ]


@pytest.fixture
def handle():
    return ConnectionHandle(kind=EngineKind.POSTGRESQL, pool=make_pool(catalog_fetch), dsn=DSN)


@pytest.fixture
def config():
    return ConnectionConfig(
        engine=EngineKind.POSTGRESQL,
        host="db",
        port=5432,
        username="postgres",
        password="secret",
        database="analytics",
    )


class TestConnect:
    @pytest.mark.asyncio
    async def test_connect_uses_connection_string(self, config):
        pool = make_pool(catalog_fetch)
        with patch.object(pg_adapter.asyncpg, "create_pool", AsyncMock(return_value=pool)) as create_pool:
            handle = await core.connect(config)

        assert create_pool.await_args.kwargs["dsn"] == "postgresql://postgres:secret@db:5432/analytics"
        assert handle.kind is EngineKind.POSTGRESQL
        assert handle.dsn == DSN
        pool.fetchval.assert_awaited_once_with("SELECT 1")

    @pytest.mark.asyncio
    async def test_connection_refused(self, config):
        error = asyncpg.PostgresConnectionError("Connection refused")
        with patch.object(pg_adapter.asyncpg, "create_pool", AsyncMock(side_effect=error)):
            with pytest.raises(ConnectionFailedError, match="Connection refused"):
                await core.connect(config)

    @pytest.mark.asyncio
    async def test_failed_probe_closes_pool(self, config):
        pool = make_pool(catalog_fetch)
        pool.fetchval.side_effect = OSError("server closed the connection")
        with patch.object(pg_adapter.asyncpg, "create_pool", AsyncMock(return_value=pool)):
            with pytest.raises(ConnectionFailedError, match="server closed the connection"):
                await core.connect(config)
        pool.close.assert_awaited_once()


class TestSchema:
    @pytest.mark.asyncio
    async def test_public_tables(self, handle):
        schema = await core.get_schema(handle)

        assert len(schema.tables) == 1
        accounts = schema.tables[0]
        assert accounts.name == "accounts"
        assert [(c.name, c.data_type, c.is_nullable, c.is_primary_key) for c in accounts.columns] == [
            ("id", "integer", False, True),
            ("balance", "numeric", True, False),
        ]

    @pytest.mark.asyncio
    async def test_zero_tables(self):
        async def empty(query, *args):
            return []

        handle = ConnectionHandle(kind=EngineKind.POSTGRESQL, pool=make_pool(empty), dsn=DSN)
        assert (await core.get_schema(handle)).tables == ()

    @pytest.mark.asyncio
    async def test_catalog_failure(self):
        async def broken(query, *args):
            raise asyncpg.InterfaceError("pool is closed")

        handle = ConnectionHandle(kind=EngineKind.POSTGRESQL, pool=make_pool(broken), dsn=DSN)
        with pytest.raises(SchemaRetrievalError, match="pool is closed"):
            await core.get_schema(handle)


class TestExecuteQuery:
    @pytest.mark.asyncio
    async def test_rows_are_coerced(self, handle):
        result = await core.execute_query(handle, "SELECT id, balance, opened FROM accounts")

        assert result.columns == ("id", "balance", "opened")
        assert result.rows == ((1, "10.50", "2024-05-01"), (2, None, "2024-06-01"))
        assert result.row_count == 2

    @pytest.mark.asyncio
    async def test_zero_rows(self, handle):
        result = await core.execute_query(handle, "SELECT * FROM accounts WHERE false")
        assert (result.columns, result.rows, result.row_count) == ((), (), 0)

    @pytest.mark.asyncio
    async def test_engine_error_is_wrapped(self, handle):
        with pytest.raises(QueryExecutionError) as exc_info:
            await core.execute_query(handle, "SELECT * FROM missing")
        assert 'relation "missing" does not exist' in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, asyncpg.UndefinedTableError)


class TestListingAndClose:
    @pytest.mark.asyncio
    async def test_list_databases(self, handle):
        assert await core.list_databases(handle) == ["postgres", "analytics"]

    @pytest.mark.asyncio
    async def test_list_tables(self, handle):
        assert await core.list_tables(handle) == ["accounts"]

    @pytest.mark.asyncio
    async def test_close(self, handle):
        await core.close(handle)
        handle.pool.close.assert_awaited_once()
