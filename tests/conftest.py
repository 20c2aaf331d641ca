"""Shared fixtures for querydeck tests."""

import sqlite3

import pytest

from querydeck.models import ConnectionConfig, EngineKind


@pytest.fixture
def sqlite_path(tmp_path):
    """A database file with a small ``users`` table and an empty ``orders`` table."""
    path = tmp_path / "app.db"
    conn = sqlite3.connect(path)
    try:
        conn.executescript(
            """
            CREATE TABLE users (
                id INTEGER PRIMARY KEY,
                name TEXT NOT NULL,
                age INTEGER,
                avatar BLOB
            );
            CREATE TABLE orders (
                order_id INTEGER PRIMARY KEY,
                user_id INTEGER NOT NULL,
                total REAL
            );
            INSERT INTO users (id, name, age, avatar) VALUES (1, 'alice', 30, X'FFFE00');
            INSERT INTO users (id, name, age, avatar) VALUES (2, 'bob', NULL, NULL);
            INSERT INTO users (id, name, age, avatar) VALUES (3, 'carol', 41, CAST('hi' AS BLOB));
            """
        )
        conn.commit()
    finally:
        conn.close()
    return str(path)


@pytest.fixture
def empty_sqlite_path(tmp_path):
    """A valid database file without tables."""
    path = tmp_path / "empty.db"
    conn = sqlite3.connect(path)
    try:
        conn.execute("PRAGMA user_version = 1")
        conn.commit()
    finally:
        conn.close()
    return str(path)


@pytest.fixture
def sqlite_config(sqlite_path):
    return ConnectionConfig(engine=EngineKind.SQLITE, database=sqlite_path)


@pytest.fixture
def empty_sqlite_config(empty_sqlite_path):
    return ConnectionConfig(engine=EngineKind.SQLITE, database=empty_sqlite_path)
