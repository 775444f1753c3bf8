"""Tests for the asyncpg wiring in forum.core.db."""

from unittest.mock import AsyncMock

import pytest

from forum.core import db


class FakeTransaction:
    def __init__(self, conn):
        self.conn = conn

    async def __aenter__(self):
        self.conn.began += 1
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.conn.committed += 1
        else:
            self.conn.rolled_back += 1
        return False


class FakeConnection:
    """Mimics the subset of asyncpg.Connection that Database calls."""

    def __init__(self):
        self.fetchrow = AsyncMock(return_value=None)
        self.fetch = AsyncMock(return_value=[])
        self.execute = AsyncMock(return_value="UPDATE 1")
        self.began = 0
        self.committed = 0
        self.rolled_back = 0

    def transaction(self):
        return FakeTransaction(self)


class TestDatabaseUrl:
    def test_strips_sslmode(self):
        url = "postgresql://forum:secret@db:5432/forum?sslmode=require&application_name=forum"

        assert db._sanitize_database_url(url) == "postgresql://forum:secret@db:5432/forum?application_name=forum"

    def test_url_without_query_is_unchanged(self):
        url = "postgresql://forum:secret@db:5432/forum"

        assert db._sanitize_database_url(url) == url

    def test_missing_url(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)

        with pytest.raises(RuntimeError, match="DATABASE_URL is not set"):
            db.database_url()

    def test_url_from_environment(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", " postgresql://db/forum?sslmode=disable ")

        assert db.database_url() == "postgresql://db/forum"


class TestPoolSettings:
    def test_defaults(self, monkeypatch):
        for name in ("DB_POOL_MIN_SIZE", "DB_POOL_MAX_SIZE", "DB_COMMAND_TIMEOUT_S"):
            monkeypatch.delenv(name, raising=False)

        assert (db.pool_min_size(), db.pool_max_size(), db.command_timeout_s()) == (1, 5, 30.0)

    def test_malformed_values_fall_back(self, monkeypatch):
        monkeypatch.setenv("DB_POOL_MAX_SIZE", "many")
        monkeypatch.setenv("DB_COMMAND_TIMEOUT_S", "soon")
        monkeypatch.delenv("DB_POOL_MIN_SIZE", raising=False)

        assert db.pool_max_size() == 5
        assert db.command_timeout_s() == 30.0

    def test_max_never_below_min(self, monkeypatch):
        monkeypatch.setenv("DB_POOL_MIN_SIZE", "4")
        monkeypatch.setenv("DB_POOL_MAX_SIZE", "2")

        assert db.pool_max_size() == 4


def test_pool_must_be_initialized():
    with pytest.raises(RuntimeError, match="not initialized"):
        db.pool()


class TestDatabase:
    async def test_fetch_one_returns_dict(self):
        conn = FakeConnection()
        conn.fetchrow.return_value = {"id": 1}

        row = await db.Database(conn).fetch_one("SELECT 1 AS id WHERE $1", True)

        assert row == {"id": 1}
        conn.fetchrow.assert_awaited_once_with("SELECT 1 AS id WHERE $1", True)

    async def test_fetch_one_absent(self):
        assert await db.Database(FakeConnection()).fetch_one("SELECT 1") is None

    async def test_fetch_all_returns_dicts(self):
        conn = FakeConnection()
        conn.fetch.return_value = [{"id": 1}, {"id": 2}]

        assert await db.Database(conn).fetch_all("SELECT id FROM users") == [{"id": 1}, {"id": 2}]

    async def test_execute_discards_status(self):
        conn = FakeConnection()

        assert await db.Database(conn).execute("UPDATE users SET bio = $1", "") is None
        conn.execute.assert_awaited_once_with("UPDATE users SET bio = $1", "")

    async def test_transaction_on_connection_commits(self):
        conn = FakeConnection()
        database = db.Database(conn)

        async with database.transaction() as tx:
            await tx.execute("SELECT 1")

        assert tx is database
        assert (conn.began, conn.committed, conn.rolled_back) == (1, 1, 0)

    async def test_transaction_on_connection_rolls_back(self):
        conn = FakeConnection()

        with pytest.raises(ValueError):
            async with db.Database(conn).transaction():
                raise ValueError("boom")

        assert (conn.began, conn.committed, conn.rolled_back) == (1, 0, 1)
