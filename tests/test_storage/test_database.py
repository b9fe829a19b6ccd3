"""Tests for Database query helpers."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.storage.database import Database, rows_affected


@pytest.fixture
def pooled_conn():
    conn = AsyncMock()
    conn.execute = AsyncMock(return_value="UPDATE 1")
    return conn


@pytest.fixture
def db(test_settings, pooled_conn):
    database = Database(database_url=str(test_settings.database_url))

    @asynccontextmanager
    async def _acquire():
        yield pooled_conn

    pool = MagicMock()
    pool.acquire = MagicMock(side_effect=_acquire)
    database._pool = pool
    return database


class TestRowsAffected:

    @pytest.mark.parametrize(
        "status,expected",
        [("UPDATE 3", 3), ("UPDATE 0", 0), ("INSERT 0 1", 1), ("", 0), (None, 0)],
    )
    def test_parses_command_status(self, status, expected):
        assert rows_affected(status) == expected


class TestQueryHelpers:

    @pytest.mark.asyncio
    async def test_uses_pool_by_default(self, db, pooled_conn):
        assert await db.execute("UPDATE x SET y = $1", 1) == "UPDATE 1"
        pooled_conn.execute.assert_awaited_once_with("UPDATE x SET y = $1", 1)

    @pytest.mark.asyncio
    async def test_reuses_given_connection(self, db, pooled_conn):
        tx_conn = AsyncMock()
        tx_conn.fetchval = AsyncMock(return_value=42)

        assert await db.fetchval("SELECT 42", conn=tx_conn) == 42
        db.pool.acquire.assert_not_called()
        pooled_conn.fetchval.assert_not_called()

    @pytest.mark.asyncio
    async def test_advisory_lock_hashes_key(self, db):
        conn = AsyncMock()
        await db.advisory_lock(conn, "outdated_version_alert:svc_a::TemplateVersion")
        conn.execute.assert_awaited_once_with(
            "SELECT pg_advisory_xact_lock(hashtext($1))",
            "outdated_version_alert:svc_a::TemplateVersion",
        )

    @pytest.mark.asyncio
    async def test_health_check_false_on_error(self, db, pooled_conn):
        pooled_conn.fetchval = AsyncMock(side_effect=ConnectionError("down"))
        assert await db.health_check() is False

    def test_pool_requires_connect(self, test_settings):
        with pytest.raises(RuntimeError, match="not connected"):
            Database(database_url=str(test_settings.database_url)).pool
