"""
PostgreSQL database connection management.

Uses asyncpg for async database operations. Provides connection
pooling and the transaction boundary used for alert supersession.

Query helpers accept an optional ``conn`` so repositories can run the
same statement either on a pooled connection or inside an open
transaction.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from types import TracebackType
from typing import Any

import asyncpg

from src.config.settings import get_settings

logger = logging.getLogger(__name__)


class Database:
    """
    Async PostgreSQL database connection manager.

    Usage:
        db = Database()
        await db.connect()

        async with db.transaction() as conn:
            await db.execute("UPDATE ...", conn=conn)
            await db.fetchrow("INSERT ... RETURNING *", conn=conn)

        await db.close()
    """

    def __init__(
        self,
        database_url: str | None = None,
        min_size: int | None = None,
        max_size: int | None = None,
    ):
        """
        Initialize database connection manager.

        Args:
            database_url: PostgreSQL connection URL
            min_size: Minimum pool size
            max_size: Maximum pool size
        """
        settings = get_settings()

        self._database_url = database_url or str(settings.database_url)
        self._min_size = min_size or settings.db_pool_min_size
        self._max_size = max_size or settings.db_pool_max_size

        self._pool: asyncpg.Pool | None = None

    async def connect(self) -> None:
        """Establish database connection pool."""
        try:
            self._pool = await asyncpg.create_pool(
                self._database_url,
                min_size=self._min_size,
                max_size=self._max_size,
                command_timeout=60,
            )
            logger.info(
                f"Database connected (pool: {self._min_size}-{self._max_size})"
            )
        except Exception as e:
            logger.error(f"Failed to connect to database: {e}")
            raise

    async def close(self) -> None:
        """Close database connection pool."""
        if self._pool:
            await self._pool.close()
            self._pool = None
            logger.info("Database connection closed")

    async def __aenter__(self) -> "Database":
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    @property
    def pool(self) -> asyncpg.Pool:
        """Get connection pool, raising if not connected."""
        if self._pool is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._pool

    @asynccontextmanager
    async def acquire(
        self, conn: asyncpg.Connection | None = None
    ) -> AsyncIterator[asyncpg.Connection]:
        """
        Acquire a connection from the pool, or reuse ``conn`` if given.
        """
        if conn is not None:
            yield conn
            return
        async with self.pool.acquire() as pooled:
            yield pooled

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[asyncpg.Connection]:
        """
        Start a transaction.

        Usage:
            async with db.transaction() as conn:
                await db.execute("UPDATE ...", conn=conn)
        """
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                yield conn

    async def advisory_lock(self, conn: asyncpg.Connection, key: str) -> None:
        """
        Take a transaction-scoped advisory lock on ``key``.

        Released automatically on commit or rollback. Must be called
        inside ``transaction()``.
        """
        await conn.execute("SELECT pg_advisory_xact_lock(hashtext($1))", key)

    async def execute(
        self, query: str, *args: Any, conn: asyncpg.Connection | None = None
    ) -> str:
        """
        Execute a query without returning results.

        Returns:
            Status string from PostgreSQL (e.g. ``"UPDATE 3"``)
        """
        async with self.acquire(conn) as c:
            return await c.execute(query, *args)

    async def fetch(
        self, query: str, *args: Any, conn: asyncpg.Connection | None = None
    ) -> list[asyncpg.Record]:
        """Execute a query and fetch all results."""
        async with self.acquire(conn) as c:
            return await c.fetch(query, *args)

    async def fetchrow(
        self, query: str, *args: Any, conn: asyncpg.Connection | None = None
    ) -> asyncpg.Record | None:
        """Execute a query and fetch one result."""
        async with self.acquire(conn) as c:
            return await c.fetchrow(query, *args)

    async def fetchval(
        self, query: str, *args: Any, conn: asyncpg.Connection | None = None
    ) -> Any:
        """Execute a query and fetch a single value."""
        async with self.acquire(conn) as c:
            return await c.fetchval(query, *args)

    async def health_check(self) -> bool:
        """
        Check if database is healthy.

        Returns:
            True if database is accessible
        """
        try:
            result = await self.fetchval("SELECT 1")
            return result == 1
        except Exception:
            return False


def rows_affected(status: str) -> int:
    """Parse the row count from an asyncpg command status string."""
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (ValueError, AttributeError):
        return 0


# Global database instance
_database: Database | None = None


async def get_database() -> Database:
    """
    Get global database instance.

    Creates and connects if not already connected.
    """
    global _database

    if _database is None:
        _database = Database()
        await _database.connect()

    return _database


async def close_database() -> None:
    """Close global database connection."""
    global _database

    if _database is not None:
        await _database.close()
        _database = None
