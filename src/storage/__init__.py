"""Storage layer: asyncpg connection pool and transactions."""

from src.storage.database import Database, close_database, get_database, rows_affected

__all__ = ["Database", "close_database", "get_database", "rows_affected"]
