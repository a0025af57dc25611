"""
SQLite Database Adapter

This module implements the DatabaseAdapter interface for SQLite.
All SQLite-specific configuration and behavior is encapsulated here.

SQLite is a good match for a single car wash:
- File-based (single .db file), no server required
- Supports the partial unique index that guards pending washes
- Single writer at a time, which is plenty for an operator front desk
"""

from typing import Any, Optional

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from carwash_queue.db.interface import DatabaseAdapter


def unicode_lower(value: Optional[str]) -> Optional[str]:
    return value.lower() if isinstance(value, str) else value


def register_unicode_lower(dbapi_connection, connection_record) -> None:
    """SQLite's built-in lower() only folds ASCII; "JOÃO" must match "joão"."""
    dbapi_connection.create_function("lower", 1, unicode_lower, deterministic=True)


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter implementation.

    This adapter handles all SQLite-specific configuration and operations.
    """

    def create_engine(self, database_url: str, **kwargs) -> AsyncEngine:
        """
        Create SQLite async engine with appropriate configuration.

        SQLite-specific configuration:
        - NullPool: File-based database doesn't benefit from pooling
        - check_same_thread=False: Required for async SQLite operations
        - lower() replaced on every connection so ILIKE folds accented letters

        Args:
            database_url: SQLite connection string (sqlite+aiosqlite:///...)
            **kwargs: Additional engine options (merged with SQLite defaults)

        Returns:
            Configured AsyncEngine for SQLite
        """
        engine_kwargs = self.get_engine_kwargs()
        engine_kwargs.update(kwargs)

        engine = create_async_engine(
            database_url,
            poolclass=self.get_pool_class(),
            connect_args=self.get_connect_args(),
            **engine_kwargs
        )
        event.listen(engine.sync_engine, "connect", register_unicode_lower)
        return engine

    def get_pool_class(self) -> type[NullPool]:
        return NullPool

    def get_connect_args(self) -> dict[str, Any]:
        return {
            "check_same_thread": False
        }

    def get_engine_kwargs(self) -> dict[str, Any]:
        return {
            "echo": False  # Set to True only for SQL debugging in development
        }

    async def ping(self, connection: AsyncConnection) -> None:
        await connection.execute(text("SELECT 1"))

    def get_dialect_name(self) -> str:
        return "sqlite"


def get_database_adapter(database_url: str) -> DatabaseAdapter:
    """
    Factory function to get the database adapter.

    Only SQLite is implemented. To support PostgreSQL, create a
    PostgreSQLAdapter class and dispatch on the URL scheme here.

    Args:
        database_url: Connection string the adapter will be used with

    Returns:
        DatabaseAdapter instance

    Raises:
        ValueError: If no adapter handles the URL scheme
    """
    if database_url.startswith("sqlite"):
        return SQLiteAdapter()
    scheme = database_url.split("://", 1)[0]
    raise ValueError(f"No database adapter for scheme '{scheme}'")
