"""
Record Store Lifecycle and Session Management

This module owns the async SQLAlchemy engine behind the car wash queue.

Key Features:
- Explicit resource: a Database object is created at startup, stored on
  app.state and disposed on shutdown (no module-level engine)
- Typed connection outcome: connect() returns a StoreConnectionResult
  instead of logging and carrying on silently
- Async session management with commit on success and rollback on exception
"""

import logging
from dataclasses import dataclass
from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession as SQLModelAsyncSession

from carwash_queue.core.exceptions import StoreUnavailableError
from carwash_queue.core.setting import mask_database_url
from carwash_queue.db import models  # noqa: F401  registers tables on SQLModel.metadata
from carwash_queue.db.sqlite_adapter import get_database_adapter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreConnectionResult:
    """Outcome of Database.connect()."""
    connected: bool
    error: Optional[str] = None


class Database:
    """
    Process-wide record store handle.

    Usage:
        database = Database(settings.DATABASE_URL)
        result = await database.connect()
        async with database.session() as session:
            ...
        await database.dispose()
    """

    def __init__(self, database_url: str, auto_create_schema: bool = True):
        self.database_url = database_url
        self.auto_create_schema = auto_create_schema
        self.engine: Optional[AsyncEngine] = None
        self.last_error: Optional[str] = None
        self._session_maker: Optional[async_sessionmaker] = None

    @property
    def is_connected(self) -> bool:
        return self._session_maker is not None

    async def connect(self) -> StoreConnectionResult:
        """
        Create the engine, probe the store and optionally create missing tables.

        Never raises: failures are returned (and logged) so the caller decides
        whether the process keeps serving.
        """
        if self.is_connected:
            return StoreConnectionResult(connected=True)

        engine: Optional[AsyncEngine] = None
        try:
            adapter = get_database_adapter(self.database_url)
            dialect = adapter.get_dialect_name()
            engine = adapter.create_engine(self.database_url)
            async with engine.begin() as connection:
                await adapter.ping(connection)
                if self.auto_create_schema:
                    await connection.run_sync(SQLModel.metadata.create_all)
        except Exception as e:
            self.last_error = str(e)
            logger.error(
                f"Failed to connect to record store {mask_database_url(self.database_url)}: {e}",
                exc_info=True
            )
            if engine is not None:
                await engine.dispose()
            return StoreConnectionResult(connected=False, error=self.last_error)

        self.engine = engine
        self.last_error = None
        self._session_maker = async_sessionmaker(
            engine,
            class_=SQLModelAsyncSession,
            expire_on_commit=False,  # Returned records stay readable after commit
            autoflush=False,
        )
        logger.info(f"Connected to {dialect} record store {mask_database_url(self.database_url)}")
        return StoreConnectionResult(connected=True)

    def session(self) -> AsyncSession:
        """
        Open a new session.

        Raises:
            StoreUnavailableError: If connect() did not succeed
        """
        if self._session_maker is None:
            raise StoreUnavailableError(self.last_error)
        return self._session_maker()

    async def dispose(self) -> None:
        """Close every pooled connection and forget the engine."""
        if self.engine is not None:
            await self.engine.dispose()
            logger.info("Record store connection closed")
        self.engine = None
        self._session_maker = None


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function for FastAPI to get a database session.

    This function:
    - Takes the Database owned by the application (app.state.database)
    - Yields a new session to the endpoint
    - Commits on success, rolls back on exception

    Raises:
        StoreUnavailableError: If the application has no connected store
    """
    database: Optional[Database] = getattr(request.app.state, "database", None)
    if database is None:
        raise StoreUnavailableError("store was never initialized")

    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
