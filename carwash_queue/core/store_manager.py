"""
Record Store Manager

This module connects and releases the record store owned by the application.

Design:
- One Database per application instance, kept on app.state.database
- Created on startup from settings unless one was injected (tests do this)
- A failed connection is logged and the app keeps serving; store-backed
  requests then answer 503 until the process is restarted
"""

import logging

from fastapi import FastAPI

from carwash_queue.core.setting import settings
from carwash_queue.db.session import Database, StoreConnectionResult

logger = logging.getLogger(__name__)


async def initialize_store(app: FastAPI) -> StoreConnectionResult:
    """
    Connect the application's record store.

    Returns:
        The connection result, also stored on app.state.store_status
    """
    database = getattr(app.state, "database", None)
    if database is None:
        database = Database(settings.DATABASE_URL, auto_create_schema=settings.AUTO_CREATE_SCHEMA)
        app.state.database = database

    result = await database.connect()
    app.state.store_status = result

    if not result.connected:
        logger.error(f"Record store unavailable, requests needing it will fail: {result.error}")
    return result


async def shutdown_store(app: FastAPI) -> None:
    """Dispose of the application's record store."""
    database = getattr(app.state, "database", None)
    if database is not None:
        await database.dispose()
