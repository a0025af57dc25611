"""
Tests for the record store resource and its adapter factory.
"""

import logging

import pytest
from sqlalchemy import inspect

from carwash_queue.core.exceptions import StoreUnavailableError
from carwash_queue.db.session import Database, StoreConnectionResult
from carwash_queue.db.sqlite_adapter import SQLiteAdapter, get_database_adapter, unicode_lower


class TestAdapterFactory:
    def test_sqlite_urls_get_the_sqlite_adapter(self):
        adapter = get_database_adapter("sqlite+aiosqlite:///./carwash.db")
        assert isinstance(adapter, SQLiteAdapter)
        assert adapter.get_dialect_name() == "sqlite"

    def test_unicode_lower_folds_accents(self):
        assert unicode_lower("JOÃO") == "joão"
        assert unicode_lower(None) is None

    def test_unknown_scheme_is_rejected(self):
        with pytest.raises(ValueError):
            get_database_adapter("mongodb://localhost/carwash")


class TestDatabase:
    async def test_connect_creates_schema(self, database_url, caplog):
        database = Database(database_url)

        with caplog.at_level(logging.INFO, logger="carwash_queue.db.session"):
            result = await database.connect()

        assert result == StoreConnectionResult(connected=True)
        assert database.is_connected
        async with database.engine.connect() as connection:
            tables = await connection.run_sync(lambda sync: inspect(sync).get_table_names())
            indexes = await connection.run_sync(
                lambda sync: {ix["name"] for ix in inspect(sync).get_indexes("washes")}
            )
        assert {"clients", "washes"} <= set(tables)
        assert "uq_washes_pending_plate" in indexes
        assert "Connected to sqlite record store" in caplog.text
        await database.dispose()

    async def test_failed_connect_is_reported_not_raised(self):
        database = Database("mongodb://localhost/carwash")

        result = await database.connect()

        assert result.connected is False
        assert "mongodb" in result.error
        assert not database.is_connected
        with pytest.raises(StoreUnavailableError):
            database.session()

    async def test_dispose_closes_the_store(self, database_url):
        database = Database(database_url)
        await database.connect()

        await database.dispose()

        assert database.engine is None
        with pytest.raises(StoreUnavailableError):
            database.session()
