"""
Shared fixtures for the car wash queue tests.

Every test gets its own file-backed SQLite database under tmp_path, so
tests never see each other's clients or washes.
"""

import os

# Must be set before carwash_queue.core.rate_limit builds the limiter
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient

from carwash_queue.db.session import Database
from carwash_queue.main import create_app


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'carwash.db'}"


@pytest.fixture
async def database(database_url):
    """A connected record store with the schema created."""
    database = Database(database_url)
    result = await database.connect()
    assert result.connected, result.error
    yield database
    await database.dispose()


@pytest.fixture
async def session(database):
    async with database.session() as session:
        yield session


@pytest.fixture
def client(database_url):
    """TestClient over an app whose store points at the test database."""
    app = create_app(Database(database_url))
    with TestClient(app) as test_client:
        yield test_client
