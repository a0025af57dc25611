"""
Database module with abstraction layer.

This module provides:
- DatabaseAdapter interface: Abstract base class for database implementations
- SQLiteAdapter: SQLite-specific implementation (default)
- Database: The record store resource owned by the application
- get_session: FastAPI dependency yielding a request-scoped session

To add a new database backend:
1. Create a new adapter class inheriting from DatabaseAdapter
2. Implement all abstract methods
3. Update get_database_adapter() in sqlite_adapter.py to return the new adapter
"""

from carwash_queue.db.interface import DatabaseAdapter
from carwash_queue.db.session import Database, StoreConnectionResult, get_session

__all__ = [
    "DatabaseAdapter",
    "Database",
    "StoreConnectionResult",
    "get_session",
]
