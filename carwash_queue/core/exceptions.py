"""
Custom Exceptions

This module defines custom exceptions for the car wash queue so that
services can report failures without knowing about HTTP.

Mapping used by the API layer:
- ValidationError -> 400
- NotFoundError -> 404
- ConflictError -> 409
- DatabaseError -> 500
- StoreUnavailableError -> 503
"""

from typing import Optional


class CarWashQueueException(Exception):
    """Base exception for the car wash queue service."""
    pass


class ValidationError(CarWashQueueException):
    """Raised when input fails a business validation rule."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(message)


class ConflictError(CarWashQueueException):
    """Raised when a write would break a uniqueness rule."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(CarWashQueueException):
    """Raised when the record targeted by an update does not exist."""

    def __init__(self, entity: str, key):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} '{key}' not found")


class DatabaseError(CarWashQueueException):
    """Raised when database operations fail."""

    def __init__(self, message: str, original_error: Exception = None):
        self.original_error = original_error
        super().__init__(f"Database error: {message}")


class StoreUnavailableError(CarWashQueueException):
    """Raised when the record store never connected or has been closed."""

    def __init__(self, reason: Optional[str] = None):
        self.reason = reason
        message = "Record store is unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
