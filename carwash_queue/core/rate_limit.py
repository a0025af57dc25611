"""
Rate Limiting Configuration

This module provides rate limiting functionality for API endpoints.
Rate limiting keeps a misbehaving front desk client from flooding the store.

Design Decisions:
- Uses slowapi for rate limiting (lightweight, FastAPI-compatible)
- Different limits for different endpoints, read from settings
- IP-based limiting
- Can be switched off with RATE_LIMIT_ENABLED (tests do this)
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from carwash_queue.core.setting import settings

# Initialize rate limiter
# Uses IP address for rate limiting
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

# Rate limit configurations per endpoint
# Format: "count/period" (e.g., "10/minute" means 10 requests per minute)
RATE_LIMITS = {
    "register": settings.RATE_LIMIT_REGISTER,
    "queue": settings.RATE_LIMIT_QUEUE,
    "client_write": settings.RATE_LIMIT_CLIENT_WRITE,
}
