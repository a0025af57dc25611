"""
FastAPI Application Entry Point

This module initializes the FastAPI application and configures:
- API routes
- Middleware (logging, CORS)
- Error handlers
- Record store lifecycle

``create_app`` builds the application; ``app`` is the instance uvicorn serves::

    uvicorn carwash_queue.main:app --port 3000
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from carwash_queue.api import endpoints
from carwash_queue.core.exceptions import StoreUnavailableError
from carwash_queue.core.logging_config import setup_logging
from carwash_queue.core.rate_limit import limiter
from carwash_queue.core.setting import settings, mask_database_url
from carwash_queue.core.store_manager import initialize_store, shutdown_store
from carwash_queue.db.session import Database
from carwash_queue.middleware.logging import add_logging_middleware

logger = logging.getLogger(__name__)

HEALTH_MESSAGE = "Car wash queue backend is running"


async def store_unavailable_handler(request: Request, exc: StoreUnavailableError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc)}
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed bodies and query strings as 400 with pydantic's error list."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())}
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect the record store on startup and release it on shutdown."""
    logger.info(f"Environment: {settings.ENV_SETTING.value}")
    logger.info(f"Listening port: {settings.PORT}")
    await initialize_store(app)
    logger.info(f"Database: {mask_database_url(app.state.database.database_url)}")
    yield
    await shutdown_store(app)


def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        database: Record store to use instead of one built from settings

    Returns:
        A configured FastAPI instance
    """
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        lifespan=lifespan,
        title="Car Wash Queue Service",
        description="Clients, wash registrations and the operator queue of a car wash",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.database = database
    app.state.store_status = None

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(StoreUnavailableError, store_unavailable_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    add_logging_middleware(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", tags=["Health"], response_class=PlainTextResponse)
    async def root():
        """Root endpoint for health checks."""
        return HEALTH_MESSAGE

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health status of the service and its record store."""
        db = app.state.database
        store = "connected" if db is not None and db.is_connected else "unavailable"
        return {"status": "healthy", "store": store}

    app.include_router(endpoints.router, tags=["Car Wash Queue"])

    return app


app = create_app()
