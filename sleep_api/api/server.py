"""FastAPI application setup"""
import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from sleep_api import __version__
from sleep_api.api.routes import router
from sleep_api.api.middleware import setup_cors, setup_rate_limiting
from sleep_api.config import (
    LOG_LEVEL, STORAGE_BACKEND, CORS_ORIGINS, RATE_LIMIT, RATE_LIMIT_ENABLED
)
from sleep_api.db.connection import Database
from sleep_api.db.memory_store import InMemorySleepStore
from sleep_api.db.store import SleepStore, PostgresSleepStore
from sleep_api.exceptions import SleepServiceError
from sleep_api.services.sleep_service import SleepRecordService

# Configure logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=getattr(logging, LOG_LEVEL, logging.INFO)
)

logger = logging.getLogger(__name__)


def build_store(backend: str = STORAGE_BACKEND) -> tuple[SleepStore, Optional[Database]]:
    """Create the configured store and, for postgres, its (unopened) pool"""
    if backend == "memory":
        return InMemorySleepStore(), None
    database = Database()
    return PostgresSleepStore(database), database


def create_api_application(
    store: Optional[SleepStore] = None,
    rate_limit: str = RATE_LIMIT,
    rate_limit_enabled: bool = RATE_LIMIT_ENABLED,
    cors_origins: Optional[list[str]] = None
) -> FastAPI:
    """Create and configure FastAPI application

    Args:
        store: Storage to use. When omitted the configured backend is built
            and its connection pool is opened/closed by the app lifespan.
        rate_limit: Per-IP limit on the sleep and health routes, slowapi
            syntax ("100/minute")
        rate_limit_enabled: Turn the limiter off entirely
        cors_origins: Allowed origins, defaults to CORS_ORIGINS
    """
    database: Optional[Database] = None
    if store is None:
        store, database = build_store()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifecycle manager for FastAPI application"""
        # Startup
        logger.info("Starting API server...")
        if database is not None:
            await database.init_pool()
            logger.info("Database pool initialized")
        # sleep_records is created by the store on first use

        yield

        # Shutdown
        logger.info("Shutting down API server...")
        if database is not None:
            await database.close_pool()
            logger.info("Database pool closed")

    app = FastAPI(
        title="Sleep Record API",
        description="Record, list and delete per-user sleep durations",
        version=__version__,
        lifespan=lifespan
    )
    app.state.store = store
    app.state.sleep_service = SleepRecordService(store)

    # Setup middleware
    setup_rate_limiting(app, rate_limit, enabled=rate_limit_enabled)
    setup_cors(app, cors_origins if cors_origins is not None else CORS_ORIGINS)

    # Include routes
    app.include_router(router)

    @app.exception_handler(SleepServiceError)
    async def sleep_service_exception_handler(request: Request, exc: SleepServiceError):
        return JSONResponse(status_code=exc.status_code, content=exc.response_body())

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"message": "Internal server error"}
        )

    logger.info(f"FastAPI application created ({type(store).__name__})")

    return app
