"""FastAPI application setup"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.api.routes import router
from src.api.middleware import setup_cors, setup_rate_limiting
from src.config import LOG_LEVEL, MAX_CONFLICT_RETRIES, STORAGE_BACKEND
from src.db.store import InMemoryProgressStore, ProgressStore
from src.exceptions import (
    AuthenticationError,
    ConcurrencyConflictError,
    ConfigurationError,
    InvalidArgumentError,
    LearnBotError,
    NotFoundError,
)
from src.services.container import init_container, reset_container

# Configure logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=getattr(logging, LOG_LEVEL)
)

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidArgumentError: status.HTTP_400_BAD_REQUEST,
    ConcurrencyConflictError: status.HTTP_409_CONFLICT,
    AuthenticationError: status.HTTP_401_UNAUTHORIZED,
    ConfigurationError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


async def create_store() -> ProgressStore:
    """Build the ProgressStore selected by STORAGE_BACKEND"""
    if STORAGE_BACKEND == "postgres":
        from src.db.connection import db
        from src.db.queries import PostgresProgressStore

        await db.init_pool()
        logger.info("Database pool initialized")
        store = PostgresProgressStore(db)
        await store.init_schema()
        return store

    return InMemoryProgressStore()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle manager for FastAPI application"""
    # Startup
    logger.info("Starting API server...")
    store = await create_store()
    init_container(store, max_conflict_retries=MAX_CONFLICT_RETRIES)

    yield

    # Shutdown
    logger.info("Shutting down API server...")
    await store.close()
    reset_container()
    logger.info("Storage closed")


def create_api_application(use_lifespan: bool = True) -> FastAPI:
    """
    Create and configure FastAPI application

    Args:
        use_lifespan: Build the store and container on startup. Tests pass
            False and initialize the container themselves.
    """
    app = FastAPI(
        title="LearnBotX API",
        description="Learning progress, XP and streak tracking for LearnBotX",
        version="1.0.0",
        lifespan=lifespan if use_lifespan else None
    )

    # Setup middleware
    setup_cors(app)
    setup_rate_limiting(app)

    # Include routes
    app.include_router(router)

    @app.exception_handler(LearnBotError)
    async def learnbot_exception_handler(request: Request, exc: LearnBotError):
        status_code = next(
            (code for error_type, code in ERROR_STATUS_CODES.items() if isinstance(exc, error_type)),
            status.HTTP_500_INTERNAL_SERVER_ERROR
        )
        return JSONResponse(status_code=status_code, content=exc.to_dict())

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "detail": str(exc)}
        )

    logger.info("FastAPI application created")

    return app
