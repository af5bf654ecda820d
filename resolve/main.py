"""Resolve backend: FastAPI application entry point."""

import uuid
from contextlib import asynccontextmanager

# CRITICAL ORDER: configure_structlog MUST be called before all other resolve imports
# to avoid the structlog cache pitfall (structlog caches the processor chain on first use).
from resolve.core.logging import configure_structlog
from resolve.core.config import get_settings as _get_settings_early

_early_settings = _get_settings_early()
configure_structlog(
    log_level="DEBUG" if _early_settings.debug else "INFO",
    json_logs=not _early_settings.debug,
)

import structlog

from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from redis.exceptions import RedisError

from resolve.api.routes import api_router
from resolve.core.config import get_settings
from resolve.core.exceptions import FormValidationError, PersistenceError, QuotaExceededError
from resolve.db import build_slot, close_redis, init_redis
from resolve.integrations.notifications import LocalNotificationScheduler
from resolve.middleware.correlation import (
    setup_correlation_middleware,
    get_correlation_id,
)
from resolve.services.decision_log_store import DecisionLogStore
from resolve.services.reminder_service import ReminderService

logger = structlog.get_logger(__name__)

UPGRADE_HINT = "Please upgrade to Resolve+ for unlimited logs."


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    settings = get_settings()
    logger.info("startup_begin", app_name=settings.app_name, debug=settings.debug, storage_backend=settings.storage_backend)

    if settings.storage_backend == "redis":
        try:
            init_redis(settings.redis_url)
            logger.info("redis_initialized")
        except RedisError as e:
            # Client stays configured; the store records the failed read and starts empty
            logger.warning("redis_unavailable", error=str(e), error_type=type(e).__name__)

    app.state.store = DecisionLogStore(build_slot(settings), free_tier_limit=settings.free_tier_limit)
    if app.state.store.last_error is not None:
        logger.warning("decision_log_store_degraded", error=str(app.state.store.last_error))
    logger.info("decision_log_store_initialized", count=len(app.state.store.logs))

    app.state.reminders = ReminderService(LocalNotificationScheduler(), delay_days=settings.reminder_delay_days)

    yield

    # Shutdown
    logger.info("shutdown_begin")
    close_redis()
    logger.info("shutdown_complete")


async def quota_exceeded_handler(request: Request, exc: QuotaExceededError) -> JSONResponse:
    """Translate QuotaExceededError into 409 with the limit and an upgrade hint."""
    return JSONResponse(
        status_code=409,
        content={"detail": f"{exc} {UPGRADE_HINT}", "limit": exc.limit},
    )


async def persistence_error_handler(request: Request, exc: PersistenceError) -> JSONResponse:
    """Translate PersistenceError into 503; in-memory state is unchanged."""
    debug_id = str(uuid.uuid4())
    logger.error(
        "persistence_error",
        debug_id=debug_id,
        correlation_id=get_correlation_id(),
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )
    return JSONResponse(
        status_code=503,
        content={"detail": "Failed to save decision logs", "debug_id": debug_id},
    )


async def form_validation_handler(request: Request, exc: FormValidationError) -> JSONResponse:
    """Translate FormValidationError into 422 with the per-field messages."""
    return JSONResponse(
        status_code=422,
        content={"detail": "Invalid decision log form", "errors": exc.errors},
    )


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Translate a record that fails validation after merging (e.g. a null title) into 422."""
    return JSONResponse(
        status_code=422,
        content={"detail": exc.errors(include_url=False, include_context=False)},
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Global exception handler for HTTPException with debug_id tracking.

    Logs errors server-side with full context, returns sanitized response to client.
    """
    debug_id = str(uuid.uuid4())

    logger.error(
        "http_exception",
        status_code=exc.status_code,
        debug_id=debug_id,
        correlation_id=get_correlation_id(),
        path=request.url.path,
        method=request.method,
        detail=exc.detail,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "debug_id": debug_id},
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for unhandled errors with debug_id tracking.

    Logs full exception with traceback, returns generic 500 to client.
    """
    debug_id = str(uuid.uuid4())

    logger.error(
        "unhandled_exception",
        debug_id=debug_id,
        correlation_id=get_correlation_id(),
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=True,
    )

    # Return generic 500 (no internal details leaked)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "debug_id": debug_id},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Resolve - a personal decision journal",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Correlation ID middleware (runs first on incoming requests)
    setup_correlation_middleware(app)

    # Exception handlers
    app.exception_handler(QuotaExceededError)(quota_exceeded_handler)
    app.exception_handler(PersistenceError)(persistence_error_handler)
    app.exception_handler(FormValidationError)(form_validation_handler)
    app.exception_handler(ValidationError)(validation_error_handler)
    app.exception_handler(HTTPException)(http_exception_handler)
    app.exception_handler(Exception)(generic_exception_handler)

    # Include API routes
    app.include_router(api_router, prefix="/api")

    return app


# Create the app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "resolve.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
