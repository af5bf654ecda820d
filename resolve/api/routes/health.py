import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check():
    """Liveness check."""
    return {"status": "healthy", "service": "resolve-backend"}


@router.get("/ready")
async def readiness_check(request: Request):
    """Readiness check - reports whether the store loaded and last wrote cleanly."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        return JSONResponse(status_code=503, content={"status": "starting", "last_error": None})

    last_error = store.last_error
    if last_error is not None:
        logger.warning("readiness_degraded", error=str(last_error), error_type=type(last_error).__name__)
        return JSONResponse(
            status_code=503,
            content={"status": "degraded", "last_error": type(last_error).__name__},
        )
    return {"status": "ready", "last_error": None}
