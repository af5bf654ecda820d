from fastapi import APIRouter

from resolve.api.routes import decision_logs, health

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(decision_logs.router, prefix="/decision-logs", tags=["decision-logs"])
