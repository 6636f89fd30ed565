"""
API v1 Router

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter

from saathi.api.v1.endpoints.health import router as health_router
from saathi.api.v1.endpoints.sessions import router as sessions_router
from saathi.api.v1.endpoints.users import router as users_router
from saathi.infrastructure.metrics import metrics_router

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(
    health_router,
    prefix="/health",
    tags=["Health"],
)

api_router.include_router(
    sessions_router,
    prefix="/sessions",
    tags=["Sessions"],
)

api_router.include_router(
    users_router,
    prefix="/users",
    tags=["Users"],
)

api_router.include_router(metrics_router)
