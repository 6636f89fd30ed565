"""
Health Check Endpoints

Provides system health and liveness endpoints for load balancers,
Kubernetes probes and monitoring systems.
"""

from fastapi import APIRouter, Request
from pydantic import BaseModel

from saathi import __version__
from saathi.config import get_settings

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    environment: str
    active_sessions: int = 0


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check",
    description="Basic health check endpoint for load balancers",
)
async def health_check(request: Request) -> HealthResponse:
    """
    Basic health check.

    Returns 200 if the application is running and reports the number
    of active sessions.
    """
    settings = getattr(request.app.state, "settings", None) or get_settings()
    orchestrator = getattr(request.app.state, "orchestrator", None)

    return HealthResponse(
        status="healthy",
        version=__version__,
        environment=settings.env,
        active_sessions=orchestrator.registry.active_count() if orchestrator else 0,
    )


@router.get(
    "/live",
    response_model=HealthResponse,
    summary="Liveness probe",
    description="Kubernetes liveness probe endpoint",
)
async def liveness_check(request: Request) -> HealthResponse:
    """
    Kubernetes liveness probe.

    Returns 200 if the application process is alive.
    """
    settings = getattr(request.app.state, "settings", None) or get_settings()
    return HealthResponse(
        status="alive",
        version=__version__,
        environment=settings.env,
    )
