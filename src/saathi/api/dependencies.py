"""
API Dependencies

FastAPI dependency providers. The orchestrator lives on
``app.state`` and is created by the application lifespan.
"""

from fastapi import Request

from saathi.services.orchestration import CompanionOrchestrator


def get_orchestrator(request: Request) -> CompanionOrchestrator:
    """Get the orchestrator for the running application."""
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise RuntimeError("Orchestrator not initialized")
    return orchestrator
