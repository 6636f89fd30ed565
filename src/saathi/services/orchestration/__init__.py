"""Public operation set of the companion core."""

from saathi.services.orchestration.companion_orchestrator import (
    CompanionOrchestrator,
    DeletionReport,
    TurnResponse,
)

__all__ = [
    "CompanionOrchestrator",
    "DeletionReport",
    "TurnResponse",
]
