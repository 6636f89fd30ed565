"""
User Data Endpoints

Data export and deletion for a user.

PRIVACY: Export includes interaction text. These endpoints must sit
behind authentication that proves ownership of ``user_id``.
LEGAL_REVIEW_REQUIRED: Crisis events survive deletion for audit.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from saathi.api.dependencies import get_orchestrator
from saathi.services.orchestration import CompanionOrchestrator

router = APIRouter()


class DeletionResponse(BaseModel):
    """What was deleted and what was retained."""

    user_id: str
    active_sessions_evicted: int
    archives_deleted: int
    plan_deleted: bool
    crisis_events_retained: int


@router.get("/{user_id}/data", summary="Export user data")
async def export_user_data(
    user_id: str,
    orchestrator: CompanionOrchestrator = Depends(get_orchestrator),
) -> dict:
    return await orchestrator.export_user_data(user_id)


@router.delete(
    "/{user_id}/data",
    response_model=DeletionResponse,
    summary="Delete user data",
)
async def delete_user_data(
    user_id: str,
    orchestrator: CompanionOrchestrator = Depends(get_orchestrator),
) -> DeletionResponse:
    report = await orchestrator.delete_user_data(user_id)
    return DeletionResponse(**report.to_dict())
