"""
Session Endpoints

Session lifecycle and turn processing. Main interaction point for
user conversations.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from saathi.api.dependencies import get_orchestrator
from saathi.config.logging_config import get_logger
from saathi.domain.enums import LanguagePreference, Modality
from saathi.domain.models import (
    CulturalContext,
    FacialPayload,
    ModalityPayload,
    SessionOptions,
    VoicePayload,
)
from saathi.services.orchestration import CompanionOrchestrator

logger = get_logger(__name__)
router = APIRouter()


# Request/Response Models

class CreateSessionRequest(BaseModel):
    """Request to start a session."""

    user_id: str = Field(..., min_length=1, max_length=128, description="User to start the session for")
    modality: Modality = Field(default=Modality.TEXT)
    goals: Optional[list[str]] = Field(default=None, description="Overrides the stored therapeutic plan")
    country_code: Optional[str] = Field(default=None, min_length=2, max_length=8)
    language_preference: Optional[LanguagePreference] = None
    formality_level: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    allow_concurrent: bool = Field(default=False, description="Keep other active sessions of this user")

    def to_options(self) -> SessionOptions:
        cultural = None
        if self.language_preference is not None or self.formality_level is not None:
            cultural = CulturalContext(
                language_preference=self.language_preference or LanguagePreference.ENGLISH,
                formality_level=0.5 if self.formality_level is None else self.formality_level,
            )
        return SessionOptions(
            goals=self.goals,
            cultural_context=cultural,
            country_code=self.country_code,
            allow_concurrent=self.allow_concurrent,
        )


class CreateSessionResponse(BaseModel):
    """Response for session creation."""

    session_id: str
    state: str
    modality: str


class VoiceInput(BaseModel):
    """Voice features derived on the client."""

    transcript: str = Field(default="", max_length=4000)
    amplitude: Optional[float] = None
    zero_crossing_rate: float = 0.0


class FacialInput(BaseModel):
    """
    One frame's emotion probabilities.

    PRIVACY: Only the probability vector is sent; never the image.
    """

    probabilities: list[float] = Field(
        ...,
        description="joy, sorrow, anger, surprise, fear, disgust",
    )
    permission_granted: bool = True


class TurnRequest(BaseModel):
    """Request to process one user turn."""

    message: str = Field(..., max_length=4000, description="User message")
    voice: Optional[VoiceInput] = None
    facial: Optional[FacialInput] = None

    def to_payload(self) -> Optional[ModalityPayload]:
        if self.voice is None and self.facial is None:
            return None
        return ModalityPayload(
            voice=VoicePayload(
                transcript=self.voice.transcript,
                amplitude=self.voice.amplitude,
                zero_crossing_rate=self.voice.zero_crossing_rate,
            ) if self.voice else None,
            facial=FacialPayload(
                probabilities=tuple(self.facial.probabilities),
                permission_granted=self.facial.permission_granted,
            ) if self.facial else None,
        )


class TurnResponseBody(BaseModel):
    """Assessment, directive and reply for one turn."""

    session_id: str
    assessment: dict
    strategy: dict
    adaptations: list[dict]
    reply: dict
    crisis_event: Optional[dict] = None
    signals: list[dict]


class SessionReportResponse(BaseModel):
    """End-of-session report."""

    summary: dict
    progress_report: dict
    recommendations: list[str]


class RiskHistoryResponse(BaseModel):
    """Assessments of a session in turn order."""

    session_id: str
    assessments: list[dict]


@router.post(
    "",
    response_model=CreateSessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start a session",
)
async def create_session(
    request: CreateSessionRequest,
    orchestrator: CompanionOrchestrator = Depends(get_orchestrator),
) -> CreateSessionResponse:
    """
    Start a session for a user.

    Returns 409 when the user already has an active session and
    ``allow_concurrent`` is not set.
    """
    session_id = await orchestrator.start_session(
        request.user_id,
        request.modality,
        request.to_options(),
    )
    return CreateSessionResponse(
        session_id=session_id,
        state="active",
        modality=request.modality.value,
    )


@router.post(
    "/{session_id}/turns",
    response_model=TurnResponseBody,
    summary="Process a user turn",
)
async def process_turn(
    session_id: str,
    request: TurnRequest,
    orchestrator: CompanionOrchestrator = Depends(get_orchestrator),
) -> TurnResponseBody:
    """
    Process one user message with optional voice and facial inputs.

    SAFETY-CRITICAL: A crisis event, when present, carries the
    contacts and immediate actions the client must surface.
    """
    response = await orchestrator.process_turn(session_id, request.message, request.to_payload())
    return TurnResponseBody(**response.to_dict())


@router.post(
    "/{session_id}/end",
    response_model=SessionReportResponse,
    summary="End a session",
)
async def end_session(
    session_id: str,
    orchestrator: CompanionOrchestrator = Depends(get_orchestrator),
) -> SessionReportResponse:
    report = await orchestrator.end_session(session_id)
    return SessionReportResponse(**report.to_dict())


@router.get(
    "/{session_id}/risk-history",
    response_model=RiskHistoryResponse,
    summary="Risk assessment history",
)
async def risk_history(
    session_id: str,
    orchestrator: CompanionOrchestrator = Depends(get_orchestrator),
) -> RiskHistoryResponse:
    assessments = await orchestrator.get_risk_assessment_history(session_id)
    return RiskHistoryResponse(
        session_id=session_id,
        assessments=[a.to_dict() for a in assessments],
    )
