"""Domain models package."""

from saathi.domain.models.archive import Milestone, SessionArchive, SessionReport, TherapeuticPlan
from saathi.domain.models.crisis_event import CrisisEvent, FollowUpSchedule, ProfessionalContact
from saathi.domain.models.directive import AdaptationRecord, CulturalContext, StrategyDirective
from saathi.domain.models.emotion_signal import (
    EmotionalJourney,
    EmotionSignal,
    clamp,
    select_dominant_signal,
)
from saathi.domain.models.risk_models import (
    ProtectiveFactor,
    RiskAssessment,
    RiskIndicator,
    ScanResult,
)
from saathi.domain.models.session import (
    Interaction,
    ProgressMetrics,
    Session,
    SessionOptions,
    SessionState,
    utc_now,
)
from saathi.domain.models.turn_input import (
    FACIAL_EMOTIONS,
    FacialPayload,
    ModalityPayload,
    VoicePayload,
)

__all__ = [
    # Turn input
    "FACIAL_EMOTIONS",
    "FacialPayload",
    "ModalityPayload",
    "VoicePayload",
    # Signals
    "EmotionSignal",
    "EmotionalJourney",
    "clamp",
    "select_dominant_signal",
    # Risk
    "RiskIndicator",
    "ProtectiveFactor",
    "ScanResult",
    "RiskAssessment",
    # Crisis
    "CrisisEvent",
    "FollowUpSchedule",
    "ProfessionalContact",
    # Directives
    "AdaptationRecord",
    "CulturalContext",
    "StrategyDirective",
    # Session
    "Interaction",
    "ProgressMetrics",
    "Session",
    "SessionOptions",
    "SessionState",
    "utc_now",
    # Archive
    "Milestone",
    "SessionArchive",
    "SessionReport",
    "TherapeuticPlan",
]
