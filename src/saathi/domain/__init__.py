"""
SAATHI Domain Layer

Core entities, value objects and the error taxonomy.
These models are independent of infrastructure.
"""

from saathi.domain.enums import InterventionStrategy, Modality, RiskLevel
from saathi.domain.models import CrisisEvent, EmotionSignal, RiskAssessment, Session, SessionState

__all__ = [
    "CrisisEvent",
    "EmotionSignal",
    "InterventionStrategy",
    "Modality",
    "RiskAssessment",
    "RiskLevel",
    "Session",
    "SessionState",
]
