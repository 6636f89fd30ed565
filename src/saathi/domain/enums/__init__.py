"""Domain enums package."""

from saathi.domain.enums.intervention import InterventionStrategy, LanguagePreference
from saathi.domain.enums.modality import EMOTION_PRIORITY, EmotionLabel, Modality
from saathi.domain.enums.risk_level import (
    ProtectiveCategory,
    RiskCategory,
    RiskLevel,
    UrgencyLevel,
)

__all__ = [
    "EMOTION_PRIORITY",
    "EmotionLabel",
    "InterventionStrategy",
    "LanguagePreference",
    "Modality",
    "ProtectiveCategory",
    "RiskCategory",
    "RiskLevel",
    "UrgencyLevel",
]
