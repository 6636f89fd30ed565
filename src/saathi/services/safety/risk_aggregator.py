"""
Risk Aggregator

Fuses a lexicon scan, the turn's dominant emotion signal and recent
assessment history into one discrete RiskAssessment.

SAFETY-CRITICAL: This aggregator determines when crisis escalation
fires. All logic must be auditable.

ARCHITECTURE: The aggregator is a pure function. It holds no state
between calls and reads no clock; the assessment time is an input.
Identical inputs always produce equal assessments.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from saathi.config.logging_config import get_logger
from saathi.config.settings import SafetySettings
from saathi.domain.enums import RiskCategory, RiskLevel
from saathi.domain.models import EmotionSignal, RiskAssessment, ScanResult

logger = get_logger(__name__)

SUICIDAL_IDEATION_OVERRIDE = "suicidal_ideation_override"


@dataclass(frozen=True)
class RiskThresholds:
    """
    Score thresholds for level classification.

    CLINICAL_VALIDATION_REQUIRED: Values must stay aligned with the
    lexicon weights (10 direct, 5 indirect).
    """

    severe: float = 15.0
    high: float = 10.0
    moderate: float = 5.0
    low: float = 2.0

    # Acute distress floor
    distress_intensity: float = 0.8
    distress_valence: float = -0.5

    # Sustained risk floor: this many prior assessments scored moderate or above
    sustained_window: int = 3

    @classmethod
    def from_settings(cls, settings: SafetySettings) -> "RiskThresholds":
        return cls(
            severe=settings.severe_threshold,
            high=settings.high_threshold,
            moderate=settings.moderate_threshold,
            low=settings.low_threshold,
        )

    def level_for(self, score: float) -> RiskLevel:
        """Threshold table: monotonic non-decreasing in score."""
        if score >= self.severe:
            return RiskLevel.SEVERE
        if score >= self.high:
            return RiskLevel.HIGH
        if score >= self.moderate:
            return RiskLevel.MODERATE
        if score >= self.low:
            return RiskLevel.LOW
        return RiskLevel.NONE


def confidence_for(score: float) -> float:
    """Deterministic confidence, monotonically increasing in score."""
    return round(min(0.95, 0.3 + 0.04 * max(score, 0.0)), 4)


class RiskAggregator:
    """
    Stateless risk fusion.

    Steps:
    1. Threshold table on the scanner score
    2. Floors from acute emotional distress and sustained risk
    3. Suicidal-ideation override to severe
    4. Deterministic confidence and referral flags

    Floors and the override only ever raise the level. Protective
    factors are recorded but never lower it.

    Usage:
        aggregator = RiskAggregator()
        assessment = aggregator.assess(scan, signal, history, assessed_at=now)
    """

    def __init__(self, thresholds: Optional[RiskThresholds] = None) -> None:
        self.thresholds = thresholds or RiskThresholds()

    def assess(
        self,
        scan: ScanResult,
        latest_signal: Optional[EmotionSignal],
        recent_history: Sequence[RiskAssessment],
        *,
        assessed_at: datetime,
    ) -> RiskAssessment:
        """
        Produce a risk assessment.

        Args:
            scan: Lexicon scan of the turn's message
            latest_signal: Dominant emotion signal of the turn
            recent_history: Prior assessments, oldest first
            assessed_at: Assessment timestamp

        Returns:
            Immutable RiskAssessment
        """
        # Step 1: Threshold table
        level = self.thresholds.level_for(scan.score)
        contributing: list[str] = []

        # Step 2: Escalation floors
        if self._is_acute_distress(latest_signal) and level < RiskLevel.LOW:
            level = RiskLevel.LOW
            contributing.append("acute_emotional_distress")

        if self._is_sustained_risk(recent_history) and level < RiskLevel.MODERATE:
            level = RiskLevel.MODERATE
            contributing.append("sustained_risk")

        # Step 3: Override rule
        override = None
        if scan.has_category(RiskCategory.SUICIDAL_IDEATION):
            if level < RiskLevel.SEVERE or scan.protective_factors:
                logger.warning(
                    "Aggregation inconsistency resolved by override",
                    score_level=self.thresholds.level_for(scan.score).label,
                    protective_factor_count=len(scan.protective_factors),
                )
            level = RiskLevel.SEVERE
            override = SUICIDAL_IDEATION_OVERRIDE

        # Step 4: Confidence and flags
        return RiskAssessment(
            level=level,
            confidence=confidence_for(scan.score),
            score=scan.score,
            indicators=scan.indicators,
            protective_factors=scan.protective_factors,
            timestamp=assessed_at,
            follow_up_required=level != RiskLevel.NONE,
            professional_referral=level >= RiskLevel.HIGH,
            override_applied=override,
            contributing_signals=tuple(contributing),
        )

    def _is_acute_distress(self, signal: Optional[EmotionSignal]) -> bool:
        if signal is None or signal.is_default:
            return False
        return (
            signal.intensity > self.thresholds.distress_intensity
            and signal.valence < self.thresholds.distress_valence
        )

    def _is_sustained_risk(self, history: Sequence[RiskAssessment]) -> bool:
        window = self.thresholds.sustained_window
        if window <= 0 or len(history) < window:
            return False
        # Judged on lexicon evidence so a floor never sustains itself
        return all(
            a.override_applied is not None or self.thresholds.level_for(a.score) >= RiskLevel.MODERATE
            for a in history[-window:]
        )
