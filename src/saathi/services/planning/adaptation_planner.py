"""
Adaptation Planner

Maps a turn's risk assessment, dominant emotion signal and cultural
context to a StrategyDirective, and records how the directive changed
from the previous turn.

SAFETY-CRITICAL: Severe risk always yields crisis_intervention. No
emotion-derived suggestion may override it.

The planner never produces user-facing prose; reply text is the
response generator's job.
"""

from datetime import datetime
from typing import Optional

from saathi.config.logging_config import get_logger
from saathi.domain.enums import (
    EmotionLabel,
    InterventionStrategy,
    LanguagePreference,
    RiskLevel,
    UrgencyLevel,
)
from saathi.domain.models import (
    AdaptationRecord,
    CulturalContext,
    EmotionSignal,
    RiskAssessment,
    StrategyDirective,
)

logger = get_logger(__name__)

SECONDARY_STRATEGIES: tuple[InterventionStrategy, ...] = (
    InterventionStrategy.VALIDATION,
    InterventionStrategy.PSYCHOEDUCATION,
)

GENTLE_TONE_INTENSITY = 0.6
SIMPLIFIED_INTENSITY = 0.7
FORMAL_THRESHOLD = 0.6


def _needs_for(
    assessment: RiskAssessment,
    signal: Optional[EmotionSignal],
) -> list[tuple[str, InterventionStrategy]]:
    """
    Therapeutic needs in priority order, each paired with the strategy
    that meets it.
    """
    needs: list[tuple[str, InterventionStrategy]] = []
    if assessment.level == RiskLevel.SEVERE:
        needs.append(("safety", InterventionStrategy.CRISIS_INTERVENTION))

    if signal is not None and signal.confidence > 0.0:
        emotion = signal.primary_emotion
        if emotion.is_anxious:
            needs.append(("anxiety_management", InterventionStrategy.MINDFULNESS))
        elif emotion.is_low_mood:
            needs.append(("mood_support", InterventionStrategy.BEHAVIORAL_ACTIVATION))
        elif emotion == EmotionLabel.STRESS:
            needs.append(("stress_management", InterventionStrategy.COGNITIVE_RESTRUCTURING))

    needs.append(("emotional_validation", InterventionStrategy.VALIDATION))
    return needs


def _urgency_for(level: RiskLevel) -> UrgencyLevel:
    if level == RiskLevel.SEVERE:
        return UrgencyLevel.IMMEDIATE
    if level == RiskLevel.HIGH:
        return UrgencyLevel.HIGH
    if level == RiskLevel.MODERATE:
        return UrgencyLevel.ELEVATED
    return UrgencyLevel.ROUTINE


class AdaptationPlanner:
    """
    Pure directive planner.

    Usage:
        planner = AdaptationPlanner()
        directive, adaptations = planner.plan(assessment, signal, cultural, previous)
    """

    def plan(
        self,
        assessment: RiskAssessment,
        signal: Optional[EmotionSignal],
        cultural: CulturalContext,
        previous: Optional[StrategyDirective] = None,
        now: Optional[datetime] = None,
    ) -> tuple[StrategyDirective, list[AdaptationRecord]]:
        """
        Plan the directive for one turn.

        Args:
            assessment: Risk assessment of this turn
            signal: Dominant emotion signal (ignored when confidence is 0)
            cultural: Cultural context of this turn
            previous: Directive of the previous turn, if any
            now: Timestamp for adaptation records

        Returns:
            (directive, adaptation records relative to ``previous``)
        """
        # Step 1: Highest-priority unmet need picks the strategy
        needs = _needs_for(assessment, signal)
        need, strategy = needs[0]

        # Step 2: Hints
        intensity = signal.intensity if signal is not None and signal.confidence > 0.0 else 0.0
        if strategy == InterventionStrategy.CRISIS_INTERVENTION:
            tone = "calm_direct"
        elif intensity > GENTLE_TONE_INTENSITY:
            tone = "gentle_supportive"
        else:
            tone = "warm"

        directive = StrategyDirective(
            strategy=strategy,
            secondary_strategies=tuple(s for s in SECONDARY_STRATEGIES if s != strategy),
            needs=tuple(name for name, _ in needs),
            urgency=_urgency_for(assessment.level),
            tone=tone,
            complexity="simplified" if intensity > SIMPLIFIED_INTENSITY else "standard",
            language=cultural.language_preference,
            formality="formal" if cultural.formality_level > FORMAL_THRESHOLD else "casual",
            cultural_themes=cultural.cultural_themes,
        )

        # Step 3: Record what changed
        adaptations = self._diff(previous, directive, need, intensity, now)
        if strategy == InterventionStrategy.CRISIS_INTERVENTION:
            logger.warning(
                "Crisis intervention strategy selected",
                risk_level=assessment.level.label,
            )
        return directive, adaptations

    def _diff(
        self,
        previous: Optional[StrategyDirective],
        current: StrategyDirective,
        need: str,
        intensity: float,
        now: Optional[datetime],
    ) -> list[AdaptationRecord]:
        if previous is None:
            baseline = StrategyDirective(
                strategy=InterventionStrategy.VALIDATION,
                language=LanguagePreference.ENGLISH,
            )
        else:
            baseline = previous

        records: list[AdaptationRecord] = []
        if current.strategy != baseline.strategy:
            records.append(AdaptationRecord(
                kind="strategy",
                previous=baseline.strategy.value,
                current=current.strategy.value,
                reason=f"need:{need}",
                timestamp=now,
            ))
        if current.tone != baseline.tone:
            records.append(AdaptationRecord(
                kind="tone",
                previous=baseline.tone,
                current=current.tone,
                reason=f"intensity:{intensity:.2f}",
                timestamp=now,
            ))
        if current.complexity != baseline.complexity:
            records.append(AdaptationRecord(
                kind="complexity",
                previous=baseline.complexity,
                current=current.complexity,
                reason=f"intensity:{intensity:.2f}",
                timestamp=now,
            ))
        if current.language != baseline.language:
            records.append(AdaptationRecord(
                kind="language",
                previous=baseline.language.value,
                current=current.language.value,
                reason="language_preference",
                timestamp=now,
            ))
        return records
