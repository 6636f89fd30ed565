"""
Unit Tests for the Adaptation Planner

Tests strategy selection, directive hints and the adaptation log.
"""

from datetime import datetime, timezone
from typing import Optional

import pytest

from saathi.domain.enums import (
    EmotionLabel,
    InterventionStrategy,
    LanguagePreference,
    Modality,
    RiskLevel,
    UrgencyLevel,
)
from saathi.domain.models import CulturalContext, EmotionSignal, RiskAssessment
from saathi.services.planning import AdaptationPlanner


NOW = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def make_assessment(level: RiskLevel = RiskLevel.NONE) -> RiskAssessment:
    return RiskAssessment(
        level=level,
        confidence=0.5,
        score=0.0,
        indicators=frozenset(),
        protective_factors=frozenset(),
        timestamp=NOW,
        follow_up_required=level != RiskLevel.NONE,
        professional_referral=level >= RiskLevel.HIGH,
    )


def make_signal(
    emotion: EmotionLabel,
    intensity: float = 0.3,
    confidence: float = 0.6,
) -> EmotionSignal:
    return EmotionSignal(
        modality=Modality.TEXT,
        primary_emotion=emotion,
        intensity=intensity,
        valence=-0.5,
        arousal=0.5,
        confidence=confidence,
        timestamp=NOW,
    )


@pytest.fixture
def planner() -> AdaptationPlanner:
    return AdaptationPlanner()


def plan(
    planner: AdaptationPlanner,
    level: RiskLevel = RiskLevel.NONE,
    signal: Optional[EmotionSignal] = None,
    cultural: Optional[CulturalContext] = None,
    previous=None,
):
    return planner.plan(make_assessment(level), signal, cultural or CulturalContext(), previous, NOW)


class TestStrategySelection:
    """Highest-priority need picks the strategy."""

    def test_severe_forces_crisis_intervention(self, planner: AdaptationPlanner) -> None:
        """Even a joyful signal cannot override severe risk."""
        directive, _ = plan(planner, RiskLevel.SEVERE, make_signal(EmotionLabel.JOY, intensity=0.9))

        assert directive.strategy == InterventionStrategy.CRISIS_INTERVENTION
        assert directive.urgency == UrgencyLevel.IMMEDIATE
        assert directive.tone == "calm_direct"
        assert directive.needs[0] == "safety"

    @pytest.mark.parametrize(
        ("emotion", "strategy", "need"),
        [
            (EmotionLabel.ANXIETY, InterventionStrategy.MINDFULNESS, "anxiety_management"),
            (EmotionLabel.FEAR, InterventionStrategy.MINDFULNESS, "anxiety_management"),
            (EmotionLabel.DEPRESSION, InterventionStrategy.BEHAVIORAL_ACTIVATION, "mood_support"),
            (EmotionLabel.SADNESS, InterventionStrategy.BEHAVIORAL_ACTIVATION, "mood_support"),
            (EmotionLabel.STRESS, InterventionStrategy.COGNITIVE_RESTRUCTURING, "stress_management"),
            (EmotionLabel.JOY, InterventionStrategy.VALIDATION, "emotional_validation"),
            (EmotionLabel.ANGER, InterventionStrategy.VALIDATION, "emotional_validation"),
        ],
    )
    def test_emotion_driven_strategy(
        self,
        planner: AdaptationPlanner,
        emotion: EmotionLabel,
        strategy: InterventionStrategy,
        need: str,
    ) -> None:
        directive, _ = plan(planner, signal=make_signal(emotion))

        assert directive.strategy == strategy
        assert directive.needs[0] == need
        assert directive.needs[-1] == "emotional_validation"

    def test_defaulted_signal_is_ignored(self, planner: AdaptationPlanner) -> None:
        directive, _ = plan(planner, signal=make_signal(EmotionLabel.ANXIETY, confidence=0.0))

        assert directive.strategy == InterventionStrategy.VALIDATION

    def test_secondary_strategies_exclude_primary(self, planner: AdaptationPlanner) -> None:
        directive, _ = plan(planner)

        assert directive.strategy == InterventionStrategy.VALIDATION
        assert directive.secondary_strategies == (InterventionStrategy.PSYCHOEDUCATION,)

    @pytest.mark.parametrize(
        ("level", "urgency"),
        [
            (RiskLevel.NONE, UrgencyLevel.ROUTINE),
            (RiskLevel.LOW, UrgencyLevel.ROUTINE),
            (RiskLevel.MODERATE, UrgencyLevel.ELEVATED),
            (RiskLevel.HIGH, UrgencyLevel.HIGH),
        ],
    )
    def test_urgency_follows_level(self, planner: AdaptationPlanner, level: RiskLevel, urgency: UrgencyLevel) -> None:
        directive, _ = plan(planner, level)

        assert directive.urgency == urgency
        assert directive.strategy != InterventionStrategy.CRISIS_INTERVENTION


class TestDirectiveHints:
    """Tone, complexity, language and formality."""

    def test_intense_emotion_softens_tone(self, planner: AdaptationPlanner) -> None:
        directive, _ = plan(planner, signal=make_signal(EmotionLabel.STRESS, intensity=0.65))

        assert directive.tone == "gentle_supportive"
        assert directive.complexity == "standard"

    def test_very_intense_emotion_simplifies(self, planner: AdaptationPlanner) -> None:
        directive, _ = plan(planner, signal=make_signal(EmotionLabel.STRESS, intensity=0.9))

        assert directive.complexity == "simplified"

    def test_cultural_context_carries_through(self, planner: AdaptationPlanner) -> None:
        cultural = CulturalContext(
            language_preference=LanguagePreference.HINDI,
            formality_level=0.8,
            cultural_themes=("family_references",),
        )

        directive, _ = plan(planner, cultural=cultural)

        assert directive.language == LanguagePreference.HINDI
        assert directive.formality == "formal"
        assert directive.cultural_themes == ("family_references",)


class TestAdaptationLog:
    """Records of what changed from the previous directive."""

    def test_first_turn_compares_against_default(self, planner: AdaptationPlanner) -> None:
        _, records = plan(planner, signal=make_signal(EmotionLabel.ANXIETY))

        assert len(records) == 1
        assert records[0].kind == "strategy"
        assert records[0].previous == "validation"
        assert records[0].current == "mindfulness"
        assert records[0].reason == "need:anxiety_management"
        assert records[0].timestamp == NOW

    def test_unchanged_directive_records_nothing(self, planner: AdaptationPlanner) -> None:
        first, _ = plan(planner, signal=make_signal(EmotionLabel.STRESS))
        _, records = plan(planner, signal=make_signal(EmotionLabel.STRESS), previous=first)

        assert records == []

    def test_escalation_records_strategy_and_tone(self, planner: AdaptationPlanner) -> None:
        first, _ = plan(planner, signal=make_signal(EmotionLabel.STRESS))
        _, records = plan(planner, RiskLevel.SEVERE, make_signal(EmotionLabel.STRESS), previous=first)

        kinds = {r.kind: r for r in records}
        assert kinds["strategy"].current == "crisis_intervention"
        assert kinds["tone"].previous == "warm"
        assert kinds["tone"].current == "calm_direct"

    def test_language_switch_recorded(self, planner: AdaptationPlanner) -> None:
        first, _ = plan(planner)
        _, records = plan(
            planner,
            cultural=CulturalContext(language_preference=LanguagePreference.MIXED),
            previous=first,
        )

        assert [(r.kind, r.current) for r in records] == [("language", "mixed")]
