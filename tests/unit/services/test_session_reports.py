"""
Unit Tests for Session Reports

Tests the end-of-session summary, progress report, recommendations
and therapeutic plan update.
"""

from datetime import datetime, timedelta, timezone

import pytest

from saathi.domain.enums import EmotionLabel, InterventionStrategy, Modality, RiskLevel
from saathi.domain.models import (
    EmotionSignal,
    Interaction,
    ProgressMetrics,
    RiskAssessment,
    Session,
    TherapeuticPlan,
)
from saathi.services.session import build_session_report, update_plan
from saathi.services.session.reports import emotional_trend, goal_progress, summarize_journey


NOW = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def make_signal(
    valence: float,
    intensity: float = 0.4,
    emotion: EmotionLabel = EmotionLabel.STRESS,
    modality: Modality = Modality.TEXT,
) -> EmotionSignal:
    return EmotionSignal(
        modality=modality,
        primary_emotion=emotion,
        intensity=intensity,
        valence=valence,
        arousal=0.5,
        confidence=0.6,
        timestamp=NOW,
    )


def make_assessment(level: RiskLevel) -> RiskAssessment:
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


@pytest.fixture
def session() -> Session:
    session = Session(user_id="user-1", start_time=NOW, goals=["stress_management", "self_awareness"])
    session.end_time = NOW + timedelta(minutes=30)
    return session


class TestEmotionalTrend:
    """First versus last valence."""

    @pytest.mark.parametrize(
        ("valences", "expected"),
        [
            ([-0.8, 0.2], "improving"),
            ([0.5, 0.0], "declining"),
            ([0.1, 0.2], "stable"),
            ([-0.5], "stable"),
            ([], "stable"),
        ],
    )
    def test_trend(self, valences: list[float], expected: str) -> None:
        assert emotional_trend([make_signal(v) for v in valences]) == expected


class TestSummary:
    """Session summary."""

    def test_empty_journey(self) -> None:
        summary = summarize_journey([])

        assert summary["start_emotion"] == "neutral"
        assert summary["average_intensity"] == 0.0

    def test_journey_statistics(self) -> None:
        summary = summarize_journey([
            make_signal(-0.5, intensity=0.2, emotion=EmotionLabel.ANXIETY),
            make_signal(0.3, intensity=0.6, emotion=EmotionLabel.JOY),
        ])

        assert summary["start_emotion"] == "anxiety"
        assert summary["end_emotion"] == "joy"
        assert summary["average_intensity"] == pytest.approx(0.4)
        assert summary["intensity_range"] == pytest.approx(0.4)
        assert summary["stability"] == pytest.approx(0.96)

    def test_summary_ignores_defaulted_signals(self, session: Session) -> None:
        session.emotional_journey.extend([
            make_signal(-0.6, emotion=EmotionLabel.ANXIETY),
            EmotionSignal.neutral(Modality.FACIAL, NOW, reason="timeout"),
            make_signal(0.4, emotion=EmotionLabel.JOY),
        ])
        session.risk_history.append(make_assessment(RiskLevel.MODERATE))
        session.crisis_event_ids.append("event-1")
        session.turn_count = 2

        summary = build_session_report(session).summary

        assert summary["duration_minutes"] == 30.0
        assert summary["turn_count"] == 2
        assert summary["emotional_journey"]["end_emotion"] == "joy"
        assert summary["trend"] == "improving"
        assert summary["peak_risk_level"] == "moderate"
        assert summary["crisis_event_count"] == 1

    def test_strategies_in_first_use_order(self, session: Session) -> None:
        for strategy in (
            InterventionStrategy.MINDFULNESS,
            InterventionStrategy.VALIDATION,
            InterventionStrategy.MINDFULNESS,
        ):
            session.record_interaction(Interaction("hi", strategy, RiskLevel.NONE, NOW))

        report = build_session_report(session)

        assert report.summary["strategies_used"] == ["mindfulness", "validation"]
        assert report.progress_report["skills_developed"] == [
            "Mindfulness techniques",
            "Self-validation practice",
        ]


class TestProgressReport:
    """Metrics, growth and goal progress."""

    def test_goal_progress_uses_mapped_metric(self) -> None:
        metrics = ProgressMetrics(emotional_regulation=0.9, self_awareness=0.6, coping_skills_usage=0.3)

        progress = goal_progress(["stress_management", "self_awareness", "sleep_hygiene"], metrics)

        assert progress["stress_management"] == 0.9
        assert progress["self_awareness"] == 0.6
        assert progress["sleep_hygiene"] == pytest.approx(0.6)

    def test_growth_relative_to_baseline(self, session: Session) -> None:
        session.progress_metrics.nudge("emotional_regulation", 0.2)

        report = build_session_report(session).progress_report

        assert report["emotional_growth"]["regulation"] == pytest.approx(0.2)
        assert report["emotional_growth"]["awareness"] == 0.0
        assert report["next_steps"] == []


class TestRecommendations:
    """Ordered recommendation rules."""

    def test_calm_session_has_no_recommendations(self, session: Session) -> None:
        session.emotional_journey.append(make_signal(0.2, intensity=0.3))
        session.risk_history.append(make_assessment(RiskLevel.NONE))

        assert build_session_report(session).recommendations == ()

    def test_all_rules_fire_in_order(self, session: Session) -> None:
        session.emotional_journey.append(make_signal(-0.9, intensity=0.9))
        session.risk_history.extend([make_assessment(RiskLevel.LOW), make_assessment(RiskLevel.HIGH)])
        session.progress_metrics.coping_skills_usage = 0.3

        assert build_session_report(session).recommendations == (
            "Continue practicing emotional regulation techniques",
            "Schedule follow-up session within 24-48 hours",
            "Explore and practice new coping strategies",
            "Reach out to a mental health professional",
        )


class TestUpdatePlan:
    """Folding a closed session into the therapeutic plan."""

    def test_goals_and_milestones(self, session: Session) -> None:
        session.progress_metrics.emotional_regulation = 0.9
        report = build_session_report(session)

        plan = update_plan(TherapeuticPlan(user_id="user-1"), session, report)

        assert plan.goals == ["stress_management", "self_awareness"]
        milestones = {m.name: m for m in plan.milestones}
        assert milestones["stress_management"].achieved_at == session.end_time
        assert not milestones["self_awareness"].achieved
        assert plan.updated_at == session.end_time

    def test_existing_milestones_not_duplicated(self, session: Session) -> None:
        plan = TherapeuticPlan(user_id="user-1")
        report = build_session_report(session)

        update_plan(plan, session, report)
        update_plan(plan, session, report)

        assert [m.name for m in plan.milestones] == ["stress_management", "self_awareness"]
