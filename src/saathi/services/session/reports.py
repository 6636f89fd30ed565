"""
Session Reports

End-of-session summary, progress report and recommendations, built
from a closing session's journey, metrics and risk history.

CLINICAL_VALIDATION_REQUIRED: Recommendation rules and goal/metric
mappings need clinical review before production use.
"""

from typing import Sequence

from saathi.domain.enums import InterventionStrategy, Modality, RiskLevel
from saathi.domain.models import (
    EmotionSignal,
    Milestone,
    ProgressMetrics,
    Session,
    SessionReport,
    TherapeuticPlan,
)

BASELINE_METRIC = 0.5
TREND_DELTA = 0.2
GOAL_ACHIEVED = 0.8

SKILL_LABELS: dict[InterventionStrategy, str] = {
    InterventionStrategy.MINDFULNESS: "Mindfulness techniques",
    InterventionStrategy.COGNITIVE_RESTRUCTURING: "Cognitive restructuring",
    InterventionStrategy.VALIDATION: "Self-validation practice",
}

# Progress metric that tracks each known goal
GOAL_METRICS: dict[str, str] = {
    "stress_management": "emotional_regulation",
    "emotional_regulation": "emotional_regulation",
    "anxiety_management": "emotional_regulation",
    "self_awareness": "self_awareness",
    "coping_skills": "coping_skills_usage",
    "social_connection": "engagement_level",
}


def _variance(values: Sequence[float]) -> float:
    mean = sum(values) / len(values)
    return sum((v - mean) ** 2 for v in values) / len(values)


def emotional_trend(signals: Sequence[EmotionSignal]) -> str:
    """improving / declining / stable from first vs last valence."""
    if len(signals) < 2:
        return "stable"
    first, last = signals[0].valence, signals[-1].valence
    if last > first + TREND_DELTA:
        return "improving"
    if last < first - TREND_DELTA:
        return "declining"
    return "stable"


def summarize_journey(signals: Sequence[EmotionSignal]) -> dict:
    if not signals:
        return {
            "start_emotion": "neutral",
            "end_emotion": "neutral",
            "average_intensity": 0.0,
            "intensity_range": 0.0,
            "stability": BASELINE_METRIC,
        }

    intensities = [s.intensity for s in signals]
    stability = max(0.0, 1 - _variance(intensities)) if len(signals) > 1 else BASELINE_METRIC
    return {
        "start_emotion": signals[0].primary_emotion.value,
        "end_emotion": signals[-1].primary_emotion.value,
        "average_intensity": round(sum(intensities) / len(intensities), 4),
        "intensity_range": round(max(intensities) - min(intensities), 4),
        "stability": round(stability, 4),
    }


def strategies_used(session: Session) -> list[InterventionStrategy]:
    """Distinct strategies of the session, in first-use order."""
    seen: list[InterventionStrategy] = []
    for interaction in session.interactions:
        if interaction.strategy not in seen:
            seen.append(interaction.strategy)
    return seen


def goal_progress(goals: Sequence[str], metrics: ProgressMetrics) -> dict[str, float]:
    overall = (
        metrics.emotional_regulation
        + metrics.self_awareness
        + metrics.coping_skills_usage
    ) / 3
    progress = {}
    for goal in goals:
        metric = GOAL_METRICS.get(goal)
        value = getattr(metrics, metric) if metric else overall
        progress[goal] = round(value, 3)
    return progress


def build_summary(session: Session) -> dict:
    # Observed signals only; neutral defaults carry no reading
    observed = [s for s in session.emotional_journey if not s.is_default]
    text_signals = [s for s in observed if s.modality == Modality.TEXT]
    return {
        "session_id": session.id,
        "duration_minutes": round(session.get_duration_minutes(), 2),
        "turn_count": session.turn_count,
        "emotional_journey": summarize_journey(observed),
        "trend": emotional_trend(text_signals),
        "strategies_used": [s.value for s in strategies_used(session)],
        "peak_risk_level": session.peak_risk_level.label,
        "crisis_event_count": len(session.crisis_event_ids),
    }


def build_progress_report(session: Session) -> dict:
    metrics = session.progress_metrics
    used = strategies_used(session)

    next_steps = []
    if metrics.emotional_regulation < 0.6:
        next_steps.append("Keep practicing emotional regulation techniques")
    if metrics.coping_skills_usage < 0.5:
        next_steps.append("Build a personal coping toolkit")

    return {
        "metrics": metrics.to_dict(),
        "skills_developed": [SKILL_LABELS[s] for s in SKILL_LABELS if s in used],
        "emotional_growth": {
            "regulation": round(metrics.emotional_regulation - BASELINE_METRIC, 3),
            "awareness": round(metrics.self_awareness - BASELINE_METRIC, 3),
        },
        "next_steps": next_steps,
        "goal_progress": goal_progress(session.goals, metrics),
    }


def build_recommendations(session: Session) -> tuple[str, ...]:
    recommendations = []

    observed = [s for s in session.emotional_journey if not s.is_default]
    if observed and observed[-1].intensity > 0.6:
        recommendations.append("Continue practicing emotional regulation techniques")

    if session.peak_risk_level != RiskLevel.NONE:
        recommendations.append("Schedule follow-up session within 24-48 hours")

    if session.progress_metrics.coping_skills_usage < 0.5:
        recommendations.append("Explore and practice new coping strategies")

    if any(a.professional_referral for a in session.risk_history):
        recommendations.append("Reach out to a mental health professional")

    return tuple(recommendations)


def build_session_report(session: Session) -> SessionReport:
    """Full end-of-session report."""
    return SessionReport(
        summary=build_summary(session),
        progress_report=build_progress_report(session),
        recommendations=build_recommendations(session),
    )


def update_plan(plan: TherapeuticPlan, session: Session, report: SessionReport) -> TherapeuticPlan:
    """
    Fold a closed session into the user's therapeutic plan.

    Session goals become the plan's goals; a goal whose progress
    exceeds 0.8 marks its milestone achieved.
    """
    when = session.end_time or session.start_time
    plan.goals = list(session.goals)
    known = {m.name for m in plan.milestones}
    for goal in session.goals:
        if goal not in known:
            plan.milestones.append(Milestone(name=goal))

    for goal, value in report.progress_report["goal_progress"].items():
        if value > GOAL_ACHIEVED:
            plan.achieve(goal, when)

    plan.updated_at = when
    return plan
