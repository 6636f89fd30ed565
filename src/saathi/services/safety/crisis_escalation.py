"""
Crisis Escalation Controller

Builds a CrisisEvent whenever a turn's risk level reaches moderate or
above: immediate actions, professional contacts, a templated safety
plan and an advisory follow-up schedule.

SAFETY-CRITICAL: This module controls the crisis protocol. All tables
require clinical review.

ARCHITECTURE: The controller is synchronous and side-effect free. It
never dials, sends or schedules anything; the CrisisEvent is handed to
the Notifier/Scheduler collaborator by the session state machine.
"""

from datetime import datetime, timedelta
from typing import Optional, Sequence

from saathi.config.logging_config import get_logger
from saathi.domain.enums import ProtectiveCategory, RiskCategory, RiskLevel
from saathi.domain.models import CrisisEvent, FollowUpSchedule, RiskAssessment
from saathi.services.safety.professional_contacts import ProfessionalContactDirectory

logger = get_logger(__name__)


# CLINICAL_VALIDATION_REQUIRED: action tables per level
IMMEDIATE_ACTIONS: dict[RiskLevel, tuple[str, ...]] = {
    RiskLevel.SEVERE: (
        "contact emergency services immediately",
        "do not leave the person alone",
        "remove access to any means of self-harm",
        "contact a trusted family member or friend",
    ),
    RiskLevel.HIGH: (
        "schedule an immediate professional consultation",
        "activate the personal support network",
        "implement the safety plan",
    ),
    RiskLevel.MODERATE: (
        "increase session frequency",
        "practice grounding techniques",
        "connect with a support person",
    ),
}

# (immediate, short_term, long_term); moderate has no immediate slot
FOLLOW_UP_OFFSETS: dict[RiskLevel, tuple[Optional[timedelta], timedelta, timedelta]] = {
    RiskLevel.SEVERE: (timedelta(hours=2), timedelta(hours=24), timedelta(days=7)),
    RiskLevel.HIGH: (timedelta(hours=24), timedelta(days=3), timedelta(days=14)),
    RiskLevel.MODERATE: (None, timedelta(days=2), timedelta(days=7)),
}

WARNING_SIGN_LABELS: dict[RiskCategory, str] = {
    RiskCategory.SUICIDAL_IDEATION: "thoughts of ending your life",
    RiskCategory.SELF_HARM: "urges to hurt yourself",
    RiskCategory.HOPELESSNESS: "feeling hopeless about the future",
    RiskCategory.ISOLATION: "feeling cut off from others",
    RiskCategory.SUBSTANCE_USE: "using alcohol or drugs to cope",
    RiskCategory.EMOTIONAL_DISTRESS: "feeling trapped or overwhelmed",
}

CATEGORY_PLAN_STEPS: dict[RiskCategory, str] = {
    RiskCategory.SUICIDAL_IDEATION: "Keep crisis helpline numbers saved and within reach",
    RiskCategory.SELF_HARM: "Use a safe alternative when urges arise, such as holding ice or tearing paper",
    RiskCategory.HOPELESSNESS: "Write down reasons for living and one small thing to look forward to",
    RiskCategory.ISOLATION: "Plan daily contact with at least one trusted person",
    RiskCategory.SUBSTANCE_USE: "Avoid alcohol and drugs while feeling unsafe",
    RiskCategory.EMOTIONAL_DISTRESS: "Use 5-4-3-2-1 grounding when distress peaks",
}

STRENGTH_LABELS: dict[ProtectiveCategory, str] = {
    ProtectiveCategory.SOCIAL_SUPPORT: "the people who support you",
    ProtectiveCategory.COPING_SKILLS: "coping activities that help you",
    ProtectiveCategory.FUTURE_ORIENTATION: "your goals and hopes for the future",
    ProtectiveCategory.HELP_SEEKING: "your willingness to ask for help",
}

MEANS_SAFETY_STEP = "Remove or secure potential means of harm"

GENERIC_PLAN_STEPS: tuple[str, ...] = (
    "Use coping strategies: deep breathing, a short walk, calming music",
    "Reach out to a support person you trust",
    "Contact a mental health professional if feelings get worse",
)


class CrisisEscalationController:
    """
    Crisis sub-protocol.

    Fires iff level is moderate, high or severe. Events are immutable
    and append-only; retention is the store's responsibility.

    Usage:
        controller = CrisisEscalationController()
        event = controller.escalate(
            session_id, user_id, assessment, country_code="IN", now=now,
        )
    """

    def __init__(self, directory: Optional[ProfessionalContactDirectory] = None) -> None:
        self._directory = directory or ProfessionalContactDirectory()

    @staticmethod
    def should_escalate(level: RiskLevel) -> bool:
        return level >= RiskLevel.MODERATE

    def escalate(
        self,
        session_id: str,
        user_id: str,
        assessment: RiskAssessment,
        *,
        country_code: str,
        now: datetime,
        history: Sequence[RiskAssessment] = (),
    ) -> Optional[CrisisEvent]:
        """
        Build a crisis event for an assessment.

        Args:
            session_id: Session the turn belongs to
            user_id: Session owner
            assessment: The turn's assessment
            country_code: Jurisdiction for professional contacts
            now: Escalation time, the base for follow-up offsets
            history: Earlier assessments of the session; their
                indicator categories inform the safety plan

        Returns:
            CrisisEvent, or None below moderate
        """
        level = assessment.level
        if not self.should_escalate(level):
            return None

        event = CrisisEvent(
            session_id=session_id,
            user_id=user_id,
            timestamp=now,
            level=level,
            indicators=assessment.indicators,
            immediate_actions=IMMEDIATE_ACTIONS[level],
            professional_contacts=self._directory.contacts_for(level, country_code),
            safety_plan=self.build_safety_plan(assessment, history),
            follow_up_schedule=self.build_follow_up_schedule(level, now),
        )

        logger.warning(
            "Crisis escalation fired",
            event_id=event.id,
            session_id=session_id,
            level=level.label,
            categories=assessment.categories,
            contact_count=len(event.professional_contacts),
        )
        return event

    def build_safety_plan(
        self,
        assessment: RiskAssessment,
        history: Sequence[RiskAssessment] = (),
    ) -> tuple[str, ...]:
        """
        Template a safety plan from the indicator categories that fired.

        Categories from earlier turns follow the current turn's,
        most recent first.
        """
        categories: list[RiskCategory] = []
        for source in (assessment, *reversed(history)):
            for indicator in sorted(source.indicators, key=lambda i: i.category.value):
                if indicator.category not in categories:
                    categories.append(indicator.category)

        plan: list[str] = []
        if categories:
            signs = ", ".join(WARNING_SIGN_LABELS[c] for c in categories)
            plan.append(f"Recognize warning signs: {signs}")
        else:
            plan.append("Recognize warning signs: rising distress that does not ease")

        plan.extend(CATEGORY_PLAN_STEPS[c] for c in categories)
        plan.extend(GENERIC_PLAN_STEPS)

        if assessment.level >= RiskLevel.HIGH:
            plan.append(MEANS_SAFETY_STEP)

        strengths = sorted(p.category for p in assessment.protective_factors)
        if strengths:
            plan.append(
                "Lean on your strengths: " + ", ".join(STRENGTH_LABELS[c] for c in strengths)
            )

        return tuple(plan)

    @staticmethod
    def build_follow_up_schedule(level: RiskLevel, now: datetime) -> FollowUpSchedule:
        immediate, short_term, long_term = FOLLOW_UP_OFFSETS[level]
        return FollowUpSchedule(
            immediate=now + immediate if immediate is not None else None,
            short_term=now + short_term,
            long_term=now + long_term,
        )
