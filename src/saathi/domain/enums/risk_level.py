"""
Risk Level and Urgency Enumerations

Defines the discrete risk scale produced by the aggregator and the
urgency levels used to prioritize therapeutic directives.

CLINICAL_REVIEW_REQUIRED: Level definitions and their escalation
consequences need validation by mental health professionals.
"""

from enum import IntEnum, StrEnum


class RiskLevel(IntEnum):
    """
    Discrete risk verdict for a single turn.

    Ordering is meaningful: severe > high > moderate > low > none.
    Comparisons such as ``level >= RiskLevel.MODERATE`` are used to
    decide whether crisis escalation fires.
    """

    NONE = 0
    """No risk indicators detected."""

    LOW = 1
    """
    Low risk.
    - Isolated indirect indicators or acute distress
    - Supportive conversation continues
    """

    MODERATE = 2
    """
    Moderate risk.
    - Indirect indicators accumulating
    - Crisis escalation fires (follow-up scheduling, grounding)
    """

    HIGH = 3
    """
    High risk.
    - Direct harm language without ideation override
    - Professional consultation recommended
    """

    SEVERE = 4
    """
    Severe risk.
    - Suicidal ideation or compounded high-risk language
    - MUST surface emergency contacts

    SAFETY_NOTE: Any suicidal-ideation indicator forces this level.
    """

    @property
    def label(self) -> str:
        """Lower-case wire name (``none`` .. ``severe``)."""
        return self.name.lower()

    @classmethod
    def from_label(cls, label: str) -> "RiskLevel":
        """Parse a wire name back into a level."""
        return cls[label.strip().upper()]


class UrgencyLevel(StrEnum):
    """
    Directive urgency handed to the response generator.
    """

    ROUTINE = "routine"
    """Standard supportive pacing."""

    ELEVATED = "elevated"
    """Check in more closely; offer grounding proactively."""

    HIGH = "high"
    """Prioritize safety planning and professional referral."""

    IMMEDIATE = "immediate"
    """
    Crisis protocol.

    SAFETY_NOTE: Replies at this level must put safety first and
    surface crisis contacts.
    """

    @classmethod
    def from_risk_level(cls, level: RiskLevel) -> "UrgencyLevel":
        """
        Map a risk level to directive urgency.

        Args:
            level: Aggregated risk level

        Returns:
            Corresponding urgency level
        """
        mapping = {
            RiskLevel.NONE: cls.ROUTINE,
            RiskLevel.LOW: cls.ROUTINE,
            RiskLevel.MODERATE: cls.ELEVATED,
            RiskLevel.HIGH: cls.HIGH,
            RiskLevel.SEVERE: cls.IMMEDIATE,
        }
        return mapping.get(level, cls.HIGH)


class RiskCategory(StrEnum):
    """Categories of weighted risk evidence found in message text."""

    SUICIDAL_IDEATION = "suicidal_ideation"
    SELF_HARM = "self_harm"
    HOPELESSNESS = "hopelessness"
    ISOLATION = "isolation"
    SUBSTANCE_USE = "substance_use"
    EMOTIONAL_DISTRESS = "emotional_distress"


class ProtectiveCategory(StrEnum):
    """Categories of resilience evidence found in message text."""

    SOCIAL_SUPPORT = "social_support"
    COPING_SKILLS = "coping_skills"
    FUTURE_ORIENTATION = "future_orientation"
    HELP_SEEKING = "help_seeking"
