"""
Intervention Strategy Enumerations

Fixed vocabulary of therapeutic approaches handed to the external
response generator, plus the language preference vocabulary used by
cultural adaptation.
"""

from enum import StrEnum


class InterventionStrategy(StrEnum):
    """
    Therapeutic approach tag for a single turn.

    The planner emits exactly one of these per turn. The response
    generator (and its fallback templates) key off the value.
    """

    VALIDATION = "validation"
    """Acknowledge and normalize the user's feelings."""

    COGNITIVE_RESTRUCTURING = "cognitive_restructuring"
    """Gently examine and reframe stress-driven thoughts."""

    MINDFULNESS = "mindfulness"
    """Grounding and breathing for anxious states."""

    CRISIS_INTERVENTION = "crisis_intervention"
    """
    Safety-first crisis response.

    SAFETY_NOTE: Always forced at severe risk, regardless of the
    emotion-derived suggestion.
    """

    BEHAVIORAL_ACTIVATION = "behavioral_activation"
    """Small, achievable activities for low mood."""

    PSYCHOEDUCATION = "psychoeducation"
    """Explain what the user is experiencing and why."""


class LanguagePreference(StrEnum):
    """Detected or declared reply language."""

    ENGLISH = "english"
    HINDI = "hindi"
    MIXED = "mixed"
