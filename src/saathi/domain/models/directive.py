"""
Therapeutic Directive Models

Structured output of the AdaptationPlanner. Directives are consumed
by the external response generator; they never contain user-facing
prose.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from saathi.domain.enums import InterventionStrategy, LanguagePreference, UrgencyLevel


@dataclass(frozen=True)
class CulturalContext:
    """
    Language and cultural cues for reply adaptation.

    Attributes:
        language_preference: english, hindi or mixed (code-switched)
        formality_level: 0.0 (casual) to 1.0 (formal)
        cultural_themes: Themes detected in conversation, e.g.
            family_references or academic_pressure
    """

    language_preference: LanguagePreference = LanguagePreference.ENGLISH
    formality_level: float = 0.5
    cultural_themes: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "language_preference": self.language_preference.value,
            "formality_level": round(self.formality_level, 3),
            "cultural_themes": list(self.cultural_themes),
        }


@dataclass(frozen=True)
class StrategyDirective:
    """
    Therapeutic directive for one turn.

    Attributes:
        strategy: Primary intervention strategy
        secondary_strategies: Supporting strategies
        needs: Therapeutic needs that informed the choice
        urgency: Reply urgency
        tone: Tone hint (gentle_supportive, warm, calm_direct)
        complexity: Language complexity hint (simplified, standard)
        language: Reply language
        formality: formal or casual
        cultural_themes: Themes the reply may acknowledge
    """

    strategy: InterventionStrategy
    secondary_strategies: tuple[InterventionStrategy, ...] = ()
    needs: tuple[str, ...] = ()
    urgency: UrgencyLevel = UrgencyLevel.ROUTINE
    tone: str = "warm"
    complexity: str = "standard"
    language: LanguagePreference = LanguagePreference.ENGLISH
    formality: str = "casual"
    cultural_themes: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "strategy": self.strategy.value,
            "secondary_strategies": [s.value for s in self.secondary_strategies],
            "needs": list(self.needs),
            "urgency": self.urgency.value,
            "tone": self.tone,
            "complexity": self.complexity,
            "language": self.language.value,
            "formality": self.formality,
            "cultural_themes": list(self.cultural_themes),
        }


@dataclass(frozen=True)
class AdaptationRecord:
    """One entry of a session's adaptation log."""

    kind: str
    previous: str
    current: str
    reason: str
    timestamp: Optional[datetime] = field(default=None, compare=False)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "previous": self.previous,
            "current": self.current,
            "reason": self.reason,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }
