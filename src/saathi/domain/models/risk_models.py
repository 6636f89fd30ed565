"""
Risk Models

Data models for lexicon scanning and risk assessment.

SAFETY-CRITICAL: This module defines the risk classification record.
All definitions require clinical and legal review.

ARCHITECTURE: ScanResult is produced by the RiskIndicatorScanner and
consumed by the RiskAggregator, which produces an immutable
RiskAssessment once per turn.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from saathi.domain.enums import ProtectiveCategory, RiskCategory, RiskLevel


@dataclass(frozen=True)
class RiskIndicator:
    """
    Weighted evidence of harm risk for one category.

    Attributes:
        category: Risk category the terms belong to
        matched_terms: Lexicon terms found in the message (sorted)
        weight: Sum of the matched entries' weights
    """

    category: RiskCategory
    matched_terms: tuple[str, ...]
    weight: float

    def to_dict(self) -> dict:
        return {
            "category": self.category.value,
            "matched_terms": list(self.matched_terms),
            "weight": self.weight,
        }


@dataclass(frozen=True)
class ProtectiveFactor:
    """Evidence of resilience for one category."""

    category: ProtectiveCategory
    matched_terms: tuple[str, ...]

    def to_dict(self) -> dict:
        return {
            "category": self.category.value,
            "matched_terms": list(self.matched_terms),
        }


@dataclass(frozen=True)
class ScanResult:
    """
    Output of a lexicon scan over one message.

    Attributes:
        indicators: Risk indicators, one per fired category
        protective_factors: Protective factors, one per fired category
        score: Total weight including contextual boosts
        boosts: Names of contextual boosts applied
    """

    indicators: frozenset[RiskIndicator] = frozenset()
    protective_factors: frozenset[ProtectiveFactor] = frozenset()
    score: float = 0.0
    boosts: tuple[str, ...] = ()

    @classmethod
    def empty(cls) -> "ScanResult":
        return cls()

    @property
    def categories(self) -> frozenset[RiskCategory]:
        return frozenset(i.category for i in self.indicators)

    @property
    def protective_categories(self) -> frozenset[ProtectiveCategory]:
        return frozenset(p.category for p in self.protective_factors)

    def has_category(self, category: RiskCategory) -> bool:
        return category in self.categories


@dataclass(frozen=True)
class RiskAssessment:
    """
    The fused, discrete risk verdict for one turn.

    Immutable once created. Appended to the session's risk history
    and archived with the session.

    Attributes:
        level: Discrete risk level
        confidence: Deterministic function of score (0.0-1.0)
        score: Scanner score the level was derived from
        indicators: Risk indicators that fired
        protective_factors: Protective factors that fired
        timestamp: When the assessment was made
        follow_up_required: True whenever level is above none
        professional_referral: True at high and severe
        override_applied: Name of the override rule, if one fired
        contributing_signals: Non-lexicon evidence that raised the level
    """

    level: RiskLevel
    confidence: float
    score: float
    indicators: frozenset[RiskIndicator]
    protective_factors: frozenset[ProtectiveFactor]
    timestamp: datetime
    follow_up_required: bool
    professional_referral: bool
    override_applied: Optional[str] = None
    contributing_signals: tuple[str, ...] = field(default=())

    @property
    def categories(self) -> list[str]:
        return sorted(i.category.value for i in self.indicators)

    def to_dict(self) -> dict:
        return {
            "level": self.level.label,
            "confidence": round(self.confidence, 3),
            "score": self.score,
            "indicators": [i.to_dict() for i in sorted(self.indicators, key=lambda i: i.category.value)],
            "protective_factors": [
                p.to_dict() for p in sorted(self.protective_factors, key=lambda p: p.category.value)
            ],
            "timestamp": self.timestamp.isoformat(),
            "follow_up_required": self.follow_up_required,
            "professional_referral": self.professional_referral,
            "override_applied": self.override_applied,
            "contributing_signals": list(self.contributing_signals),
        }

    def to_audit_record(self) -> dict:
        """Audit record without matched terms (categories only)."""
        return {
            "level": self.level.label,
            "score": self.score,
            "confidence": round(self.confidence, 3),
            "categories": self.categories,
            "protective_factor_count": len(self.protective_factors),
            "override_applied": self.override_applied,
            "timestamp": self.timestamp.isoformat(),
        }
