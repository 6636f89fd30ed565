"""
Risk Indicator Scanner

Lexicon-driven scan of message text producing weighted risk
indicators, protective factors and a numeric score.

SAFETY-CRITICAL: Scores feed the threshold table in the aggregator.
Overlapping hits across categories intentionally double-count.

LEGAL_REVIEW_REQUIRED: Detection terms and weights have clinical
and legal implications.
"""

from typing import Optional

from saathi.config.logging_config import get_logger
from saathi.domain.enums import ProtectiveCategory, RiskCategory
from saathi.domain.exceptions import InputError
from saathi.domain.models import ProtectiveFactor, RiskIndicator, ScanResult
from saathi.services.safety.lexicon import Lexicon, load_lexicon, normalize_text

logger = get_logger(__name__)

# Inputs shorter than this (ignoring whitespace) cannot contain a term
MIN_SCAN_LENGTH = 2


class RiskIndicatorScanner:
    """
    Scans message text against the risk, protective and context
    rows of the lexicon.

    Scoring:
    1. Each matching risk entry adds its weight (10 direct, 5 indirect)
    2. +plan_with_harm when a plan token and a harm token co-occur
    3. +immediacy when an immediacy token is present

    The scanner is stateless; one instance may be shared across
    sessions and threads.

    Usage:
        scanner = RiskIndicatorScanner()
        result = scanner.scan("I feel hopeless")
    """

    def __init__(self, lexicon: Optional[Lexicon] = None) -> None:
        self._lexicon = lexicon or load_lexicon()

    @property
    def lexicon(self) -> Lexicon:
        return self._lexicon

    def scan(self, text: object) -> ScanResult:
        """
        Scan one message.

        Args:
            text: Raw message text

        Returns:
            ScanResult; empty for empty, too-short or malformed input
        """
        try:
            normalized = normalize_text(text)
        except InputError as e:
            logger.warning("Malformed message treated as empty", error=str(e))
            return ScanResult.empty()

        if len(normalized.replace(" ", "")) < MIN_SCAN_LENGTH:
            return ScanResult.empty()

        indicators = self._build_indicators(normalized)
        protective = self._build_protective_factors(normalized)
        boost_score, boosts = self._context_boosts(normalized)

        score = sum(i.weight for i in indicators) + boost_score

        if indicators:
            logger.info(
                "Risk indicators detected",
                categories=sorted(i.category.value for i in indicators),
                score=score,
                boosts=list(boosts),
            )

        return ScanResult(
            indicators=frozenset(indicators),
            protective_factors=frozenset(protective),
            score=score,
            boosts=boosts,
        )

    def _build_indicators(self, normalized: str) -> list[RiskIndicator]:
        indicators = []
        for category, entries in self._lexicon.find(normalized, "risk").items():
            indicators.append(
                RiskIndicator(
                    category=RiskCategory(category),
                    matched_terms=tuple(sorted({e.term for e in entries})),
                    weight=sum(e.weight for e in entries),
                )
            )
        return indicators

    def _build_protective_factors(self, normalized: str) -> list[ProtectiveFactor]:
        return [
            ProtectiveFactor(
                category=ProtectiveCategory(category),
                matched_terms=tuple(sorted({e.term for e in entries})),
            )
            for category, entries in self._lexicon.find(normalized, "protective").items()
        ]

    def _context_boosts(self, normalized: str) -> tuple[float, tuple[str, ...]]:
        context = self._lexicon.find(normalized, "context")
        boosts = self._lexicon.boosts
        score = 0.0
        applied: list[str] = []

        if "plan" in context and "harm" in context:
            score += boosts.plan_with_harm
            applied.append("plan_with_harm")

        if "immediacy" in context:
            score += boosts.immediacy
            applied.append("immediacy")

        return score, tuple(applied)
