"""
Safety services: lexicon, risk scanning, aggregation and crisis escalation.

SAFETY-CRITICAL: Changes to this package require clinical review.
"""

from saathi.services.safety.crisis_escalation import CrisisEscalationController
from saathi.services.safety.lexicon import Lexicon, load_lexicon, normalize_text
from saathi.services.safety.professional_contacts import ProfessionalContactDirectory
from saathi.services.safety.risk_aggregator import RiskAggregator, RiskThresholds
from saathi.services.safety.risk_scanner import RiskIndicatorScanner

__all__ = [
    "CrisisEscalationController",
    "Lexicon",
    "ProfessionalContactDirectory",
    "RiskAggregator",
    "RiskIndicatorScanner",
    "RiskThresholds",
    "load_lexicon",
    "normalize_text",
]
