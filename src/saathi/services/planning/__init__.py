"""Therapeutic adaptation planning."""

from saathi.services.planning.adaptation_planner import AdaptationPlanner
from saathi.services.planning.cultural_context import CulturalContextAnalyzer, detect_language

__all__ = [
    "AdaptationPlanner",
    "CulturalContextAnalyzer",
    "detect_language",
]
