"""
Cultural Context Analyzer

Per-message language preference, formality and cultural themes for
reply adaptation. Markers and theme terms come from the ``cultural``
kind of the lexicon table.
"""

import re
from typing import Optional

from saathi.config.logging_config import get_logger
from saathi.domain.enums import LanguagePreference
from saathi.domain.models import CulturalContext
from saathi.services.safety.lexicon import Lexicon, load_lexicon, normalize_text

logger = get_logger(__name__)

DEVANAGARI = re.compile(r"[\u0900-\u097F]")
LATIN = re.compile(r"[a-zA-Z]")

FORMAL_MARKER = "formal_marker"
INFORMAL_MARKER = "informal_marker"
_MARKER_CATEGORIES = frozenset({FORMAL_MARKER, INFORMAL_MARKER})


def detect_language(text: str) -> Optional[LanguagePreference]:
    """Script-based language preference; None when the text has no letters of either script."""
    has_hindi = DEVANAGARI.search(text) is not None
    has_english = LATIN.search(text) is not None
    if has_hindi and has_english:
        return LanguagePreference.MIXED
    if has_hindi:
        return LanguagePreference.HINDI
    if has_english:
        return LanguagePreference.ENGLISH
    return None


class CulturalContextAnalyzer:
    """
    Derives a CulturalContext for one message against a session baseline.

    - language: mixed when Devanagari and Latin letters co-occur,
      hindi for Devanagari only, english for Latin only; otherwise
      the baseline language is kept
    - formality: formal markers / (formal + informal markers); the
      baseline level when no marker is present
    - themes: matched cultural categories, merged with the baseline
      themes in first-seen order
    """

    def __init__(self, lexicon: Optional[Lexicon] = None) -> None:
        self._lexicon = lexicon or load_lexicon()

    def analyze(self, text: str, baseline: Optional[CulturalContext] = None) -> CulturalContext:
        baseline = baseline or CulturalContext()
        normalized = normalize_text(text)

        language = detect_language(normalized) or baseline.language_preference

        hits = self._lexicon.count_hits(normalized, "cultural")
        formal = hits.get(FORMAL_MARKER, 0)
        informal = hits.get(INFORMAL_MARKER, 0)
        if formal or informal:
            formality = formal / (formal + informal)
        else:
            formality = baseline.formality_level

        themes = list(baseline.cultural_themes)
        for category in sorted(hits):
            if category not in _MARKER_CATEGORIES and category not in themes:
                themes.append(category)

        context = CulturalContext(
            language_preference=language,
            formality_level=formality,
            cultural_themes=tuple(themes),
        )
        logger.debug(
            "Cultural context analyzed",
            language=context.language_preference.value,
            formality_level=round(context.formality_level, 3),
            themes=list(context.cultural_themes),
        )
        return context
