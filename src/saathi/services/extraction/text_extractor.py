"""
Text Signal Extractor

Keyword-driven emotion reading over message text. Every emotion
category is checked in every script on every message so code-mixed
input (Hinglish, Devanagari with English words) is handled without a
language detection step.

CLINICAL_REVIEW_REQUIRED: Emotion keyword lists live in the lexicon
table and need review per language.
"""

from datetime import datetime
from typing import Optional

from saathi.domain.enums import EMOTION_PRIORITY, EmotionLabel, Modality
from saathi.domain.models import EmotionSignal, clamp
from saathi.services.safety.lexicon import Lexicon, load_lexicon, normalize_text

# Intensity gained per keyword hit
HIT_INTENSITY = 0.3

HIGH_AROUSAL = frozenset({EmotionLabel.ANXIETY, EmotionLabel.ANGER})
LOW_AROUSAL = frozenset({EmotionLabel.DEPRESSION})


def count_emotion_hits(lexicon: Lexicon, normalized: str) -> dict[EmotionLabel, int]:
    """Keyword hits per emotion category (categories without hits omitted)."""
    return {
        EmotionLabel(category): count
        for category, count in lexicon.count_hits(normalized, "emotion").items()
    }


def pick_primary(hits: dict[EmotionLabel, int]) -> Optional[EmotionLabel]:
    """
    Category with most hits; ties go to the earlier entry of
    ``EMOTION_PRIORITY`` (anxiety > depression > stress > anger > joy).
    """
    best: Optional[EmotionLabel] = None
    for label in EMOTION_PRIORITY:
        count = hits.get(label, 0)
        if count and (best is None or count > hits[best]):
            best = label
    return best


def keyword_valence(hits: dict[EmotionLabel, int]) -> float:
    """(positive - negative) / max(positive + negative, 1)."""
    positive = hits.get(EmotionLabel.JOY, 0)
    negative = sum(count for label, count in hits.items() if label.is_negative)
    return (positive - negative) / max(positive + negative, 1)


class TextSignalExtractor:
    """
    Pure text-to-EmotionSignal function.

    Scoring:
    - intensity = min(1, primary hits x 0.3)
    - valence from positive vs negative category hits
    - arousal 0.5, raised for anxiety/anger, lowered for depression
    - confidence grows with total hits (0.3 with no hits, 0 for empty text)
    """

    def __init__(self, lexicon: Optional[Lexicon] = None) -> None:
        self._lexicon = lexicon or load_lexicon()

    def extract(self, text: str, observed_at: datetime) -> EmotionSignal:
        normalized = normalize_text(text)
        if not normalized:
            return EmotionSignal.neutral(Modality.TEXT, observed_at, reason="empty_text")

        hits = count_emotion_hits(self._lexicon, normalized)
        primary = pick_primary(hits)

        if primary is None:
            return EmotionSignal(
                modality=Modality.TEXT,
                primary_emotion=EmotionLabel.NEUTRAL,
                intensity=0.1,
                valence=0.0,
                arousal=0.5,
                confidence=0.3,
                timestamp=observed_at,
            )

        intensity = min(1.0, hits[primary] * HIT_INTENSITY)
        arousal = 0.5
        if primary in HIGH_AROUSAL:
            arousal += 0.3 * intensity
        elif primary in LOW_AROUSAL:
            arousal -= 0.2 * intensity

        total_hits = sum(hits.values())
        return EmotionSignal(
            modality=Modality.TEXT,
            primary_emotion=primary,
            intensity=intensity,
            valence=keyword_valence(hits),
            arousal=clamp(arousal),
            confidence=min(0.9, 0.5 + 0.1 * total_hits),
            timestamp=observed_at,
            details={"hits": {label.value: count for label, count in hits.items()}},
        )
