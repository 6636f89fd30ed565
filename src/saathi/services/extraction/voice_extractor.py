"""
Voice Signal Extractor

Derives an emotion reading from a speech transcript plus coarse
acoustic buckets. The confidence is a fixed constant, not a
calibrated probability.
"""

from datetime import datetime
from typing import Optional

from saathi.domain.enums import EmotionLabel, Modality
from saathi.domain.exceptions import ExtractorFailure
from saathi.domain.models import EmotionSignal, VoicePayload, clamp
from saathi.services.extraction.text_extractor import (
    HIT_INTENSITY,
    count_emotion_hits,
    keyword_valence,
    pick_primary,
)
from saathi.services.safety.lexicon import Lexicon, load_lexicon, normalize_text

DEFAULT_AMPLITUDE = 0.5
HIGH_PITCH_ZCR = 0.1


def volume_bucket(amplitude: float) -> str:
    if amplitude > 0.7:
        return "loud"
    if amplitude > 0.3:
        return "normal"
    return "quiet"


class VoiceSignalExtractor:
    """
    Pure voice-to-EmotionSignal function.

    - tone from emotion keywords in the transcript
    - volume bucket from amplitude, pitch bucket from zero-crossing rate
    - intensity = min(1, hits x 0.3 + amplitude)
    - arousal = amplitude, +0.1 when pitch is high
    """

    def __init__(self, lexicon: Optional[Lexicon] = None, confidence: float = 0.85) -> None:
        self._lexicon = lexicon or load_lexicon()
        self._confidence = confidence

    def extract(self, payload: VoicePayload, observed_at: datetime) -> EmotionSignal:
        amplitude = DEFAULT_AMPLITUDE if payload.amplitude is None else payload.amplitude
        if not 0.0 <= amplitude <= 1.0:
            raise ExtractorFailure(Modality.VOICE.value, f"amplitude out of range: {amplitude}")
        if payload.zero_crossing_rate < 0.0:
            raise ExtractorFailure(Modality.VOICE.value, "negative zero-crossing rate")

        transcript = normalize_text(payload.transcript or "")
        if not transcript and payload.amplitude is None:
            raise ExtractorFailure(Modality.VOICE.value, "no transcript or acoustic features")

        hits = count_emotion_hits(self._lexicon, transcript)
        primary = pick_primary(hits) or EmotionLabel.NEUTRAL
        pitch = "high" if payload.zero_crossing_rate > HIGH_PITCH_ZCR else "normal"

        primary_hits = hits.get(primary, 0)
        arousal = amplitude + (0.1 if pitch == "high" else 0.0)

        return EmotionSignal(
            modality=Modality.VOICE,
            primary_emotion=primary,
            intensity=min(1.0, primary_hits * HIT_INTENSITY + amplitude),
            valence=keyword_valence(hits),
            arousal=clamp(arousal),
            confidence=self._confidence,
            timestamp=observed_at,
            details={"volume": volume_bucket(amplitude), "pitch": pitch},
        )
