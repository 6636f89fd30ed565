"""
Facial Signal Extractor

Turns one frame's emotion probability vector into an EmotionSignal
with wellness sub-scores (stress, fatigue, engagement) computed as
linear combinations of the vector.

PRIVACY: Only the probability vector reaches the core. Images are
never transmitted or stored.
"""

from datetime import datetime

from saathi.domain.enums import EmotionLabel, Modality
from saathi.domain.exceptions import ExtractorFailure
from saathi.domain.models import FACIAL_EMOTIONS, EmotionSignal, FacialPayload, clamp

FACIAL_LABELS: dict[str, EmotionLabel] = {
    "joy": EmotionLabel.JOY,
    "sorrow": EmotionLabel.SADNESS,
    "anger": EmotionLabel.ANGER,
    "surprise": EmotionLabel.SURPRISE,
    "fear": EmotionLabel.FEAR,
    "disgust": EmotionLabel.DISGUST,
}


def expression_style(peak: float) -> str:
    if peak < 0.4:
        return "reserved"
    if peak > 0.7:
        return "expressive"
    return "moderate"


class FacialSignalExtractor:
    """
    Pure frame-to-EmotionSignal function.

    The vector is normalized to sum to 1. The strongest emotion is
    primary (ties resolve in vector order) and its probability is the
    confidence.
    """

    def extract(self, payload: FacialPayload, observed_at: datetime) -> EmotionSignal:
        if not payload.permission_granted:
            raise ExtractorFailure(Modality.FACIAL.value, "camera permission revoked")

        raw = [float(p) for p in payload.probabilities]
        if len(raw) != len(FACIAL_EMOTIONS):
            raise ExtractorFailure(
                Modality.FACIAL.value,
                f"expected {len(FACIAL_EMOTIONS)} probabilities, got {len(raw)}",
            )
        if any(p < 0.0 for p in raw):
            raise ExtractorFailure(Modality.FACIAL.value, "negative probability")
        total = sum(raw)
        if total <= 0.0:
            raise ExtractorFailure(Modality.FACIAL.value, "empty probability vector")

        vector = {name: value / total for name, value in zip(FACIAL_EMOTIONS, raw)}
        joy, sorrow, anger = vector["joy"], vector["sorrow"], vector["anger"]
        surprise, fear, disgust = vector["surprise"], vector["fear"], vector["disgust"]

        peak_name = max(FACIAL_EMOTIONS, key=lambda name: vector[name])
        peak = vector[peak_name]

        details = {
            "stress_level": round((anger + fear + disgust) / 3, 4),
            "fatigue_level": round(1 - (joy + surprise) / 2, 4),
            "engagement_level": round((joy + surprise + anger) / 3, 4),
            "expression_style": expression_style(peak),
        }

        return EmotionSignal(
            modality=Modality.FACIAL,
            primary_emotion=FACIAL_LABELS[peak_name],
            intensity=peak,
            valence=clamp(joy + 0.5 * surprise - (sorrow + anger + fear + disgust), -1.0, 1.0),
            arousal=clamp(anger + fear + surprise + 0.5 * joy),
            confidence=peak,
            timestamp=observed_at,
            details=details,
        )
