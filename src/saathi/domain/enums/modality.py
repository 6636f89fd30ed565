"""
Modality and Emotion Vocabulary

Shared vocabulary for the multi-modal signal extractors.
"""

from enum import StrEnum


class Modality(StrEnum):
    """Input channel for a session or a single emotion signal."""

    TEXT = "text"
    VOICE = "voice"
    FACIAL = "facial"
    MULTIMODAL = "multimodal"
    """Session-level only: text plus any optional channels."""


class EmotionLabel(StrEnum):
    """
    Canonical emotion labels.

    Text and voice extractors produce the lexicon categories
    (anxiety, depression, stress, anger, joy). The facial extractor
    maps its probability vector onto sadness, fear, surprise and
    disgust as well.
    """

    ANXIETY = "anxiety"
    DEPRESSION = "depression"
    STRESS = "stress"
    ANGER = "anger"
    JOY = "joy"
    SADNESS = "sadness"
    FEAR = "fear"
    SURPRISE = "surprise"
    DISGUST = "disgust"
    NEUTRAL = "neutral"

    @property
    def is_negative(self) -> bool:
        return self in _NEGATIVE

    @property
    def is_low_mood(self) -> bool:
        return self in (EmotionLabel.DEPRESSION, EmotionLabel.SADNESS)

    @property
    def is_anxious(self) -> bool:
        return self in (EmotionLabel.ANXIETY, EmotionLabel.FEAR)


_NEGATIVE = frozenset({
    EmotionLabel.ANXIETY,
    EmotionLabel.DEPRESSION,
    EmotionLabel.STRESS,
    EmotionLabel.ANGER,
    EmotionLabel.SADNESS,
    EmotionLabel.FEAR,
    EmotionLabel.DISGUST,
})

# Tie-break order for keyword-driven extractors, highest priority first
EMOTION_PRIORITY: tuple[EmotionLabel, ...] = (
    EmotionLabel.ANXIETY,
    EmotionLabel.DEPRESSION,
    EmotionLabel.STRESS,
    EmotionLabel.ANGER,
    EmotionLabel.JOY,
)
