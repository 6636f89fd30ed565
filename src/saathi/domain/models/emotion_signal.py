"""
Emotion Signal Models

Normalized per-modality emotional readings and the capped journey
that records them across a session.

PRIVACY: Signals hold derived scores only, never raw text, audio
or image data.
"""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional

from saathi.domain.enums import EmotionLabel, Modality


def clamp(value: float, lower: float = 0.0, upper: float = 1.0) -> float:
    """Clamp a value into [lower, upper]."""
    return max(lower, min(upper, value))


@dataclass(frozen=True)
class EmotionSignal:
    """
    Normalized emotional reading for one modality in one turn.

    Attributes:
        modality: Channel the reading came from
        primary_emotion: Dominant emotion label
        intensity: Strength of the primary emotion (0.0-1.0)
        valence: Negative to positive affect (-1.0 to 1.0)
        arousal: Calm to activated (0.0-1.0)
        confidence: Extractor confidence (0.0 for neutral defaults)
        timestamp: When the reading was taken
        details: Auxiliary read-only scores (sub-scores, buckets)
    """

    modality: Modality
    primary_emotion: EmotionLabel
    intensity: float
    valence: float
    arousal: float
    confidence: float
    timestamp: datetime
    details: Mapping[str, object] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        for name, lower in (("intensity", 0.0), ("valence", -1.0), ("arousal", 0.0), ("confidence", 0.0)):
            value = getattr(self, name)
            if not lower <= value <= 1.0:
                raise ValueError(f"{name} out of range: {value}")
        object.__setattr__(self, "details", MappingProxyType(dict(self.details)))

    @classmethod
    def neutral(cls, modality: Modality, timestamp: datetime, reason: Optional[str] = None) -> "EmotionSignal":
        """
        Neutral default used when a modality is unavailable.

        Confidence is always 0 so downstream consumers ignore it.
        """
        details = {"defaulted": True}
        if reason:
            details["reason"] = reason
        return cls(
            modality=modality,
            primary_emotion=EmotionLabel.NEUTRAL,
            intensity=0.0,
            valence=0.0,
            arousal=0.5,
            confidence=0.0,
            timestamp=timestamp,
            details=details,
        )

    @property
    def is_default(self) -> bool:
        """Whether this signal is a neutral placeholder."""
        return self.confidence == 0.0

    def to_dict(self) -> dict:
        return {
            "modality": self.modality.value,
            "primary_emotion": self.primary_emotion.value,
            "intensity": round(self.intensity, 3),
            "valence": round(self.valence, 3),
            "arousal": round(self.arousal, 3),
            "confidence": round(self.confidence, 3),
            "timestamp": self.timestamp.isoformat(),
            "details": dict(self.details),
        }


_MODALITY_RANK = {Modality.TEXT: 0, Modality.VOICE: 1, Modality.FACIAL: 2}


def select_dominant_signal(signals: Iterable[EmotionSignal]) -> Optional[EmotionSignal]:
    """
    Pick the signal that represents a turn.

    Highest confidence wins; ties resolve text > voice > facial.
    Returns None for an empty iterable.
    """
    ranked = sorted(
        signals,
        key=lambda s: (-s.confidence, _MODALITY_RANK.get(s.modality, 99)),
    )
    return ranked[0] if ranked else None


class EmotionalJourney:
    """
    Ordered, FIFO-capped record of a session's emotion signals.

    Once the cap is reached the oldest entries are evicted first.
    """

    def __init__(self, cap: int = 50, signals: Iterable[EmotionSignal] = ()) -> None:
        if cap < 1:
            raise ValueError("Journey cap must be at least 1")
        self._signals: deque[EmotionSignal] = deque(signals, maxlen=cap)

    @property
    def cap(self) -> int:
        return self._signals.maxlen or 0

    def append(self, signal: EmotionSignal) -> None:
        self._signals.append(signal)

    def extend(self, signals: Iterable[EmotionSignal]) -> None:
        self._signals.extend(signals)

    def for_modality(self, modality: Modality) -> list[EmotionSignal]:
        return [s for s in self._signals if s.modality == modality]

    def latest(self) -> Optional[EmotionSignal]:
        return self._signals[-1] if self._signals else None

    def __len__(self) -> int:
        return len(self._signals)

    def __iter__(self) -> Iterator[EmotionSignal]:
        return iter(self._signals)

    def to_list(self) -> list[dict]:
        return [s.to_dict() for s in self._signals]
