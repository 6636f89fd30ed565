"""
Turn Input Payloads

Optional per-turn modality payloads that accompany the message text.
Raw audio and video never reach the core; clients send coarse
acoustic features and per-frame probability vectors.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

# Order of the facial probability vector
FACIAL_EMOTIONS: tuple[str, ...] = ("joy", "sorrow", "anger", "surprise", "fear", "disgust")


@dataclass(frozen=True)
class VoicePayload:
    """
    Voice features for one utterance.

    Attributes:
        transcript: Speech-to-text transcript
        amplitude: Mean normalized amplitude (0.0-1.0)
        zero_crossing_rate: Zero-crossing rate, a coarse pitch proxy
    """

    transcript: str = ""
    amplitude: Optional[float] = None
    zero_crossing_rate: float = 0.0


@dataclass(frozen=True)
class FacialPayload:
    """
    One facial-expression frame.

    Attributes:
        probabilities: Scores in ``FACIAL_EMOTIONS`` order
        permission_granted: False once the user revokes camera access
    """

    probabilities: Sequence[float] = ()
    permission_granted: bool = True


@dataclass(frozen=True)
class ModalityPayload:
    """Optional channels supplied with a turn."""

    voice: Optional[VoicePayload] = None
    facial: Optional[FacialPayload] = None
