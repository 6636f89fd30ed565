"""
Modality Extraction Service

Runs the per-modality extractors for one turn as parallel tasks and
joins their results.

ARCHITECTURE: Extractors are pure and share no mutable state, so each
runs in a worker thread under its own timeout. A failed or slow
modality contributes a neutral default signal (confidence 0); the
join never blocks on it and the turn never fails because of it.
"""

import asyncio
from datetime import datetime
from typing import Any, Callable, Optional

from saathi.config.logging_config import get_logger
from saathi.domain.enums import Modality
from saathi.domain.exceptions import ExtractorFailure
from saathi.domain.models import EmotionSignal, ModalityPayload
from saathi.infrastructure.metrics import track_extractor_failure
from saathi.services.extraction.facial_extractor import FacialSignalExtractor
from saathi.services.extraction.text_extractor import TextSignalExtractor
from saathi.services.extraction.voice_extractor import VoiceSignalExtractor

logger = get_logger(__name__)


class ModalityExtractionService:
    """
    Parallel extractor dispatch with per-extractor timeout.

    Text is always extracted; voice and facial only when their
    payload is present. Results are returned in modality order
    (text, voice, facial).

    Usage:
        service = ModalityExtractionService(text, voice, facial, timeout_seconds=2.0)
        signals = await service.extract_all(message, payload, observed_at=now)
    """

    def __init__(
        self,
        text_extractor: TextSignalExtractor,
        voice_extractor: VoiceSignalExtractor,
        facial_extractor: FacialSignalExtractor,
        timeout_seconds: float = 2.0,
    ) -> None:
        self._text = text_extractor
        self._voice = voice_extractor
        self._facial = facial_extractor
        self._timeout = timeout_seconds

    async def extract_all(
        self,
        message: str,
        payload: Optional[ModalityPayload],
        *,
        observed_at: datetime,
    ) -> list[EmotionSignal]:
        """
        Extract one signal per present modality.

        Args:
            message: Turn message text
            payload: Optional voice/facial payloads
            observed_at: Timestamp stamped on every signal

        Returns:
            Signals in modality order; never raises for extractor faults
        """
        jobs: list[tuple[Modality, Callable[[Any, datetime], EmotionSignal], Any]] = [
            (Modality.TEXT, self._text.extract, message),
        ]
        if payload is not None and payload.voice is not None:
            jobs.append((Modality.VOICE, self._voice.extract, payload.voice))
        if payload is not None and payload.facial is not None:
            jobs.append((Modality.FACIAL, self._facial.extract, payload.facial))

        return list(await asyncio.gather(*(
            self._run(modality, extract, data, observed_at)
            for modality, extract, data in jobs
        )))

    async def _run(
        self,
        modality: Modality,
        extract: Callable[[Any, datetime], EmotionSignal],
        data: Any,
        observed_at: datetime,
    ) -> EmotionSignal:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(extract, data, observed_at),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Extractor timed out, using neutral default",
                modality=modality.value,
                timeout_seconds=self._timeout,
            )
            track_extractor_failure(modality.value, "timeout")
            return EmotionSignal.neutral(modality, observed_at, reason="timeout")
        except ExtractorFailure as e:
            logger.warning(
                "Extractor unavailable, using neutral default",
                modality=modality.value,
                reason=e.reason,
            )
            track_extractor_failure(modality.value, "failure")
            return EmotionSignal.neutral(modality, observed_at, reason=e.reason)
        except Exception as e:
            logger.error(
                "Extractor error, using neutral default",
                modality=modality.value,
                error_type=type(e).__name__,
                exc_info=True,
            )
            track_extractor_failure(modality.value, "error")
            return EmotionSignal.neutral(modality, observed_at, reason="error")
