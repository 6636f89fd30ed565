"""
Response Supervisor

Manages response generator calls with timeout, retry, strict decode and
templated fallback. Generator failures never block user support.

SAFETY CRITICAL: The supervisor runs after risk assessment and crisis
escalation. Nothing it does can change an assessment or a crisis event;
on any failure the reply falls back to a static template keyed by the
turn's strategy.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from saathi.config.logging_config import get_logger
from saathi.config.settings import GeneratorSettings
from saathi.domain.exceptions import GeneratorUnavailableError
from saathi.domain.models import (
    CulturalContext,
    Interaction,
    ProfessionalContact,
    StrategyDirective,
)
from saathi.infrastructure.generator import GenerationRequest, HistoryTurn, ResponseGenerator
from saathi.infrastructure.metrics import GENERATOR_LATENCY, GENERATOR_REQUESTS_TOTAL
from saathi.services.generation.fallback_templates import (
    get_fallback_response,
    get_strategy_guidelines,
)
from saathi.services.safety import RiskIndicatorScanner

logger = get_logger(__name__)

MAX_REPLY_LENGTH = 4000


class GeneratedReply(BaseModel):
    """Schema for structured (JSON) generator output."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    reply: str = Field(..., min_length=1, max_length=MAX_REPLY_LENGTH)
    strategy: Optional[str] = None
    language: Optional[str] = None


class ReplyDecodeError(ValueError):
    """Generator output did not decode into a usable reply."""


def decode_reply(raw: object) -> str:
    """
    Strictly decode generator output.

    JSON-looking output must validate against ``GeneratedReply``;
    anything else must be non-empty text within the length bound.

    Raises:
        ReplyDecodeError: When the output is unusable
    """
    if not isinstance(raw, str):
        raise ReplyDecodeError(f"Expected text, got {type(raw).__name__}")

    text = raw.strip()
    if text.startswith("{"):
        try:
            return GeneratedReply.model_validate_json(text).reply
        except ValidationError as e:
            raise ReplyDecodeError(f"Structured reply failed validation: {e.error_count()} errors") from e

    if not text:
        raise ReplyDecodeError("Empty reply")
    if len(text) > MAX_REPLY_LENGTH:
        raise ReplyDecodeError("Reply exceeds maximum length")
    return text


def _is_retryable(error: BaseException) -> bool:
    return isinstance(error, GeneratorUnavailableError) and error.is_retryable


@dataclass
class ReplyOutcome:
    """
    Reply for one turn.

    Attributes:
        text: Reply text shown to the user
        source: "generator" or "fallback"
        strategy: Strategy the reply was produced for
        latency_ms: Time spent including retries
        error: Why the fallback was used, if it was
        flagged_categories: Risk categories found in generated text
    """

    text: str
    source: str
    strategy: str
    latency_ms: float = 0.0
    error: Optional[str] = None
    flagged_categories: list[str] = field(default_factory=list)

    @property
    def is_fallback(self) -> bool:
        return self.source == "fallback"

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "source": self.source,
            "strategy": self.strategy,
            "flagged_categories": list(self.flagged_categories),
        }


class ResponseSupervisor:
    """
    Supervised response generator invocation.

    Features:
    - Overall timeout around all attempts
    - Exponential-backoff retry for retryable failures only
    - Strict decode with deterministic fallback
    - Risk re-scan of generated text (flag only, logged)

    Usage:
        supervisor = ResponseSupervisor(generator, scanner, settings)
        outcome = await supervisor.reply(message, directive, cultural, history)
    """

    def __init__(
        self,
        generator: ResponseGenerator,
        scanner: Optional[RiskIndicatorScanner] = None,
        settings: Optional[GeneratorSettings] = None,
        wait_min_seconds: float = 1.0,
        wait_max_seconds: float = 10.0,
    ) -> None:
        settings = settings or GeneratorSettings()
        self._generator = generator
        self._scanner = scanner
        self._timeout = settings.timeout_seconds
        self._max_attempts = settings.max_attempts
        self._history_window = settings.history_window
        self._wait_min = wait_min_seconds
        self._wait_max = wait_max_seconds

    def build_request(
        self,
        user_message: str,
        directive: StrategyDirective,
        cultural: CulturalContext,
        history: Sequence[Interaction] = (),
    ) -> GenerationRequest:
        window = list(history)[-self._history_window:] if self._history_window > 0 else []
        return GenerationRequest(
            user_message=user_message,
            directive=directive,
            cultural_context=cultural,
            history=tuple(
                HistoryTurn(
                    user_message=i.user_message,
                    reply=i.reply or "",
                    strategy=i.strategy.value,
                )
                for i in window
            ),
            guidelines=get_strategy_guidelines(directive.strategy),
        )

    async def reply(
        self,
        user_message: str,
        directive: StrategyDirective,
        cultural: CulturalContext,
        history: Sequence[Interaction] = (),
        contacts: Sequence[ProfessionalContact] = (),
    ) -> ReplyOutcome:
        """
        Generate the reply for a turn.

        Never raises for generator faults; returns a fallback instead.

        Args:
            user_message: Current user message
            directive: Directive from the planner
            cultural: Cultural context of the turn
            history: Prior interactions, oldest first
            contacts: Crisis contacts to include in a fallback reply

        Returns:
            ReplyOutcome
        """
        request = self.build_request(user_message, directive, cultural, history)
        started = time.perf_counter()

        try:
            raw = await asyncio.wait_for(self._generate_with_retry(request), timeout=self._timeout)
            text = decode_reply(raw)
        except asyncio.TimeoutError:
            logger.warning(
                "Response generator timeout - using fallback",
                generator=self._generator.generator_name,
                timeout_seconds=self._timeout,
            )
            return self._fallback(directive, contacts, started, reason="timeout")
        except GeneratorUnavailableError as e:
            logger.warning(
                "Response generator unavailable - using fallback",
                generator=e.generator,
                retryable=e.is_retryable,
                error=str(e),
            )
            return self._fallback(directive, contacts, started, reason="unavailable")
        except ReplyDecodeError as e:
            logger.warning(
                "Generator output failed decode - using fallback",
                generator=self._generator.generator_name,
                error=str(e),
            )
            return self._fallback(directive, contacts, started, reason="decode", outcome="decode_fallback")
        except Exception as e:
            logger.error(
                "Response generator error - using fallback",
                generator=self._generator.generator_name,
                error_type=type(e).__name__,
                exc_info=True,
            )
            return self._fallback(directive, contacts, started, reason="error")

        latency = time.perf_counter() - started
        GENERATOR_REQUESTS_TOTAL.labels(outcome="generated").inc()
        GENERATOR_LATENCY.observe(latency)

        outcome = ReplyOutcome(
            text=text,
            source="generator",
            strategy=directive.strategy.value,
            latency_ms=round(latency * 1000, 1),
        )
        self._flag_risky_reply(outcome)
        return outcome

    async def _generate_with_retry(self, request: GenerationRequest) -> str:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential(multiplier=1, min=self._wait_min, max=self._wait_max),
            retry=retry_if_exception(_is_retryable),
            reraise=True,
        ):
            with attempt:
                return await self._generator.generate(request)
        raise GeneratorUnavailableError(
            "Retry loop exited without a result",
            generator=self._generator.generator_name,
        )

    def _flag_risky_reply(self, outcome: ReplyOutcome) -> None:
        """Re-scan generated text; findings are logged and flagged, never acted on."""
        if self._scanner is None:
            return
        scan = self._scanner.scan(outcome.text)
        if scan.indicators:
            outcome.flagged_categories = sorted(c.value for c in scan.categories)
            GENERATOR_REQUESTS_TOTAL.labels(outcome="flagged").inc()
            logger.warning(
                "Generated reply contains risk indicators",
                categories=outcome.flagged_categories,
                strategy=outcome.strategy,
            )

    def _fallback(
        self,
        directive: StrategyDirective,
        contacts: Sequence[ProfessionalContact],
        started: float,
        reason: str,
        outcome: str = "fallback",
    ) -> ReplyOutcome:
        latency = time.perf_counter() - started
        GENERATOR_REQUESTS_TOTAL.labels(outcome=outcome).inc()
        GENERATOR_LATENCY.observe(latency)
        return ReplyOutcome(
            text=get_fallback_response(directive.strategy, directive.language, contacts),
            source="fallback",
            strategy=directive.strategy.value,
            latency_ms=round(latency * 1000, 1),
            error=reason,
        )
