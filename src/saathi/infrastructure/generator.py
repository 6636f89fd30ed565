"""
Response Generator Abstract Interface

Defines the contract for the external reply generator. The core hands
it a directive and context; it returns reply text.

ARCHITECTURE: All reply generation goes through this interface so a
vendor LLM, a self-hosted model or a scripted test double can be
swapped in without touching the core.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from saathi.domain.exceptions import GeneratorUnavailableError
from saathi.domain.models import CulturalContext, StrategyDirective


@dataclass(frozen=True)
class HistoryTurn:
    """One prior exchange in the recent-history window."""

    user_message: str
    reply: str = ""
    strategy: str = ""


@dataclass(frozen=True)
class GenerationRequest:
    """
    Input to the response generator.

    Attributes:
        user_message: Current user message
        directive: Strategy directive for this turn
        cultural_context: Language, formality and themes
        history: Recent exchanges, oldest first
        guidelines: Strategy guidance for the generator's prompt
    """

    user_message: str
    directive: StrategyDirective
    cultural_context: CulturalContext
    history: tuple[HistoryTurn, ...] = field(default_factory=tuple)
    guidelines: str = ""

    @property
    def strategy(self) -> str:
        return self.directive.strategy.value


class ResponseGenerator(ABC):
    """
    Abstract reply generator.

    Implementations return either plain reply text or a JSON object
    matching the ``GeneratedReply`` schema.
    """

    @property
    @abstractmethod
    def generator_name(self) -> str:
        """Get generator name for logging/tracking."""
        pass

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> str:
        """
        Generate reply text.

        Args:
            request: Directive and context for this turn

        Returns:
            Reply text (plain or JSON)

        Raises:
            GeneratorUnavailableError: On any generation failure
        """
        pass


class NullResponseGenerator(ResponseGenerator):
    """
    Generator used when no external generator is configured.

    Always unavailable, so every reply comes from the fallback
    templates.
    """

    @property
    def generator_name(self) -> str:
        return "none"

    async def generate(self, request: GenerationRequest) -> str:
        raise GeneratorUnavailableError(
            "No response generator configured",
            generator=self.generator_name,
            is_retryable=False,
        )
