"""Tests configuration and fixtures."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from saathi.config import Settings
from saathi.domain.exceptions import GeneratorUnavailableError
from saathi.infrastructure.generator import GenerationRequest, ResponseGenerator
from saathi.infrastructure.notifier import InMemoryNotifier
from saathi.infrastructure.store import InMemoryProfileSessionStore
from saathi.services.orchestration import CompanionOrchestrator
from saathi.services.safety import Lexicon, load_lexicon
from saathi.services.session import SessionRegistry


FIXED_NOW = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Settable clock injected wherever the core reads time."""

    def __init__(self, start: datetime = FIXED_NOW) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class ScriptedGenerator(ResponseGenerator):
    """Returns queued replies in order, then repeats the last one."""

    def __init__(self, *replies: str) -> None:
        self._replies = list(replies) or ["I'm here to listen."]
        self.requests: list[GenerationRequest] = []

    @property
    def generator_name(self) -> str:
        return "scripted"

    async def generate(self, request: GenerationRequest) -> str:
        self.requests.append(request)
        if len(self._replies) > 1:
            return self._replies.pop(0)
        return self._replies[0]


class FlakyGenerator(ResponseGenerator):
    """Fails with a retryable error ``failures`` times, then succeeds."""

    def __init__(self, failures: int, reply: str = "Let's take this one step at a time.") -> None:
        self.failures = failures
        self.reply = reply
        self.calls = 0

    @property
    def generator_name(self) -> str:
        return "flaky"

    async def generate(self, request: GenerationRequest) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise GeneratorUnavailableError(
                "Upstream overloaded",
                generator=self.generator_name,
                is_retryable=True,
            )
        return self.reply


class BrokenGenerator(ResponseGenerator):
    """Raises an unexpected error on every call."""

    def __init__(self, error: Optional[Exception] = None) -> None:
        self.error = error or RuntimeError("connection reset")
        self.calls = 0

    @property
    def generator_name(self) -> str:
        return "broken"

    async def generate(self, request: GenerationRequest) -> str:
        self.calls += 1
        raise self.error


@pytest.fixture
def test_settings() -> Settings:
    """Development settings with packaged defaults."""
    return Settings(env="development", debug=True)


@pytest.fixture(scope="session")
def lexicon() -> Lexicon:
    """Packaged lexicon table."""
    return load_lexicon()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryProfileSessionStore:
    return InMemoryProfileSessionStore()


@pytest.fixture
def notifier() -> InMemoryNotifier:
    return InMemoryNotifier()


@pytest.fixture
def registry() -> SessionRegistry:
    return SessionRegistry()


@pytest.fixture
def generator() -> ScriptedGenerator:
    return ScriptedGenerator()


@pytest.fixture
def orchestrator(
    test_settings: Settings,
    registry: SessionRegistry,
    generator: ScriptedGenerator,
    store: InMemoryProfileSessionStore,
    notifier: InMemoryNotifier,
    clock: FakeClock,
) -> CompanionOrchestrator:
    """Fully wired core with in-memory collaborators and no retry waits."""
    return CompanionOrchestrator.build(
        test_settings,
        registry=registry,
        generator=generator,
        store=store,
        notifier=notifier,
        clock=clock,
        retry_wait_seconds=(0.0, 0.0),
    )
