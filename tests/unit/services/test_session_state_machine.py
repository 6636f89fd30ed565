"""
Unit Tests for the Session State Machine

Tests lifecycle transitions, the turn pipeline, escalation hand-off
and the failure policy of each collaborator.
"""

from datetime import timedelta
from typing import Optional

import pytest

from saathi.config.settings import SessionSettings
from saathi.domain.enums import InterventionStrategy, LanguagePreference, RiskLevel
from saathi.domain.exceptions import (
    ActiveSessionExistsError,
    RiskComputationError,
    SessionNotFoundError,
    TurnInProgressError,
)
from saathi.domain.models import (
    CrisisEvent,
    ScanResult,
    SessionArchive,
    SessionOptions,
    SessionState,
    TherapeuticPlan,
)
from saathi.infrastructure.notifier import InMemoryNotifier, Notifier
from saathi.infrastructure.store import InMemoryProfileSessionStore
from saathi.services.extraction import (
    FacialSignalExtractor,
    ModalityExtractionService,
    TextSignalExtractor,
    VoiceSignalExtractor,
)
from saathi.services.planning import AdaptationPlanner, CulturalContextAnalyzer
from saathi.services.safety import (
    CrisisEscalationController,
    Lexicon,
    RiskAggregator,
    RiskIndicatorScanner,
)
from saathi.services.session import SessionRegistry, SessionStateMachine


class FailingNotifier(Notifier):
    async def dispatch(self, event: CrisisEvent) -> None:
        raise ConnectionError("pager gateway down")


class FailingAuditStore(InMemoryProfileSessionStore):
    async def record_crisis_event(self, event: CrisisEvent) -> None:
        raise ConnectionError("audit sink down")


class FlakyArchiveStore(InMemoryProfileSessionStore):
    """Fails the first archive write, then recovers."""

    def __init__(self) -> None:
        super().__init__()
        self.archive_failures = 1

    async def save_archive(self, archive: SessionArchive) -> None:
        if self.archive_failures:
            self.archive_failures -= 1
            raise ConnectionError("archive store down")
        await super().save_archive(archive)


class FailingPlanStore(InMemoryProfileSessionStore):
    async def save_plan(self, plan: TherapeuticPlan) -> None:
        raise ConnectionError("plan store down")


class BrokenScanner(RiskIndicatorScanner):
    def scan(self, text: object) -> ScanResult:
        raise KeyError("corrupt table")


def build_machine(
    lexicon: Lexicon,
    clock,
    store: Optional[InMemoryProfileSessionStore] = None,
    notifier: Optional[Notifier] = None,
    scanner: Optional[RiskIndicatorScanner] = None,
    settings: Optional[SessionSettings] = None,
) -> SessionStateMachine:
    return SessionStateMachine(
        registry=SessionRegistry(),
        store=store or InMemoryProfileSessionStore(),
        notifier=notifier or InMemoryNotifier(),
        extraction=ModalityExtractionService(
            TextSignalExtractor(lexicon),
            VoiceSignalExtractor(lexicon),
            FacialSignalExtractor(),
        ),
        scanner=scanner or RiskIndicatorScanner(lexicon),
        aggregator=RiskAggregator(),
        cultural_analyzer=CulturalContextAnalyzer(lexicon),
        planner=AdaptationPlanner(),
        escalation=CrisisEscalationController(),
        settings=settings,
        clock=clock,
    )


@pytest.fixture
def machine_store() -> InMemoryProfileSessionStore:
    return InMemoryProfileSessionStore()


@pytest.fixture
def machine_notifier() -> InMemoryNotifier:
    return InMemoryNotifier()


@pytest.fixture
def machine(lexicon, clock, machine_store, machine_notifier) -> SessionStateMachine:
    return build_machine(lexicon, clock, store=machine_store, notifier=machine_notifier)


class TestSessionStart:
    """Session creation and goal seeding."""

    async def test_start_activates_session(self, machine: SessionStateMachine, clock) -> None:
        session = await machine.start("user-1")

        assert session.is_active
        assert session.start_time == clock.now
        assert session.goals == ["stress_management", "emotional_regulation"]
        assert session.country_code == "IN"
        assert machine.registry.find(session.id) is session

    async def test_explicit_goals_win(self, machine: SessionStateMachine, machine_store) -> None:
        await machine_store.save_plan(TherapeuticPlan(user_id="user-1", goals=["sleep_hygiene"]))

        session = await machine.start("user-1", options=SessionOptions(goals=["self_awareness"]))

        assert session.goals == ["self_awareness"]

    async def test_goals_seeded_from_plan(self, machine: SessionStateMachine, machine_store) -> None:
        await machine_store.save_plan(TherapeuticPlan(user_id="user-1", goals=["sleep_hygiene"]))

        session = await machine.start("user-1")

        assert session.goals == ["sleep_hygiene"]

    async def test_country_code_normalized(self, machine: SessionStateMachine) -> None:
        session = await machine.start("user-1", options=SessionOptions(country_code="us"))

        assert session.country_code == "US"

    async def test_second_active_session_rejected(self, machine: SessionStateMachine) -> None:
        await machine.start("user-1")

        with pytest.raises(ActiveSessionExistsError):
            await machine.start("user-1")


class TestTurnPipeline:
    """Per-turn processing."""

    async def test_calm_turn(self, machine: SessionStateMachine) -> None:
        session = await machine.start("user-1")

        result = await machine.process_turn(session.id, "I feel a little stressed about exams")

        assert result.assessment.level == RiskLevel.NONE
        assert result.directive.strategy == InterventionStrategy.COGNITIVE_RESTRUCTURING
        assert result.crisis_event is None
        assert session.turn_count == 1
        assert len(session.risk_history) == 1
        assert len(session.emotional_journey) == 1
        assert session.last_directive == result.directive
        assert "academic_pressure" in result.cultural_context.cultural_themes
        assert not session.turn_in_progress

    async def test_low_risk_does_not_escalate(self, machine: SessionStateMachine, machine_notifier) -> None:
        session = await machine.start("user-1")

        result = await machine.process_turn(session.id, "I need to talk now")

        assert result.assessment.level == RiskLevel.LOW
        assert result.crisis_event is None
        assert machine_notifier.dispatched == []

    async def test_moderate_risk_escalates(
        self,
        machine: SessionStateMachine,
        machine_store,
        machine_notifier,
    ) -> None:
        session = await machine.start("user-1")

        result = await machine.process_turn(session.id, "I feel hopeless")

        assert result.assessment.level == RiskLevel.MODERATE
        assert result.crisis_event is not None
        assert session.crisis_event_ids == [result.crisis_event.id]
        assert machine_notifier.dispatched == [result.crisis_event]
        assert await machine_store.crisis_events(session_id=session.id) == [result.crisis_event]

    async def test_severe_turn(self, machine: SessionStateMachine, clock) -> None:
        session = await machine.start("user-1")

        result = await machine.process_turn(session.id, "I want to kill myself")

        assert result.assessment.level == RiskLevel.SEVERE
        assert result.directive.strategy == InterventionStrategy.CRISIS_INTERVENTION
        assert result.crisis_event.immediate_actions[0] == "contact emergency services immediately"
        assert result.crisis_event.follow_up_schedule.immediate == clock.now + timedelta(hours=2)

    async def test_cultural_context_persists(self, machine: SessionStateMachine) -> None:
        session = await machine.start("user-1")

        await machine.process_turn(session.id, "मुझे बहुत चिंता है")
        result = await machine.process_turn(session.id, "...")

        assert session.cultural_context.language_preference == LanguagePreference.HINDI
        assert result.directive.language == LanguagePreference.HINDI

    async def test_sustained_risk_floor_across_turns(self, machine: SessionStateMachine) -> None:
        session = await machine.start("user-1")
        for _ in range(3):
            await machine.process_turn(session.id, "I feel hopeless")

        result = await machine.process_turn(session.id, "I went for a walk")

        assert result.assessment.level == RiskLevel.MODERATE
        assert "sustained_risk" in result.assessment.contributing_signals

    async def test_journey_is_capped(self, lexicon, clock) -> None:
        machine = build_machine(lexicon, clock, settings=SessionSettings(journey_cap=3))
        session = await machine.start("user-1")

        for i in range(5):
            clock.advance(minutes=1)
            await machine.process_turn(session.id, f"turn {i} I feel worried")

        assert len(session.emotional_journey) == 3
        assert list(session.emotional_journey)[0].timestamp == clock.now - timedelta(minutes=2)

    async def test_progress_metrics_stay_bounded(self, machine: SessionStateMachine) -> None:
        session = await machine.start("user-1")

        for _ in range(15):
            await machine.process_turn(session.id, "breathing and yoga help, I feel happy")

        metrics = session.progress_metrics.to_dict()
        assert all(0.0 <= value <= 1.0 for value in metrics.values())
        assert metrics["engagement_level"] == 1.0
        assert metrics["coping_skills_usage"] == 1.0


class TestTurnRejection:
    """Turns that never run."""

    async def test_unknown_session(self, machine: SessionStateMachine) -> None:
        with pytest.raises(SessionNotFoundError):
            await machine.process_turn("missing", "hello")

    async def test_overlapping_turn(self, machine: SessionStateMachine) -> None:
        session = await machine.start("user-1")
        machine.registry.begin_turn(session.id)

        with pytest.raises(TurnInProgressError):
            await machine.process_turn(session.id, "hello")

        assert session.turn_count == 0


class TestFailurePolicy:
    """Collaborator faults."""

    async def test_risk_fault_fails_the_turn(self, lexicon, clock) -> None:
        machine = build_machine(lexicon, clock, scanner=BrokenScanner(lexicon))
        session = await machine.start("user-1")

        with pytest.raises(RiskComputationError) as exc_info:
            await machine.process_turn(session.id, "hello")

        assert isinstance(exc_info.value.original_error, KeyError)
        assert session.risk_history == []
        assert not session.turn_in_progress

    async def test_notifier_failure_keeps_event(self, lexicon, clock) -> None:
        store = InMemoryProfileSessionStore()
        machine = build_machine(lexicon, clock, store=store, notifier=FailingNotifier())
        session = await machine.start("user-1")

        result = await machine.process_turn(session.id, "I want to kill myself")

        assert result.crisis_event is not None
        assert len(await store.crisis_events(user_id="user-1")) == 1

    async def test_audit_failure_still_notifies(self, lexicon, clock) -> None:
        notifier = InMemoryNotifier()
        machine = build_machine(lexicon, clock, store=FailingAuditStore(), notifier=notifier)
        session = await machine.start("user-1")

        result = await machine.process_turn(session.id, "I want to kill myself")

        assert notifier.dispatched == [result.crisis_event]


class TestSessionEnd:
    """Closing, archiving and history queries."""

    async def test_end_archives_and_updates_plan(
        self,
        machine: SessionStateMachine,
        machine_store,
        clock,
    ) -> None:
        session = await machine.start("user-1")
        await machine.process_turn(session.id, "I feel a little stressed about exams")
        clock.advance(minutes=20)

        report = await machine.end(session.id)

        assert report.summary["turn_count"] == 1
        assert report.summary["duration_minutes"] == 20.0
        assert session.end_time == clock.now
        assert machine.registry.find(session.id) is None

        archive = await machine_store.get_archive(session.id)
        assert archive.report == report
        assert len(archive.risk_history) == 1

        plan = await machine_store.get_plan("user-1")
        assert plan.goals == session.goals

    async def test_closed_session_rejects_everything(self, machine: SessionStateMachine) -> None:
        session = await machine.start("user-1")
        await machine.end(session.id)

        with pytest.raises(SessionNotFoundError):
            await machine.process_turn(session.id, "hello")
        with pytest.raises(SessionNotFoundError):
            await machine.end(session.id)

    async def test_history_served_before_and_after_close(self, machine: SessionStateMachine) -> None:
        session = await machine.start("user-1")
        await machine.process_turn(session.id, "I feel hopeless")
        await machine.process_turn(session.id, "thanks, I feel a bit better")

        live = await machine.get_risk_assessment_history(session.id)
        await machine.end(session.id)
        archived = await machine.get_risk_assessment_history(session.id)

        assert [a.level for a in live] == [RiskLevel.MODERATE, RiskLevel.NONE]
        assert archived == live

    async def test_history_for_unknown_session(self, machine: SessionStateMachine) -> None:
        with pytest.raises(SessionNotFoundError):
            await machine.get_risk_assessment_history("missing")

    async def test_user_can_start_again_after_end(self, machine: SessionStateMachine) -> None:
        first = await machine.start("user-1")
        await machine.end(first.id)

        second = await machine.start("user-1")

        assert second.id != first.id

    async def test_evict(self, machine: SessionStateMachine) -> None:
        session = await machine.start("user-1")

        assert machine.evict(session.id) is True
        assert machine.evict(session.id) is False


class TestAbortedClose:
    """A close that fails before archiving leaves the session usable."""

    async def test_archive_failure_keeps_history(self, lexicon, clock) -> None:
        store = FlakyArchiveStore()
        machine = build_machine(lexicon, clock, store=store)
        session = await machine.start("user-1")
        await machine.process_turn(session.id, "I feel hopeless")

        with pytest.raises(ConnectionError):
            await machine.end(session.id)

        assert session.state == SessionState.ACTIVE
        assert session.end_time is None
        assert machine.registry.find(session.id) is session
        history = await machine.get_risk_assessment_history(session.id)
        assert [a.level for a in history] == [RiskLevel.MODERATE]

    async def test_retry_after_archive_failure(self, lexicon, clock) -> None:
        store = FlakyArchiveStore()
        machine = build_machine(lexicon, clock, store=store)
        session = await machine.start("user-1")
        await machine.process_turn(session.id, "I feel hopeless")
        with pytest.raises(ConnectionError):
            await machine.end(session.id)

        await machine.process_turn(session.id, "talking helps a little")
        report = await machine.end(session.id)

        assert report.summary["turn_count"] == 2
        archive = await store.get_archive(session.id)
        assert archive.record["state"] == "closed"
        assert len(archive.risk_history) == 2
        assert machine.registry.find(session.id) is None

    async def test_report_failure_rolls_back(
        self,
        machine: SessionStateMachine,
        monkeypatch,
    ) -> None:
        session = await machine.start("user-1")

        def broken_report(session):
            raise RuntimeError("report failed")

        monkeypatch.setattr("saathi.services.session.state_machine.build_session_report", broken_report)
        with pytest.raises(RuntimeError):
            await machine.end(session.id)

        assert session.is_active
        assert not session.turn_in_progress
        with pytest.raises(ActiveSessionExistsError):
            await machine.start("user-1")

        monkeypatch.undo()
        await machine.end(session.id)
        restarted = await machine.start("user-1")

        assert restarted.id != session.id

    async def test_plan_failure_after_archive_still_closes(self, lexicon, clock) -> None:
        store = FailingPlanStore()
        machine = build_machine(lexicon, clock, store=store)
        session = await machine.start("user-1")

        report = await machine.end(session.id)

        assert report.summary["turn_count"] == 0
        assert session.state == SessionState.CLOSED
        assert await store.get_archive(session.id) is not None
        assert machine.registry.find(session.id) is None
