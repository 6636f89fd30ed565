"""
Session State Machine

Owns sessions while they are active and runs the per-turn pipeline:
extraction, risk fusion, planning, metric updates and escalation.

Lifecycle: initializing -> active -> closing -> closed. A close that
fails before its archive is written returns to active.

SAFETY-CRITICAL: Any unexpected fault while computing risk fails the
turn with RiskComputationError. The pipeline never silently defaults
a turn to ``none``.

ARCHITECTURE: Escalation completes before the orchestrator calls the
response generator, so generator failures cannot touch an assessment
or crisis event that has already been produced.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from saathi.config.logging_config import bind_session_context, get_logger
from saathi.config.settings import SessionSettings
from saathi.domain.enums import (
    EmotionLabel,
    InterventionStrategy,
    Modality,
    ProtectiveCategory,
    RiskLevel,
)
from saathi.domain.exceptions import (
    InvalidSessionStateError,
    RiskComputationError,
    SessionNotFoundError,
    TurnInProgressError,
)
from saathi.domain.models import (
    AdaptationRecord,
    CrisisEvent,
    CulturalContext,
    EmotionSignal,
    Interaction,
    ModalityPayload,
    RiskAssessment,
    Session,
    SessionArchive,
    SessionOptions,
    SessionReport,
    SessionState,
    StrategyDirective,
    TherapeuticPlan,
    select_dominant_signal,
    utc_now,
)
from saathi.infrastructure.metrics import (
    ACTIVE_SESSIONS,
    NOTIFIER_FAILURES_TOTAL,
    SESSIONS_STARTED_TOTAL,
    TURN_LATENCY,
    TURNS_REJECTED_TOTAL,
    track_crisis_event,
    track_risk_assessment,
    track_session_closed,
)
from saathi.infrastructure.notifier import Notifier
from saathi.infrastructure.store import ProfileSessionStore
from saathi.services.extraction import ModalityExtractionService
from saathi.services.planning import AdaptationPlanner, CulturalContextAnalyzer
from saathi.services.safety import (
    CrisisEscalationController,
    RiskAggregator,
    RiskIndicatorScanner,
)
from saathi.services.session.registry import SessionRegistry
from saathi.services.session.reports import build_session_report, update_plan

logger = get_logger(__name__)


@dataclass
class TurnResult:
    """
    Outcome of one processed turn.

    Attributes:
        session_id: Session the turn belongs to
        assessment: Fused risk verdict
        directive: Strategy directive for the reply
        adaptations: Directive changes from the previous turn
        signals: One signal per extracted modality
        crisis_event: Escalation record when risk >= moderate
        interaction: History entry; the reply is attached later
        cultural_context: Cultural context the directive was planned for
    """

    session_id: str
    assessment: RiskAssessment
    directive: StrategyDirective
    adaptations: list[AdaptationRecord] = field(default_factory=list)
    signals: list[EmotionSignal] = field(default_factory=list)
    crisis_event: Optional[CrisisEvent] = None
    interaction: Optional[Interaction] = None
    cultural_context: CulturalContext = field(default_factory=CulturalContext)


class SessionStateMachine:
    """
    Session lifecycle and turn pipeline.

    All collaborators are injected; the state machine holds no
    process-wide state of its own.

    Usage:
        machine = SessionStateMachine(registry, store, notifier, extraction, ...)
        session = await machine.start("user-1", Modality.TEXT)
        result = await machine.process_turn(session.id, "I feel anxious")
        report = await machine.end(session.id)
    """

    def __init__(
        self,
        registry: SessionRegistry,
        store: ProfileSessionStore,
        notifier: Notifier,
        extraction: ModalityExtractionService,
        scanner: RiskIndicatorScanner,
        aggregator: RiskAggregator,
        cultural_analyzer: CulturalContextAnalyzer,
        planner: AdaptationPlanner,
        escalation: CrisisEscalationController,
        settings: Optional[SessionSettings] = None,
        default_country_code: str = "IN",
        audit_log_enabled: bool = True,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._registry = registry
        self._store = store
        self._notifier = notifier
        self._extraction = extraction
        self._scanner = scanner
        self._aggregator = aggregator
        self._cultural = cultural_analyzer
        self._planner = planner
        self._escalation = escalation
        self._settings = settings or SessionSettings()
        self._default_country = default_country_code
        self._audit_log_enabled = audit_log_enabled
        self._clock = clock

    @property
    def registry(self) -> SessionRegistry:
        return self._registry

    async def start(
        self,
        user_id: str,
        modality: Modality = Modality.TEXT,
        options: Optional[SessionOptions] = None,
    ) -> Session:
        """
        Create, register and activate a session.

        Goals come from ``options.goals``, else the stored therapeutic
        plan, else the configured defaults.

        Raises:
            ActiveSessionExistsError: User already has a live session
        """
        options = options or SessionOptions()

        goals = list(options.goals or [])
        if not goals:
            plan = await self._store.get_plan(user_id)
            if plan is not None and plan.goals:
                goals = list(plan.goals)
        if not goals:
            goals = list(self._settings.default_goals)

        session = Session(
            user_id=user_id,
            modality=modality,
            journey_cap=self._settings.journey_cap,
            interaction_cap=self._settings.interaction_history_cap,
            start_time=self._clock(),
            goals=goals,
            country_code=(options.country_code or self._default_country).upper(),
        )
        if options.cultural_context is not None:
            session.cultural_context = options.cultural_context

        self._registry.register(session, allow_concurrent=options.allow_concurrent)
        session.transition_to(SessionState.ACTIVE)

        SESSIONS_STARTED_TOTAL.labels(modality=modality.value).inc()
        ACTIVE_SESSIONS.inc()
        bind_session_context(session.id, user_id)
        logger.info(
            "Session started",
            modality=modality.value,
            goals=goals,
            country_code=session.country_code,
        )
        return session

    async def process_turn(
        self,
        session_id: str,
        user_message: str,
        payload: Optional[ModalityPayload] = None,
    ) -> TurnResult:
        """
        Run the turn pipeline.

        Args:
            session_id: Active session id
            user_message: Message text of the turn
            payload: Optional voice/facial inputs

        Returns:
            TurnResult with assessment, directive and any crisis event

        Raises:
            SessionNotFoundError: Unknown or closed session
            InvalidSessionStateError: Session is not active
            TurnInProgressError: Another turn is running on the session
            RiskComputationError: Risk could not be computed
        """
        try:
            session = self._registry.begin_turn(session_id)
        except TurnInProgressError:
            TURNS_REJECTED_TOTAL.labels(reason="in_progress").inc()
            raise
        except InvalidSessionStateError:
            TURNS_REJECTED_TOTAL.labels(reason="not_active").inc()
            raise

        started = time.perf_counter()
        try:
            return await self._run_turn(session, user_message, payload)
        finally:
            self._registry.finish_turn(session_id)
            TURN_LATENCY.observe(time.perf_counter() - started)

    async def _run_turn(
        self,
        session: Session,
        user_message: str,
        payload: Optional[ModalityPayload],
    ) -> TurnResult:
        now = self._clock()

        # Step 1: Extract one signal per present modality
        signals = await self._extraction.extract_all(user_message, payload, observed_at=now)

        # Step 2: Journey (FIFO-capped)
        session.emotional_journey.extend(signals)
        dominant = select_dominant_signal(signals)

        # Step 3: Scan and aggregate; fail loudly on any fault
        try:
            scan = self._scanner.scan(user_message)
            assessment = self._aggregator.assess(
                scan,
                dominant,
                tuple(session.risk_history),
                assessed_at=now,
            )
        except Exception as e:
            logger.error(
                "Risk computation failed",
                session_id=session.id,
                error_type=type(e).__name__,
                exc_info=True,
            )
            raise RiskComputationError("Risk computation failed for turn", original_error=e) from e

        session.risk_history.append(assessment)
        track_risk_assessment(assessment.level.label, assessment.override_applied)
        if self._audit_log_enabled and assessment.level != RiskLevel.NONE:
            logger.info("Risk assessment audit", audit=assessment.to_audit_record())

        # Step 4: Cultural context and directive
        cultural = self._cultural.analyze(user_message, session.cultural_context)
        session.cultural_context = cultural
        directive, adaptations = self._planner.plan(
            assessment, dominant, cultural, session.last_directive, now
        )
        session.adaptation_log.extend(adaptations)
        session.last_directive = directive

        # Step 5: Progress metrics
        text_signal = next((s for s in signals if s.modality == Modality.TEXT), None)
        self._update_progress(session, assessment, directive, dominant, text_signal)

        # Step 6: Escalation
        crisis_event = None
        if assessment.level != RiskLevel.NONE:
            crisis_event = self._escalation.escalate(
                session.id,
                session.user_id,
                assessment,
                country_code=session.country_code,
                now=now,
                history=tuple(session.risk_history[:-1]),
            )
        if crisis_event is not None:
            await self._hand_off(session, crisis_event)

        interaction = Interaction(
            user_message=user_message,
            strategy=directive.strategy,
            risk_level=assessment.level,
            timestamp=now,
        )
        session.record_interaction(interaction)
        session.turn_count += 1

        logger.info(
            "Turn processed",
            session_id=session.id,
            turn=session.turn_count,
            risk_level=assessment.level.label,
            strategy=directive.strategy.value,
            modalities=[s.modality.value for s in signals],
            crisis_event_id=crisis_event.id if crisis_event else None,
        )

        return TurnResult(
            session_id=session.id,
            assessment=assessment,
            directive=directive,
            adaptations=adaptations,
            signals=signals,
            crisis_event=crisis_event,
            interaction=interaction,
            cultural_context=cultural,
        )

    @staticmethod
    def _update_progress(
        session: Session,
        assessment: RiskAssessment,
        directive: StrategyDirective,
        dominant: Optional[EmotionSignal],
        text_signal: Optional[EmotionSignal],
    ) -> None:
        metrics = session.progress_metrics
        metrics.nudge("engagement_level", 0.1)
        metrics.nudge("therapeutic_alliance", 0.02)

        valence = dominant.valence if dominant is not None else 0.0
        if directive.strategy == InterventionStrategy.VALIDATION and valence > -0.3:
            metrics.nudge("emotional_regulation", 0.05)

        if any(f.category == ProtectiveCategory.COPING_SKILLS for f in assessment.protective_factors):
            metrics.nudge("coping_skills_usage", 0.05)

        if (
            text_signal is not None
            and not text_signal.is_default
            and text_signal.primary_emotion != EmotionLabel.NEUTRAL
        ):
            metrics.nudge("self_awareness", 0.03)

    async def _hand_off(self, session: Session, event: CrisisEvent) -> None:
        """
        Record a crisis event and pass it to the notifier.

        SAFETY-CRITICAL: Audit and notification are independent; a
        failure in one never skips the other and never drops the event
        from the turn result.
        """
        session.crisis_event_ids.append(event.id)
        track_crisis_event(event.level.label)

        try:
            await self._store.record_crisis_event(event)
        except Exception as e:
            logger.error(
                "Crisis event audit write failed",
                event_id=event.id,
                error_type=type(e).__name__,
                exc_info=True,
            )

        try:
            await self._notifier.dispatch(event)
        except Exception as e:
            NOTIFIER_FAILURES_TOTAL.inc()
            logger.error(
                "Notifier failed to accept crisis event",
                event_id=event.id,
                error_type=type(e).__name__,
                exc_info=True,
            )

    async def end(self, session_id: str) -> SessionReport:
        """
        Close a session, archive it and update the therapeutic plan.

        The session stays registered until its archive is written. If
        the report or the archive write fails, the session is returned
        to ``active`` and the error propagates, so the close can be
        retried without losing history.

        Raises:
            SessionNotFoundError: Unknown or already closed session
            InvalidSessionStateError: Session is not active
            TurnInProgressError: A turn is still running
        """
        session = self._registry.claim_for_close(session_id)
        try:
            session.transition_to(SessionState.CLOSING, when=self._clock())
            report = build_session_report(session)
            archive = SessionArchive(
                session_id=session.id,
                user_id=session.user_id,
                closed_at=session.end_time,
                record={**session.to_export(), "state": SessionState.CLOSED.value},
                report=report,
                risk_history=tuple(session.risk_history),
            )
            await self._store.save_archive(archive)
        except BaseException as e:
            if session.state == SessionState.CLOSING:
                session.transition_to(SessionState.ACTIVE)
            logger.error(
                "Session close aborted",
                session_id=session_id,
                error_type=type(e).__name__,
                exc_info=True,
            )
            raise
        finally:
            self._registry.finish_turn(session_id)

        session.transition_to(SessionState.CLOSED)
        self._registry.remove(session_id)
        ACTIVE_SESSIONS.dec()

        try:
            plan = await self._store.get_plan(session.user_id) or TherapeuticPlan(user_id=session.user_id)
            await self._store.save_plan(update_plan(plan, session, report))
        except Exception as e:
            logger.error(
                "Therapeutic plan update failed",
                session_id=session.id,
                error_type=type(e).__name__,
                exc_info=True,
            )

        track_session_closed(
            session.peak_risk_level.label,
            session.get_duration_minutes() * 60,
        )
        logger.info(
            "Session ended",
            session_id=session.id,
            turns=session.turn_count,
            peak_risk_level=session.peak_risk_level.label,
            crisis_events=len(session.crisis_event_ids),
        )
        return report

    def evict(self, session_id: str) -> bool:
        """
        Drop an active session without archiving it.

        Used by user-data deletion. Returns False for unknown ids.
        """
        session = self._registry.remove(session_id)
        if session is None:
            return False
        if session.is_active:
            ACTIVE_SESSIONS.dec()
        logger.info("Session evicted", session_id=session_id)
        return True

    async def get_risk_assessment_history(self, session_id: str) -> list[RiskAssessment]:
        """
        Assessments of a session in turn order.

        Active sessions are served from the registry, closed ones from
        their archive.

        Raises:
            SessionNotFoundError: Id is neither live nor archived
        """
        session = self._registry.find(session_id)
        if session is not None:
            return list(session.risk_history)

        archive = await self._store.get_archive(session_id)
        if archive is None:
            raise SessionNotFoundError(session_id)
        return list(archive.risk_history)
