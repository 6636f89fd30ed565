"""
Companion Orchestrator

Public operation set of the SAATHI core: start/turn/end sessions,
risk history queries, and user data export and deletion.

Flow per turn:
1. SessionStateMachine: extraction, risk fusion, planning, escalation
2. ResponseSupervisor: reply text for the directive (fallback on failure)
3. Reply attached to the interaction history

SAFETY-CRITICAL: Step 2 runs only after step 1 has produced the
assessment and any crisis event, so reply generation can never change
either.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from saathi.config.logging_config import get_logger
from saathi.config.settings import Settings, get_settings
from saathi.domain.enums import Modality
from saathi.domain.exceptions import InputError
from saathi.domain.models import (
    AdaptationRecord,
    CrisisEvent,
    EmotionSignal,
    ModalityPayload,
    RiskAssessment,
    SessionOptions,
    SessionReport,
    StrategyDirective,
    utc_now,
)
from saathi.infrastructure.generator import NullResponseGenerator, ResponseGenerator
from saathi.infrastructure.notifier import InMemoryNotifier, Notifier
from saathi.infrastructure.store import InMemoryProfileSessionStore, ProfileSessionStore
from saathi.services.extraction import (
    FacialSignalExtractor,
    ModalityExtractionService,
    TextSignalExtractor,
    VoiceSignalExtractor,
)
from saathi.services.generation import ReplyOutcome, ResponseSupervisor
from saathi.services.planning import AdaptationPlanner, CulturalContextAnalyzer
from saathi.services.safety import (
    CrisisEscalationController,
    ProfessionalContactDirectory,
    RiskAggregator,
    RiskIndicatorScanner,
    RiskThresholds,
    load_lexicon,
)
from saathi.services.session import SessionRegistry, SessionStateMachine

logger = get_logger(__name__)


@dataclass
class TurnResponse:
    """
    Result of ``process_turn``.

    Attributes:
        session_id: Session the turn belongs to
        assessment: Risk verdict of the turn
        strategy: Directive for the reply
        adaptations: Directive changes from the previous turn
        reply: Reply text and its source
        crisis_event: Escalation record, when one fired
        signals: Per-modality emotion signals
    """

    session_id: str
    assessment: RiskAssessment
    strategy: StrategyDirective
    adaptations: list[AdaptationRecord]
    reply: ReplyOutcome
    crisis_event: Optional[CrisisEvent] = None
    signals: list[EmotionSignal] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "assessment": self.assessment.to_dict(),
            "strategy": self.strategy.to_dict(),
            "adaptations": [a.to_dict() for a in self.adaptations],
            "reply": self.reply.to_dict(),
            "crisis_event": self.crisis_event.to_dict() if self.crisis_event else None,
            "signals": [s.to_dict() for s in self.signals],
        }


@dataclass(frozen=True)
class DeletionReport:
    """
    Outcome of ``delete_user_data``.

    LEGAL_REVIEW_REQUIRED: Crisis events are retained for audit and
    reported here so the caller can disclose the retention.
    """

    user_id: str
    active_sessions_evicted: int
    archives_deleted: int
    plan_deleted: bool
    crisis_events_retained: int

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "active_sessions_evicted": self.active_sessions_evicted,
            "archives_deleted": self.archives_deleted,
            "plan_deleted": self.plan_deleted,
            "crisis_events_retained": self.crisis_events_retained,
        }


class CompanionOrchestrator:
    """
    Facade over the session state machine and reply supervisor.

    Usage:
        orchestrator = CompanionOrchestrator.build(settings, registry=registry)
        session_id = await orchestrator.start_session("user-1", Modality.TEXT)
        response = await orchestrator.process_turn(session_id, "I feel stressed")
        report = await orchestrator.end_session(session_id)
    """

    def __init__(
        self,
        state_machine: SessionStateMachine,
        supervisor: ResponseSupervisor,
        store: ProfileSessionStore,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._machine = state_machine
        self._supervisor = supervisor
        self._store = store
        self._clock = clock

    @classmethod
    def build(
        cls,
        settings: Optional[Settings] = None,
        *,
        registry: Optional[SessionRegistry] = None,
        generator: Optional[ResponseGenerator] = None,
        store: Optional[ProfileSessionStore] = None,
        notifier: Optional[Notifier] = None,
        clock: Callable[[], datetime] = utc_now,
        retry_wait_seconds: tuple[float, float] = (1.0, 10.0),
    ) -> "CompanionOrchestrator":
        """
        Wire the core from settings.

        Collaborators left as None get the in-memory (store, notifier)
        or null (generator) implementation.
        """
        settings = settings or get_settings()
        registry = registry or SessionRegistry(settings.session.allow_concurrent_user_sessions)
        store = store or InMemoryProfileSessionStore(settings.session.archive_cap_per_user)
        notifier = notifier or InMemoryNotifier()
        generator = generator or NullResponseGenerator()

        lexicon = load_lexicon(settings.safety.lexicon_path)
        scanner = RiskIndicatorScanner(lexicon)

        extraction = ModalityExtractionService(
            TextSignalExtractor(lexicon),
            VoiceSignalExtractor(lexicon, confidence=settings.extraction.voice_confidence),
            FacialSignalExtractor(),
            timeout_seconds=settings.extraction.extractor_timeout_seconds,
        )

        machine = SessionStateMachine(
            registry=registry,
            store=store,
            notifier=notifier,
            extraction=extraction,
            scanner=scanner,
            aggregator=RiskAggregator(RiskThresholds.from_settings(settings.safety)),
            cultural_analyzer=CulturalContextAnalyzer(lexicon),
            planner=AdaptationPlanner(),
            escalation=CrisisEscalationController(
                ProfessionalContactDirectory(settings.safety.contacts_path)
            ),
            settings=settings.session,
            default_country_code=settings.safety.default_country_code,
            audit_log_enabled=settings.safety.audit_log_enabled,
            clock=clock,
        )

        wait_min, wait_max = retry_wait_seconds
        supervisor = ResponseSupervisor(
            generator,
            scanner=scanner,
            settings=settings.generator,
            wait_min_seconds=wait_min,
            wait_max_seconds=wait_max,
        )

        logger.info(
            "Companion core initialized",
            generator=generator.generator_name,
            lexicon_version=lexicon.version,
            lexicon_entries=len(lexicon),
        )
        return cls(machine, supervisor, store, clock=clock)

    @property
    def registry(self) -> SessionRegistry:
        return self._machine.registry

    async def start_session(
        self,
        user_id: str,
        modality: Modality = Modality.TEXT,
        options: Optional[SessionOptions] = None,
    ) -> str:
        """
        Start a session.

        Returns:
            New session id

        Raises:
            InputError: Blank user id
            ActiveSessionExistsError: User already has a live session
        """
        if not isinstance(user_id, str) or not user_id.strip():
            raise InputError("user_id must be a non-empty string")
        session = await self._machine.start(user_id, modality, options)
        return session.id

    async def process_turn(
        self,
        session_id: str,
        user_message: str,
        payload: Optional[ModalityPayload] = None,
    ) -> TurnResponse:
        """
        Process one user turn.

        Args:
            session_id: Active session id
            user_message: Message text
            payload: Optional voice/facial inputs

        Returns:
            TurnResponse

        Raises:
            SessionNotFoundError: Unknown or closed session
            InvalidSessionStateError: Session is not active
            TurnInProgressError: Overlapping turn on the same session
            RiskComputationError: Risk could not be computed
        """
        # Step 1: Assessment, directive and escalation
        result = await self._machine.process_turn(session_id, user_message, payload)

        # Step 2: Reply, with prior turns as context
        session = self.registry.find(session_id)
        history = []
        if session is not None:
            history = [i for i in session.interactions if i is not result.interaction]
        contacts = result.crisis_event.professional_contacts if result.crisis_event else ()

        reply = await self._supervisor.reply(
            user_message,
            result.directive,
            result.cultural_context,
            history,
            contacts,
        )

        # Step 3: Attach the reply to history
        if result.interaction is not None:
            result.interaction.reply = reply.text

        return TurnResponse(
            session_id=session_id,
            assessment=result.assessment,
            strategy=result.directive,
            adaptations=result.adaptations,
            reply=reply,
            crisis_event=result.crisis_event,
            signals=result.signals,
        )

    async def end_session(self, session_id: str) -> SessionReport:
        """
        End a session.

        Raises:
            SessionNotFoundError: Unknown or already closed session
        """
        return await self._machine.end(session_id)

    async def get_risk_assessment_history(self, session_id: str) -> list[RiskAssessment]:
        return await self._machine.get_risk_assessment_history(session_id)

    async def export_user_data(self, user_id: str) -> dict:
        """
        Everything the core holds for a user.

        PRIVACY: Includes interaction text. Serve only to the
        authenticated owner.
        """
        active = self.registry.sessions_for_user(user_id)
        archives = await self._store.list_archives(user_id)
        plan = await self._store.get_plan(user_id)
        events = await self._store.crisis_events(user_id=user_id)

        logger.info(
            "User data exported",
            active_sessions=len(active),
            archives=len(archives),
            crisis_events=len(events),
        )
        return {
            "user_id": user_id,
            "exported_at": self._clock().isoformat(),
            "active_sessions": [s.to_export() for s in active],
            "archived_sessions": [a.to_dict() for a in archives],
            "therapeutic_plan": plan.to_dict() if plan else None,
            "crisis_events": [e.to_dict() for e in events],
        }

    async def delete_user_data(self, user_id: str) -> DeletionReport:
        """
        Delete a user's session state.

        Active sessions are evicted without archiving; archives and the
        therapeutic plan are deleted. Crisis events stay in the audit log.
        """
        evicted = 0
        for session in self.registry.sessions_for_user(user_id):
            if self._machine.evict(session.id):
                evicted += 1

        deletion = await self._store.delete_user(user_id)
        report = DeletionReport(
            user_id=user_id,
            active_sessions_evicted=evicted,
            archives_deleted=deletion.archives_deleted,
            plan_deleted=deletion.plan_deleted,
            crisis_events_retained=deletion.crisis_events_retained,
        )
        logger.info(
            "User data deleted",
            active_sessions_evicted=evicted,
            archives_deleted=deletion.archives_deleted,
            crisis_events_retained=deletion.crisis_events_retained,
        )
        return report
