"""
Session Domain Model

A session is the stateful, per-user conversational context spanning
multiple turns. While active it is owned exclusively by the
SessionStateMachine; no other component mutates it.

PRIVACY: Interaction records hold message text and must be encrypted
at rest by the Profile/Session Store.
"""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Optional
from uuid import uuid4

from saathi.domain.enums import InterventionStrategy, Modality, RiskLevel
from saathi.domain.models.directive import AdaptationRecord, CulturalContext, StrategyDirective
from saathi.domain.models.emotion_signal import EmotionalJourney, clamp
from saathi.domain.models.risk_models import RiskAssessment


def utc_now() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


class SessionState(StrEnum):
    """
    Session lifecycle states.

    Legal transitions: initializing -> active -> closing -> closed.
    A close that fails before its archive is written returns
    closing -> active.
    """

    INITIALIZING = "initializing"
    """Session allocated, goals being seeded."""

    ACTIVE = "active"
    """Accepting turns."""

    CLOSING = "closing"
    """Final reports being computed; turns rejected."""

    CLOSED = "closed"
    """Archived and evicted from the registry."""


_TRANSITIONS: dict[SessionState, frozenset[SessionState]] = {
    SessionState.INITIALIZING: frozenset({SessionState.ACTIVE}),
    SessionState.ACTIVE: frozenset({SessionState.CLOSING}),
    SessionState.CLOSING: frozenset({SessionState.CLOSED, SessionState.ACTIVE}),
    SessionState.CLOSED: frozenset(),
}


@dataclass
class ProgressMetrics:
    """
    Bounded therapeutic progress scores.

    Every score stays within [0.0, 1.0]; ``nudge`` is the only
    mutation path and clamps on each call.
    """

    emotional_regulation: float = 0.5
    self_awareness: float = 0.5
    coping_skills_usage: float = 0.5
    therapeutic_alliance: float = 0.5
    engagement_level: float = 0.5

    def nudge(self, name: str, delta: float) -> float:
        """Apply a bounded change to one score and return the new value."""
        if name not in self.__dataclass_fields__:
            raise AttributeError(f"Unknown progress metric: {name}")
        value = clamp(getattr(self, name) + delta)
        setattr(self, name, value)
        return value

    def to_dict(self) -> dict:
        return {
            name: round(getattr(self, name), 3)
            for name in self.__dataclass_fields__
        }


@dataclass
class SessionOptions:
    """
    Caller-supplied options for ``start_session``.

    Attributes:
        goals: Explicit goals; overrides the stored therapeutic plan
        cultural_context: Baseline language/formality preferences
        country_code: Jurisdiction for professional contacts
        allow_concurrent: Explicitly multiplex with other active
            sessions of the same user
    """

    goals: Optional[list[str]] = None
    cultural_context: Optional[CulturalContext] = None
    country_code: Optional[str] = None
    allow_concurrent: bool = False


@dataclass
class Interaction:
    """One turn of conversation with its directive."""

    user_message: str
    strategy: InterventionStrategy
    risk_level: RiskLevel
    timestamp: datetime = field(default_factory=utc_now)
    reply: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "user_message": self.user_message,
            "reply": self.reply,
            "strategy": self.strategy.value,
            "risk_level": self.risk_level.label,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class Session:
    """
    Session entity.

    Attributes:
        user_id: Owner of the session
        modality: Session input modality
        journey_cap: Cap applied to the emotional journey
        interaction_cap: Cap applied to interaction history
        id: Unique session identifier
        state: Lifecycle state
        start_time: When the session was created
        end_time: When the session closed
        emotional_journey: Capped emotion signal history
        risk_history: Every assessment, in turn order
        progress_metrics: Bounded progress scores
        adaptation_log: Directive changes across turns
        goals: Therapeutic goals for this session
        cultural_context: Baseline cultural context
        country_code: Jurisdiction for professional contacts
        last_directive: Directive of the previous turn
        crisis_event_ids: Ids of crisis events raised in this session
        turn_count: Completed turns
        turn_in_progress: Single-writer marker
    """

    user_id: str
    modality: Modality = Modality.TEXT
    journey_cap: int = 50
    interaction_cap: int = 100
    id: str = field(default_factory=lambda: str(uuid4()))
    state: SessionState = SessionState.INITIALIZING
    start_time: datetime = field(default_factory=utc_now)
    end_time: Optional[datetime] = None

    emotional_journey: EmotionalJourney = field(init=False)
    risk_history: list[RiskAssessment] = field(default_factory=list)
    progress_metrics: ProgressMetrics = field(default_factory=ProgressMetrics)
    adaptation_log: list[AdaptationRecord] = field(default_factory=list)
    interactions: deque = field(init=False)
    goals: list[str] = field(default_factory=list)
    cultural_context: CulturalContext = field(default_factory=CulturalContext)
    country_code: str = "IN"
    last_directive: Optional[StrategyDirective] = None
    crisis_event_ids: list[str] = field(default_factory=list)
    turn_count: int = 0
    turn_in_progress: bool = False

    def __post_init__(self) -> None:
        self.emotional_journey = EmotionalJourney(cap=self.journey_cap)
        self.interactions = deque(maxlen=self.interaction_cap)

    def transition_to(self, target: SessionState, when: Optional[datetime] = None) -> None:
        """
        Move to a new lifecycle state.

        Args:
            target: Next state
            when: Transition time, recorded as ``end_time`` when
                closing starts

        Raises:
            ValueError: If the transition is not legal
        """
        if target not in _TRANSITIONS[self.state]:
            raise ValueError(f"Illegal session transition {self.state} -> {target}")
        previous, self.state = self.state, target
        if target == SessionState.CLOSING:
            self.end_time = when or utc_now()
        elif target == SessionState.CLOSED:
            self.end_time = when or self.end_time or utc_now()
        elif previous == SessionState.CLOSING:
            self.end_time = None

    @property
    def is_active(self) -> bool:
        return self.state == SessionState.ACTIVE

    @property
    def peak_risk_level(self) -> RiskLevel:
        return max((a.level for a in self.risk_history), default=RiskLevel.NONE)

    @property
    def latest_assessment(self) -> Optional[RiskAssessment]:
        return self.risk_history[-1] if self.risk_history else None

    def get_duration_minutes(self) -> float:
        end = self.end_time or utc_now()
        return (end - self.start_time).total_seconds() / 60

    def record_interaction(self, interaction: Interaction) -> None:
        self.interactions.append(interaction)

    def recent_interactions(self, window: int) -> list[Interaction]:
        if window <= 0:
            return []
        return list(self.interactions)[-window:]

    def to_dict(self) -> dict:
        """Serialize session state (without interaction text)."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "modality": self.modality.value,
            "state": self.state.value,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "turn_count": self.turn_count,
            "goals": list(self.goals),
            "progress_metrics": self.progress_metrics.to_dict(),
            "peak_risk_level": self.peak_risk_level.label,
            "crisis_event_ids": list(self.crisis_event_ids),
            "cultural_context": self.cultural_context.to_dict(),
        }

    def to_export(self) -> dict:
        """Full record for data export and archiving."""
        record = self.to_dict()
        record["emotional_journey"] = self.emotional_journey.to_list()
        record["risk_history"] = [a.to_dict() for a in self.risk_history]
        record["adaptation_log"] = [a.to_dict() for a in self.adaptation_log]
        record["interactions"] = [i.to_dict() for i in self.interactions]
        return record
