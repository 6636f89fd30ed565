"""
Crisis Event Models

Escalation records produced once risk crosses the moderate threshold.

SAFETY-CRITICAL: CrisisEvents are append-only audit records. They are
never mutated and survive user-data deletion.

LEGAL_REVIEW_REQUIRED: Retention of crisis records after a deletion
request must be covered by the privacy policy.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import uuid4

from saathi.domain.enums import RiskLevel
from saathi.domain.models.risk_models import RiskIndicator


@dataclass(frozen=True)
class ProfessionalContact:
    """
    A professional or crisis-line contact.

    Attributes:
        name: Service name
        contact: Phone number or URL
        kind: emergency, hotline, text_line or website
        description: What the service offers
        available_24_7: Whether the line is always staffed
        languages: Supported language codes
    """

    name: str
    contact: str
    kind: str = "hotline"
    description: str = ""
    available_24_7: bool = False
    languages: tuple[str, ...] = ("en",)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "contact": self.contact,
            "kind": self.kind,
            "description": self.description,
            "available_24_7": self.available_24_7,
            "languages": list(self.languages),
        }


@dataclass(frozen=True)
class FollowUpSchedule:
    """
    Advisory follow-up times.

    Delivery belongs to the Notifier/Scheduler collaborator.
    ``immediate`` is None for moderate risk.
    """

    short_term: datetime
    long_term: datetime
    immediate: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "immediate": self.immediate.isoformat() if self.immediate else None,
            "short_term": self.short_term.isoformat(),
            "long_term": self.long_term.isoformat(),
        }


@dataclass(frozen=True)
class CrisisEvent:
    """
    Immutable escalation record.

    Attributes:
        session_id: Session the turn belonged to
        user_id: Owner of the session
        timestamp: When escalation fired
        level: Risk level that triggered escalation
        indicators: Indicators present at escalation
        immediate_actions: Ordered action list for the level
        professional_contacts: Contacts ordered by severity
        safety_plan: Templated safety plan lines
        follow_up_schedule: Advisory follow-up times
        id: Unique event identifier
    """

    session_id: str
    user_id: str
    timestamp: datetime
    level: RiskLevel
    indicators: frozenset[RiskIndicator]
    immediate_actions: tuple[str, ...]
    professional_contacts: tuple[ProfessionalContact, ...]
    safety_plan: tuple[str, ...]
    follow_up_schedule: FollowUpSchedule
    id: str = field(default_factory=lambda: str(uuid4()))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "session_id": self.session_id,
            "timestamp": self.timestamp.isoformat(),
            "level": self.level.label,
            "indicator_categories": sorted(i.category.value for i in self.indicators),
            "immediate_actions": list(self.immediate_actions),
            "professional_contacts": [c.to_dict() for c in self.professional_contacts],
            "safety_plan": list(self.safety_plan),
            "follow_up_schedule": self.follow_up_schedule.to_dict(),
        }

    def to_audit_record(self) -> dict:
        """Audit record keyed by user for retention queries."""
        record = self.to_dict()
        record["user_id"] = self.user_id
        return record
