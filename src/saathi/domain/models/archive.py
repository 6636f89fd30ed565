"""
Session Archive and Therapeutic Plan Models

Records handed to the Profile/Session Store when a session closes,
and the long-lived plan that seeds goals for the next session.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from saathi.domain.models.risk_models import RiskAssessment


@dataclass
class Milestone:
    """A therapeutic milestone tracked across sessions."""

    name: str
    description: str = ""
    achieved_at: Optional[datetime] = None

    @property
    def achieved(self) -> bool:
        return self.achieved_at is not None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "achieved_at": self.achieved_at.isoformat() if self.achieved_at else None,
        }


@dataclass
class TherapeuticPlan:
    """
    Per-user therapeutic plan.

    Goals seed new sessions when the caller supplies none.
    Milestones are marked achieved by session progress.
    """

    user_id: str
    goals: list[str] = field(default_factory=list)
    milestones: list[Milestone] = field(default_factory=list)
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def achieve(self, name: str, when: datetime) -> bool:
        """Mark a milestone achieved; returns False if already achieved or unknown."""
        for milestone in self.milestones:
            if milestone.name == name and not milestone.achieved:
                milestone.achieved_at = when
                return True
        return False

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "goals": list(self.goals),
            "milestones": [m.to_dict() for m in self.milestones],
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass(frozen=True)
class SessionReport:
    """
    Final report computed when a session ends.

    Attributes:
        summary: Duration, turns, journey summary, trend, peak risk
        progress_report: Metrics, skills, growth and next steps
        recommendations: Ordered recommendation strings
    """

    summary: dict
    progress_report: dict
    recommendations: tuple[str, ...]

    def to_dict(self) -> dict:
        return {
            "summary": self.summary,
            "progress_report": self.progress_report,
            "recommendations": list(self.recommendations),
        }


@dataclass(frozen=True)
class SessionArchive:
    """
    Immutable archive of a closed session.

    ``record`` is the serialized session; ``risk_history`` keeps the
    typed assessments for history queries after close.
    """

    session_id: str
    user_id: str
    closed_at: datetime
    record: dict
    report: SessionReport
    risk_history: tuple[RiskAssessment, ...] = ()

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "user_id": self.user_id,
            "closed_at": self.closed_at.isoformat(),
            "record": self.record,
            "report": self.report.to_dict(),
        }
