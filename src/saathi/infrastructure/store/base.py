"""
Profile/Session Store Abstract Interface

Persistence contract for therapeutic plans, session archives and the
crisis audit log.

SAFETY-CRITICAL: The crisis audit log is append-only. ``delete_user``
removes plans and archives but never crisis events.
PRIVACY: Archives contain interaction text and must be encrypted at
rest by concrete implementations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from saathi.domain.models import CrisisEvent, SessionArchive, TherapeuticPlan


@dataclass(frozen=True)
class StoreDeletion:
    """Counts of records removed by ``delete_user``."""

    archives_deleted: int
    plan_deleted: bool
    crisis_events_retained: int


class ProfileSessionStore(ABC):
    """Abstract store for long-lived user and session records."""

    @abstractmethod
    async def get_plan(self, user_id: str) -> Optional[TherapeuticPlan]:
        """Get the user's therapeutic plan, if any."""
        pass

    @abstractmethod
    async def save_plan(self, plan: TherapeuticPlan) -> None:
        pass

    @abstractmethod
    async def save_archive(self, archive: SessionArchive) -> None:
        """Persist the archive of a closed session."""
        pass

    @abstractmethod
    async def get_archive(self, session_id: str) -> Optional[SessionArchive]:
        pass

    @abstractmethod
    async def list_archives(self, user_id: str) -> list[SessionArchive]:
        """Archives for a user, oldest first."""
        pass

    @abstractmethod
    async def record_crisis_event(self, event: CrisisEvent) -> None:
        """
        Append a crisis event to the audit log.

        SAFETY-CRITICAL: Must not silently drop the event.
        """
        pass

    @abstractmethod
    async def crisis_events(
        self,
        *,
        user_id: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> list[CrisisEvent]:
        """Crisis events in recording order, optionally filtered."""
        pass

    @abstractmethod
    async def delete_user(self, user_id: str) -> StoreDeletion:
        """Delete the user's plan and archives; crisis events are retained."""
        pass
