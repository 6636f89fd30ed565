"""
Notifier/Scheduler Abstract Interface

The core hands each CrisisEvent to a notifier, which performs the
actual outreach (telephony, SMS, push) using the event's contacts and
follow-up schedule. The core never dials or sends anything itself.
"""

from abc import ABC, abstractmethod

from saathi.config.logging_config import get_logger
from saathi.domain.models import CrisisEvent

logger = get_logger(__name__)


class Notifier(ABC):
    """Abstract crisis event consumer."""

    @abstractmethod
    async def dispatch(self, event: CrisisEvent) -> None:
        """
        Accept a crisis event for outreach.

        Raises:
            Exception: Any failure; the caller logs it and keeps the event
        """
        pass


class InMemoryNotifier(Notifier):
    """Collects dispatched events. Used in development and tests."""

    def __init__(self) -> None:
        self.dispatched: list[CrisisEvent] = []

    async def dispatch(self, event: CrisisEvent) -> None:
        self.dispatched.append(event)
        logger.info(
            "Crisis event accepted for outreach",
            event_id=event.id,
            risk_level=event.level.label,
            contact_count=len(event.professional_contacts),
        )
