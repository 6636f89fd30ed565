"""
In-Memory Profile/Session Store

Process-local store for development and tests. Holds at most
``archive_cap`` archives per user; the oldest archive is evicted
first.
"""

import asyncio
from collections import deque
from typing import Optional

from saathi.config.logging_config import get_logger
from saathi.domain.models import CrisisEvent, SessionArchive, TherapeuticPlan
from saathi.infrastructure.store.base import ProfileSessionStore, StoreDeletion

logger = get_logger(__name__)


class InMemoryProfileSessionStore(ProfileSessionStore):
    """
    Dictionary-backed store.

    Usage:
        store = InMemoryProfileSessionStore(archive_cap=50)
        await store.save_archive(archive)
    """

    def __init__(self, archive_cap: int = 50) -> None:
        self._archive_cap = archive_cap
        self._plans: dict[str, TherapeuticPlan] = {}
        self._archives: dict[str, deque[SessionArchive]] = {}
        self._crisis_log: list[CrisisEvent] = []
        self._lock = asyncio.Lock()

    async def get_plan(self, user_id: str) -> Optional[TherapeuticPlan]:
        return self._plans.get(user_id)

    async def save_plan(self, plan: TherapeuticPlan) -> None:
        async with self._lock:
            self._plans[plan.user_id] = plan

    async def save_archive(self, archive: SessionArchive) -> None:
        async with self._lock:
            archives = self._archives.setdefault(
                archive.user_id, deque(maxlen=self._archive_cap)
            )
            archives.append(archive)
        logger.debug(
            "Session archived",
            session_id=archive.session_id,
            archive_count=len(archives),
        )

    async def get_archive(self, session_id: str) -> Optional[SessionArchive]:
        for archives in self._archives.values():
            for archive in archives:
                if archive.session_id == session_id:
                    return archive
        return None

    async def list_archives(self, user_id: str) -> list[SessionArchive]:
        return list(self._archives.get(user_id, ()))

    async def record_crisis_event(self, event: CrisisEvent) -> None:
        async with self._lock:
            self._crisis_log.append(event)

    async def crisis_events(
        self,
        *,
        user_id: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> list[CrisisEvent]:
        return [
            event for event in self._crisis_log
            if (user_id is None or event.user_id == user_id)
            and (session_id is None or event.session_id == session_id)
        ]

    async def delete_user(self, user_id: str) -> StoreDeletion:
        async with self._lock:
            archives = self._archives.pop(user_id, ())
            plan = self._plans.pop(user_id, None)
            retained = sum(1 for event in self._crisis_log if event.user_id == user_id)

        return StoreDeletion(
            archives_deleted=len(archives),
            plan_deleted=plan is not None,
            crisis_events_retained=retained,
        )
