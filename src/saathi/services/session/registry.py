"""
Session Registry

Explicit, injected registry of live sessions. Constructed and torn
down by the hosting service, so several independent cores (and
isolated tests) can run in one process.

ARCHITECTURE: The registry is the single place that guards session
insert/remove and the per-session turn flag. All three run under one
lock and never block on I/O.
"""

import threading
from typing import Optional

from saathi.config.logging_config import get_logger
from saathi.domain.exceptions import (
    ActiveSessionExistsError,
    InvalidSessionStateError,
    SessionNotFoundError,
    TurnInProgressError,
)
from saathi.domain.models import Session, SessionState

logger = get_logger(__name__)


class SessionRegistry:
    """
    Registry of sessions owned by the state machine.

    Usage:
        registry = SessionRegistry()
        registry.register(session)
        session = registry.begin_turn(session_id)
        try:
            ...
        finally:
            registry.finish_turn(session_id)
    """

    def __init__(self, allow_concurrent_user_sessions: bool = False) -> None:
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()
        self._allow_concurrent = allow_concurrent_user_sessions
        self._closed = False

    def register(self, session: Session, *, allow_concurrent: bool = False) -> None:
        """
        Add a session.

        Raises:
            ActiveSessionExistsError: If the user already has a session
                that is not closed and neither the registry nor the
                caller allows concurrent sessions
        """
        with self._lock:
            if self._closed:
                raise RuntimeError("Session registry is closed")
            if not (self._allow_concurrent or allow_concurrent):
                for existing in self._sessions.values():
                    if existing.user_id == session.user_id and existing.state != SessionState.CLOSED:
                        raise ActiveSessionExistsError(session.user_id, existing.id)
            self._sessions[session.id] = session

    def get(self, session_id: str) -> Session:
        """
        Raises:
            SessionNotFoundError: If the id is unknown or already evicted
        """
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def find(self, session_id: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(session_id)

    def begin_turn(self, session_id: str) -> Session:
        """
        Claim the single-writer flag for a turn.

        Raises:
            SessionNotFoundError: Unknown session
            InvalidSessionStateError: Session is not active
            TurnInProgressError: Another turn holds the flag
        """
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)
            if not session.is_active:
                raise InvalidSessionStateError(session_id, session.state.value, "process_turn")
            if session.turn_in_progress:
                raise TurnInProgressError(session_id)
            session.turn_in_progress = True
            return session

    def finish_turn(self, session_id: str) -> None:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                session.turn_in_progress = False

    def claim_for_close(self, session_id: str) -> Session:
        """
        Take a session out of turn processing so it can close.

        Raises:
            SessionNotFoundError: Unknown session
            InvalidSessionStateError: Session is not active
            TurnInProgressError: A turn is still running
        """
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)
            if not session.is_active:
                raise InvalidSessionStateError(session_id, session.state.value, "end")
            if session.turn_in_progress:
                raise TurnInProgressError(session_id)
            session.turn_in_progress = True
            return session

    def remove(self, session_id: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.pop(session_id, None)

    def sessions_for_user(self, user_id: str) -> list[Session]:
        with self._lock:
            return [s for s in self._sessions.values() if s.user_id == user_id]

    def active_count(self) -> int:
        with self._lock:
            return sum(1 for s in self._sessions.values() if s.is_active)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def close(self) -> None:
        """Drop all sessions and refuse new ones."""
        with self._lock:
            dropped = len(self._sessions)
            self._sessions.clear()
            self._closed = True
        logger.info("Session registry closed", dropped_sessions=dropped)
