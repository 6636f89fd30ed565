"""
Domain Exceptions

Error taxonomy for the SAATHI core. Each class maps to a distinct
failure kind so callers (and the HTTP layer) can react precisely.

SAFETY-CRITICAL: RiskComputationError must propagate. A fault while
computing risk fails the turn rather than reporting "no risk".
"""

from typing import Optional


class SaathiError(Exception):
    """Base exception for all SAATHI core errors."""


class InputError(SaathiError):
    """Message text is missing or malformed. Scanners treat it as empty."""


class ExtractorFailure(SaathiError):
    """A modality extractor could not produce a signal."""

    def __init__(self, modality: str, reason: str) -> None:
        super().__init__(f"{modality} extraction failed: {reason}")
        self.modality = modality
        self.reason = reason


class RiskComputationError(SaathiError):
    """
    Unexpected fault while scanning or aggregating risk.

    SAFETY_NOTE: Never caught inside the core.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.original_error = original_error


class SessionNotFoundError(SaathiError):
    """Session id is unknown or the session is no longer active."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class InvalidSessionStateError(SaathiError):
    """Operation is not legal in the session's current state."""

    def __init__(self, session_id: str, state: str, operation: str) -> None:
        super().__init__(f"Cannot {operation} session {session_id} in state {state}")
        self.session_id = session_id
        self.state = state
        self.operation = operation


class TurnInProgressError(SaathiError):
    """Another turn is still being processed for this session. Retry or queue."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Turn already in progress for session {session_id}")
        self.session_id = session_id


class ActiveSessionExistsError(SaathiError):
    """User already has an active session and multiplexing was not requested."""

    def __init__(self, user_id: str, session_id: str) -> None:
        super().__init__(f"User {user_id} already has active session {session_id}")
        self.user_id = user_id
        self.session_id = session_id


class GeneratorUnavailableError(SaathiError):
    """External response generation failed."""

    def __init__(
        self,
        message: str,
        generator: str = "unknown",
        is_retryable: bool = False,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.generator = generator
        self.is_retryable = is_retryable
        self.original_error = original_error
