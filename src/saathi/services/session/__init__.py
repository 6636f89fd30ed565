"""Session lifecycle: registry, state machine and end-of-session reports."""

from saathi.services.session.registry import SessionRegistry
from saathi.services.session.reports import build_session_report, update_plan
from saathi.services.session.state_machine import SessionStateMachine, TurnResult

__all__ = [
    "SessionRegistry",
    "SessionStateMachine",
    "TurnResult",
    "build_session_report",
    "update_plan",
]
