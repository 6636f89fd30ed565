"""Metrics infrastructure package."""

from saathi.infrastructure.metrics.prometheus_metrics import (
    ACTIVE_SESSIONS,
    CRISIS_EVENTS_TOTAL,
    EXTRACTOR_FAILURES_TOTAL,
    GENERATOR_LATENCY,
    GENERATOR_REQUESTS_TOTAL,
    NOTIFIER_FAILURES_TOTAL,
    RISK_ASSESSMENTS_TOTAL,
    SESSIONS_STARTED_TOTAL,
    TURN_LATENCY,
    TURNS_REJECTED_TOTAL,
    metrics_router,
    track_crisis_event,
    track_extractor_failure,
    track_risk_assessment,
    track_session_closed,
    update_system_info,
)

__all__ = [
    "ACTIVE_SESSIONS",
    "CRISIS_EVENTS_TOTAL",
    "EXTRACTOR_FAILURES_TOTAL",
    "GENERATOR_LATENCY",
    "GENERATOR_REQUESTS_TOTAL",
    "NOTIFIER_FAILURES_TOTAL",
    "RISK_ASSESSMENTS_TOTAL",
    "SESSIONS_STARTED_TOTAL",
    "TURN_LATENCY",
    "TURNS_REJECTED_TOTAL",
    "metrics_router",
    "track_crisis_event",
    "track_extractor_failure",
    "track_risk_assessment",
    "track_session_closed",
    "update_system_info",
]
