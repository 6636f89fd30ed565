"""
Prometheus Metrics

Metrics for SAATHI core observability.
Exposed at /metrics for Prometheus scraping.

ARCHITECTURE: Metrics are decoupled from business logic.
Only increment/observe; never block on metrics operations.
PRIVACY: Labels never carry user or session identifiers.
"""

from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    Info,
    generate_latest,
)
from fastapi import APIRouter, Response

from saathi import __version__

# =============================================================================
# SESSION METRICS
# =============================================================================

SESSIONS_STARTED_TOTAL = Counter(
    "saathi_sessions_started_total",
    "Sessions started by modality",
    ["modality"],
)

SESSIONS_ENDED_TOTAL = Counter(
    "saathi_sessions_ended_total",
    "Sessions ended by peak risk level",
    ["peak_risk_level"],
)

SESSION_DURATION = Histogram(
    "saathi_session_duration_seconds",
    "Duration of closed sessions",
    buckets=[60, 300, 600, 1800, 3600, 7200],
)

ACTIVE_SESSIONS = Gauge(
    "saathi_active_sessions",
    "Number of currently active sessions",
)

TURN_LATENCY = Histogram(
    "saathi_turn_latency_seconds",
    "Core processing time per turn (excluding reply generation)",
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

TURNS_REJECTED_TOTAL = Counter(
    "saathi_turns_rejected_total",
    "Turns rejected before processing",
    ["reason"],  # in_progress, not_active
)

# =============================================================================
# SAFETY METRICS
# =============================================================================

RISK_ASSESSMENTS_TOTAL = Counter(
    "saathi_risk_assessments_total",
    "Risk assessments by level",
    ["risk_level"],
)

CRISIS_EVENTS_TOTAL = Counter(
    "saathi_crisis_events_total",
    "Crisis events raised by level",
    ["risk_level"],
)

RISK_OVERRIDES_TOTAL = Counter(
    "saathi_risk_overrides_total",
    "Assessments where an override rule set the level",
    ["rule"],
)

NOTIFIER_FAILURES_TOTAL = Counter(
    "saathi_notifier_failures_total",
    "Crisis events the notifier failed to accept",
)

# =============================================================================
# EXTRACTION AND GENERATION METRICS
# =============================================================================

EXTRACTOR_FAILURES_TOTAL = Counter(
    "saathi_extractor_failures_total",
    "Extractor failures replaced by neutral defaults",
    ["modality", "reason"],  # timeout, failure, error
)

GENERATOR_REQUESTS_TOTAL = Counter(
    "saathi_generator_requests_total",
    "Reply generation outcomes",
    ["outcome"],  # generated, flagged, decode_fallback, fallback
)

GENERATOR_LATENCY = Histogram(
    "saathi_generator_latency_seconds",
    "Reply generation latency including retries",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0],
)

# =============================================================================
# SYSTEM INFO
# =============================================================================

SYSTEM_INFO = Info(
    "saathi_system",
    "SAATHI core information",
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def track_risk_assessment(risk_level: str, override: Optional[str] = None) -> None:
    """Record risk assessment level."""
    RISK_ASSESSMENTS_TOTAL.labels(risk_level=risk_level).inc()
    if override:
        RISK_OVERRIDES_TOTAL.labels(rule=override).inc()


def track_crisis_event(risk_level: str) -> None:
    CRISIS_EVENTS_TOTAL.labels(risk_level=risk_level).inc()


def track_extractor_failure(modality: str, reason: str) -> None:
    EXTRACTOR_FAILURES_TOTAL.labels(modality=modality, reason=reason).inc()


def track_session_closed(peak_risk_level: str, duration_seconds: float) -> None:
    """Record session completion metrics."""
    SESSIONS_ENDED_TOTAL.labels(peak_risk_level=peak_risk_level).inc()
    SESSION_DURATION.observe(duration_seconds)


def update_system_info(environment: str, version: str = __version__) -> None:
    """Update system info metric with current environment."""
    SYSTEM_INFO.info({
        "version": version,
        "environment": environment,
    })


# =============================================================================
# METRICS ENDPOINT
# =============================================================================

metrics_router = APIRouter(tags=["metrics"])


@metrics_router.get("/metrics")
async def metrics() -> Response:
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format for scraping.
    """
    return Response(
        content=generate_latest(REGISTRY),
        media_type=CONTENT_TYPE_LATEST,
    )
