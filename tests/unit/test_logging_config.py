"""
Unit Tests for Logging Configuration

Tests redaction of user content and the per-environment processor
chain.
"""

import structlog

from saathi import __version__
from saathi.config.logging_config import (
    REDACTED,
    build_processors,
    redact_user_content,
    service_stamp,
)


class TestRedaction:
    """User content and credentials never reach a sink."""

    def test_user_content_masked(self) -> None:
        event = redact_user_content(None, "info", {
            "event": "Turn processed",
            "user_message": "I want to kill myself",
            "reply_text": "I'm here with you.",
            "session_id": "s-1",
        })

        assert event["user_message"] == REDACTED
        assert event["reply_text"] == REDACTED
        assert event["session_id"] == "s-1"

    def test_nested_values_masked(self) -> None:
        event = redact_user_content(None, "info", {
            "event": "Generator request",
            "request": {"transcript": "bahut tension hai", "language": "hinglish"},
            "history": [{"Content": "hello"}],
        })

        assert event["request"] == {"transcript": REDACTED, "language": "hinglish"}
        assert event["history"] == [{"Content": REDACTED}]


class TestProcessorChain:
    """Renderer choice and service stamping."""

    def test_development_renders_to_console(self) -> None:
        processors = build_processors("development")

        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
        assert redact_user_content in processors

    def test_production_renders_json(self) -> None:
        processors = build_processors("production")

        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert processors.index(redact_user_content) < len(processors) - 1

    def test_service_stamp(self) -> None:
        event = service_stamp("staging")(None, "info", {"event": "Session started"})

        assert event["service"] == "saathi-core"
        assert event["version"] == __version__
        assert event["environment"] == "staging"
