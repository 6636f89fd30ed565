"""
SAATHI Logging Configuration

structlog setup shared by the API and the session core. Every entry
carries the service name, version and deployment environment, plus
whatever correlation and session ids are bound to the current context.

PRIVACY: User messages, transcripts and generated replies never reach
a log sink. Any key naming user content or a credential is masked,
including keys nested inside dicts and lists.
"""

import logging
import re
import sys
from typing import Any, Callable

import structlog

from saathi import __version__
from saathi.config.settings import Settings


SERVICE_NAME = "saathi-core"

REDACTED = "[REDACTED]"

# Key fragments that mark a value as user content or a credential
SENSITIVE_KEY_FRAGMENTS: tuple[str, ...] = (
    "user_message",
    "transcript",
    "reply",
    "content",
    "password",
    "token",
    "secret",
    "api_key",
    "authorization",
    "credential",
)

_SENSITIVE_KEY = re.compile("|".join(re.escape(f) for f in SENSITIVE_KEY_FRAGMENTS), re.IGNORECASE)

# Third-party loggers held at WARNING whatever the service level
QUIET_LOGGERS: tuple[str, ...] = ("uvicorn.access", "httpx", "httpcore")


def _mask(key: str, value: Any) -> Any:
    if _SENSITIVE_KEY.search(key):
        return REDACTED
    if isinstance(value, dict):
        return {k: _mask(str(k), v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_mask(key, item) for item in value]
    return value


def redact_user_content(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Mask user content and credentials before rendering."""
    return {key: _mask(key, value) for key, value in event_dict.items()}


def service_stamp(environment: str) -> Callable[..., dict[str, Any]]:
    """Build a processor that tags entries with service, version and environment."""

    def stamp(logger: logging.Logger, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict.setdefault("service", SERVICE_NAME)
        event_dict.setdefault("version", __version__)
        event_dict.setdefault("environment", environment)
        return event_dict

    return stamp


def build_processors(environment: str) -> list[Any]:
    """
    Processor chain for an environment.

    Development renders coloured console lines; staging and production
    render one JSON object per line with tracebacks inlined.
    Redaction always runs before either renderer.
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        redact_user_content,
        service_stamp(environment),
    ]

    if environment == "development":
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer(ensure_ascii=False))
    return processors


def configure_logging(settings: Settings) -> None:
    """Install the structlog chain and the stdlib root level. Call once at startup."""
    structlog.configure(
        processors=build_processors(settings.env),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.getLevelName(settings.log_level),
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_correlation_id(correlation_id: str) -> None:
    """Tag every entry of the current request with its correlation id."""
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)


def bind_session_context(session_id: str, user_id: str) -> None:
    """Bind session identifiers for the duration of a turn."""
    structlog.contextvars.bind_contextvars(session_id=session_id, user_id=user_id)


def clear_context() -> None:
    """Drop request-scoped ids once the response is sent."""
    structlog.contextvars.clear_contextvars()
