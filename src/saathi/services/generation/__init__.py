"""Supervised reply generation with templated fallback."""

from saathi.services.generation.fallback_templates import (
    get_fallback_response,
    get_strategy_guidelines,
)
from saathi.services.generation.response_supervisor import (
    GeneratedReply,
    ReplyDecodeError,
    ReplyOutcome,
    ResponseSupervisor,
    decode_reply,
)

__all__ = [
    "GeneratedReply",
    "ReplyDecodeError",
    "ReplyOutcome",
    "ResponseSupervisor",
    "decode_reply",
    "get_fallback_response",
    "get_strategy_guidelines",
]
