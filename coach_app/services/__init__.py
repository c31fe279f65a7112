"""Business logic modules (AI client, assistant pipeline, feedback, etc.)."""

from . import (
    ai_client,
    assistant_quota,
    content_guard,
    assistant_context,
    plan_assistant,
    feedback_service,
    diagnostics_service,
)

__all__ = [
    "ai_client",
    "assistant_quota",
    "content_guard",
    "assistant_context",
    "plan_assistant",
    "feedback_service",
    "diagnostics_service",
]
