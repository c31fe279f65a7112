"""REST API blueprints (auth, assistant, feedback, etc.)."""

from __future__ import annotations

from .ai_bp import ai_bp, plan_assistant_view
from .auth_bp import auth_bp
from .diagnostics_bp import diagnostics_bp
from .feedback_bp import feedback_bp
from .locale_bp import locale_bp
from .metrics_bp import metrics_bp

BLUEPRINTS = (
    (auth_bp, "/api/auth"),
    (ai_bp, "/api/ai"),
    (locale_bp, "/api/locale"),
    (feedback_bp, "/api/feedback"),
    (diagnostics_bp, "/api/diagnostics"),
    (metrics_bp, ""),
)

# Short path for the assistant, served by the same view.
URL_ALIASES = (
    ("/assistant/plan", "assistant_plan", plan_assistant_view, ("POST",)),
)

__all__ = [
    "BLUEPRINTS",
    "URL_ALIASES",
    "ai_bp",
    "auth_bp",
    "diagnostics_bp",
    "feedback_bp",
    "locale_bp",
    "metrics_bp",
]
