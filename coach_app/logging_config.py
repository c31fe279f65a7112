"""JSON logging with per-request ids and the caller's identity."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any
from uuid import uuid4

from flask import g, has_request_context, request
from flask_jwt_extended import get_jwt_identity

# Structured attributes services may pass through ``extra=``.
EXTRA_FIELDS = ("assistant_outcome", "guard", "user_id")
QUIET_LOGGERS = ("urllib3", "werkzeug")


def _request_user() -> str | None:
    try:
        return get_jwt_identity()
    except RuntimeError:
        # No JWT verified for this request.
        return None


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context():
            record.request_id = getattr(g, "request_id", "n/a")
            record.path = request.path
            record.method = request.method
            if getattr(record, "user_id", None) is None:
                record.user_id = _request_user()
        else:
            record.request_id = "-"
            record.path = "-"
            record.method = "-"
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", "-"),
            "method": getattr(record, "method", "-"),
            "path": getattr(record, "path", "-"),
        }
        for name in EXTRA_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                payload[name] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(app) -> None:
    level = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    handler.addFilter(RequestContextFilter())
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)
    # Provider retries are logged by the AI client; keep library chatter out.
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.getLevelName(level), logging.WARNING))


def assign_request_id() -> str:
    """Reuse the caller's X-Request-ID when present so traces line up across hops."""

    req_id = request.headers.get("X-Request-ID", "").strip() if has_request_context() else ""
    g.request_id = req_id or uuid4().hex
    return g.request_id
