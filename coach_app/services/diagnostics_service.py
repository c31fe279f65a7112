"""Client error reports: best-effort ingestion and a grouped per-user summary."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import AppErrorEvent

MIN_DASHBOARD_LIMIT = 10
MAX_DASHBOARD_LIMIT = 200
DEFAULT_DASHBOARD_LIMIT = 100
TOP_ISSUES = 20
LATEST_ROWS = 40


def record_error(user_id: int, payload: Dict[str, Any]) -> bool:
    """Store one report. Returns False instead of raising when the insert fails."""

    event = AppErrorEvent(
        user_id=user_id,
        route=payload.get("route"),
        component=payload.get("component"),
        severity=payload.get("severity", "error"),
        error_name=payload["error_name"],
        error_message=payload["error_message"],
        error_code=payload.get("error_code"),
        stack=payload.get("stack"),
        fingerprint=payload.get("fingerprint"),
        context=payload.get("context") or {},
        environment=payload.get("environment") or {},
    )
    try:
        db.session.add(event)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.warning("Diagnostics insert failed: %s", exc)
        return False
    return True


def clamp_limit(raw: Any) -> int:
    try:
        value = int(float(raw))
    except (TypeError, ValueError):
        value = DEFAULT_DASHBOARD_LIMIT
    return min(MAX_DASHBOARD_LIMIT, max(MIN_DASHBOARD_LIMIT, value))


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def serialize_event(event: AppErrorEvent) -> dict:
    return {
        "id": event.id,
        "created_at": _isoformat(event.created_at),
        "route": event.route,
        "component": event.component,
        "severity": event.severity,
        "error_name": event.error_name,
        "error_message": event.error_message,
        "error_code": event.error_code,
        "fingerprint": event.fingerprint,
        "context": event.context or {},
        "environment": event.environment or {},
    }


def summarize_errors(user_id: int, limit: int) -> dict:
    events: List[AppErrorEvent] = (
        AppErrorEvent.query.filter_by(user_id=user_id)
        .order_by(AppErrorEvent.created_at.desc(), AppErrorEvent.id.desc())
        .limit(limit)
        .all()
    )
    grouped: Dict[str, dict] = {}
    for event in events:
        fingerprint = event.fingerprint or f"{event.error_name}:{event.route or 'unknown'}"
        current = grouped.get(fingerprint)
        if current is None:
            grouped[fingerprint] = {
                "fingerprint": fingerprint,
                "count": 1,
                "lastSeen": event.created_at,
                "severity": event.severity,
                "errorName": event.error_name,
                "errorMessage": event.error_message,
                "sampleRoute": event.route,
            }
            continue
        current["count"] += 1
        if event.created_at and (current["lastSeen"] is None or event.created_at > current["lastSeen"]):
            current["lastSeen"] = event.created_at

    issues = sorted(grouped.values(), key=lambda item: item["count"], reverse=True)
    top_issues = [{**issue, "lastSeen": _isoformat(issue["lastSeen"])} for issue in issues[:TOP_ISSUES]]
    return {
        "total": len(events),
        "topIssues": top_issues,
        "latest": [serialize_event(event) for event in events[:LATEST_ROWS]],
    }
