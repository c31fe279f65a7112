"""Patient feedback and client-side diagnostics."""

from __future__ import annotations

from datetime import datetime, timezone

from ..extensions import db


def utcnow():
    return datetime.now(timezone.utc)


class NpsResponse(db.Model):
    __tablename__ = "nps_responses"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    score = db.Column(db.Float, nullable=False)
    comment = db.Column(db.Text, nullable=False, default="")
    context = db.Column(db.JSON, nullable=False, default=dict)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)


class AppErrorEvent(db.Model):
    """Error reported by a client (error boundary, global listeners)."""

    __tablename__ = "app_error_events"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    route = db.Column(db.String(300))
    component = db.Column(db.String(180))
    severity = db.Column(db.String(16), nullable=False, default="error")
    error_name = db.Column(db.String(200), nullable=False)
    error_message = db.Column(db.Text, nullable=False)
    error_code = db.Column(db.String(120))
    stack = db.Column(db.Text)
    fingerprint = db.Column(db.String(200), index=True)
    context = db.Column(db.JSON, nullable=False, default=dict)
    environment = db.Column(db.JSON, nullable=False, default=dict)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False, index=True)
