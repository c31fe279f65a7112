"""Weekly meal plans and educational content."""

from __future__ import annotations

from datetime import datetime, timezone

from ..extensions import db


def utcnow():
    return datetime.now(timezone.utc)


class Plan(db.Model):
    """A patient's plan for one week. `plan_data` is opaque to the backend."""

    __tablename__ = "plans"

    id = db.Column(db.Integer, primary_key=True)
    patient_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    week_start = db.Column(db.Date, nullable=False, index=True)
    plan_data = db.Column(db.JSON, nullable=False, default=dict)
    schema_version = db.Column(db.Integer, nullable=False, default=1)
    status = db.Column(db.String(16), nullable=False, default="draft")
    published_at = db.Column(db.DateTime(timezone=True))
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    patient = db.relationship("User", backref="plans")


class ContentLesson(db.Model):
    """Bilingual (es/eu) lesson shown to patients and fed to the assistant."""

    __tablename__ = "content_lessons"

    id = db.Column(db.Integer, primary_key=True)
    title_es = db.Column(db.String(255), nullable=False, default="")
    body_es = db.Column(db.Text, nullable=False, default="")
    title_eu = db.Column(db.String(255), nullable=False, default="")
    body_eu = db.Column(db.Text, nullable=False, default="")
    tags = db.Column(db.JSON, nullable=False, default=list)
    published = db.Column(db.Boolean, nullable=False, default=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
