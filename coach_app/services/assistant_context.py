"""Builds the plan/lesson context block handed to the plan assistant model."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, List

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import ContentLesson, Plan
from ..utils import format_date_iso

NO_LESSONS = "(none)"
DEFAULT_LESSON_LIMIT = 5


@dataclass(frozen=True)
class PlanContext:
    plan_data: Any = field(default_factory=dict)
    schema_version: int = 1
    status: str = "draft"
    published_at: str | None = None

    def plan_json(self) -> str:
        # Empty containers serialize as-is; other falsy bodies count as no plan.
        if not self.plan_data and not isinstance(self.plan_data, (dict, list)):
            return "{}"
        return _compact_json(self.plan_data)

    def meta_json(self) -> str:
        return _compact_json(
            {
                "schema_version": self.schema_version,
                "status": self.status,
                "published_at": self.published_at,
            }
        )


@dataclass(frozen=True)
class AssistantContext:
    locale: str
    week_start: date
    plan: PlanContext
    lessons_text: str

    def render(self) -> str:
        return (
            f"LOCALE={self.locale}\n"
            f"WEEK_START={format_date_iso(self.week_start)}\n"
            f"PLAN_META={self.plan.meta_json()}\n"
            f"PLAN_JSON={self.plan.plan_json()}\n"
            f"LESSONS:\n{self.lessons_text}"
        )


def _compact_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _load_plan(user_id: int, week_start: date) -> PlanContext:
    plan = (
        Plan.query.filter_by(patient_id=user_id, week_start=week_start)
        .order_by(Plan.updated_at.desc(), Plan.id.desc())
        .first()
    )
    if plan is None:
        return PlanContext()
    return PlanContext(
        plan_data=plan.plan_data,
        schema_version=plan.schema_version or 1,
        status=plan.status or "draft",
        published_at=_isoformat(plan.published_at),
    )


def _load_lessons(limit: int) -> List[ContentLesson]:
    return (
        ContentLesson.query.filter_by(published=True)
        .order_by(ContentLesson.created_at.desc(), ContentLesson.id.desc())
        .limit(limit)
        .all()
    )


def render_lessons(lessons, locale: str) -> str:
    """One `- title: body` line per lesson in the requested locale, no fallback."""

    suffix = "eu" if locale == "eu" else "es"
    lines = []
    for lesson in lessons:
        title = getattr(lesson, f"title_{suffix}", None) or ""
        body = getattr(lesson, f"body_{suffix}", None) or ""
        lines.append(f"- {title}: {body}")
    return "\n".join(lines) or NO_LESSONS


def build_context(user_id: int, locale: str, week_start: date) -> AssistantContext:
    """Read plan and lessons; store failures degrade to the empty defaults."""

    try:
        plan = _load_plan(user_id, week_start)
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.warning("Assistant plan context unavailable: %s", exc)
        plan = PlanContext()

    limit = int(current_app.config.get("AI_ASSISTANT_LESSON_LIMIT", DEFAULT_LESSON_LIMIT))
    try:
        lessons = _load_lessons(limit)
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.warning("Assistant lesson context unavailable: %s", exc)
        lessons = []

    return AssistantContext(
        locale=locale,
        week_start=week_start,
        plan=plan,
        lessons_text=render_lessons(lessons, locale),
    )
