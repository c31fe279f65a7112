"""Tests for the assistant context block."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import SQLAlchemyError

from coach_app.extensions import db
from coach_app.models import ContentLesson, Plan
from coach_app.services import assistant_context
from coach_app.services.assistant_context import PlanContext

WEEK = date(2026, 10, 19)


def _lesson(index: int, published: bool = True, **overrides):
    fields = {
        "title_es": f"Lección {index}",
        "body_es": f"Cuerpo {index}",
        "title_eu": f"Ikasgaia {index}",
        "body_eu": f"Gorputza {index}",
        "published": published,
        "created_at": datetime(2026, 1, 1, tzinfo=timezone.utc) + timedelta(days=index),
    }
    fields.update(overrides)
    return ContentLesson(**fields)


def test_idempotent_render(app_with_db, patient_id):
    db.session.add(Plan(patient_id=patient_id, week_start=WEEK, plan_data={"b": 1, "a": [1, 2]}))
    db.session.add(_lesson(1))
    db.session.commit()
    first = assistant_context.build_context(patient_id, "es", WEEK).render()
    second = assistant_context.build_context(patient_id, "es", WEEK).render()
    assert first == second


def test_defaults_without_plan_or_lessons(app_with_db, patient_id):
    context = assistant_context.build_context(patient_id, "es", WEEK)
    assert context.plan == PlanContext()
    assert context.render() == (
        "LOCALE=es\n"
        "WEEK_START=2026-10-19\n"
        'PLAN_META={"schema_version":1,"status":"draft","published_at":null}\n'
        "PLAN_JSON={}\n"
        "LESSONS:\n(none)"
    )


def test_plan_for_other_week_is_ignored(app_with_db, patient_id):
    db.session.add(
        Plan(patient_id=patient_id, week_start=WEEK - timedelta(days=7), plan_data={"old": True})
    )
    db.session.commit()
    context = assistant_context.build_context(patient_id, "es", WEEK)
    assert context.plan.plan_json() == "{}"


def test_latest_updated_plan_wins(app_with_db, patient_id):
    older = Plan(
        patient_id=patient_id,
        week_start=WEEK,
        plan_data={"version": "old"},
        updated_at=datetime(2026, 10, 19, 8, tzinfo=timezone.utc),
    )
    newer = Plan(
        patient_id=patient_id,
        week_start=WEEK,
        plan_data={"version": "new"},
        schema_version=2,
        status="published",
        published_at=datetime(2026, 10, 19, 10, tzinfo=timezone.utc),
        updated_at=datetime(2026, 10, 19, 10, tzinfo=timezone.utc),
    )
    db.session.add_all([newer, older])
    db.session.commit()
    context = assistant_context.build_context(patient_id, "es", WEEK)
    assert context.plan.plan_json() == '{"version":"new"}'
    assert '"schema_version":2' in context.plan.meta_json()
    assert '"status":"published"' in context.plan.meta_json()
    assert '"published_at":"2026-10-19T10:00:00' in context.plan.meta_json()


def test_only_five_most_recent_published_lessons(app_with_db, patient_id):
    for index in range(1, 8):
        db.session.add(_lesson(index))
    db.session.add(_lesson(99, published=False))
    db.session.commit()
    text = assistant_context.build_context(patient_id, "es", WEEK).lessons_text
    assert text.splitlines() == [
        "- Lección 7: Cuerpo 7",
        "- Lección 6: Cuerpo 6",
        "- Lección 5: Cuerpo 5",
        "- Lección 4: Cuerpo 4",
        "- Lección 3: Cuerpo 3",
    ]


def test_basque_fields_without_fallback(app_with_db, patient_id):
    db.session.add(_lesson(1, title_eu="", body_eu="Gorputza bakarrik"))
    db.session.commit()
    text = assistant_context.build_context(patient_id, "eu", WEEK).lessons_text
    assert text == "- : Gorputza bakarrik"


def test_render_lessons_defaults_to_spanish_for_other_locales():
    lesson = _lesson(1)
    assert assistant_context.render_lessons([lesson], "fr") == "- Lección 1: Cuerpo 1"
    assert assistant_context.render_lessons([], "es") == "(none)"


def test_non_ascii_plan_is_kept_verbatim(app_with_db, patient_id):
    db.session.add(Plan(patient_id=patient_id, week_start=WEEK, plan_data={"cena": "piñones"}))
    db.session.commit()
    context = assistant_context.build_context(patient_id, "es", WEEK)
    assert context.plan.plan_json() == '{"cena":"piñones"}'


def test_lesson_read_failure_keeps_plan(app_with_db, patient_id, monkeypatch):
    db.session.add(Plan(patient_id=patient_id, week_start=WEEK, plan_data={"ok": 1}))
    db.session.commit()

    def _broken(limit):
        raise SQLAlchemyError("lessons down")

    monkeypatch.setattr(assistant_context, "_load_lessons", _broken)
    context = assistant_context.build_context(patient_id, "es", WEEK)
    assert context.plan.plan_json() == '{"ok":1}'
    assert context.lessons_text == "(none)"


@pytest.mark.parametrize(
    "plan_data, expected",
    [(None, "{}"), ("", "{}"), (0, "{}"), (False, "{}"), ({}, "{}"), ([], "[]"), ({"a": 1}, '{"a":1}')],
)
def test_falsy_plan_bodies_render_as_empty_object(plan_data, expected):
    assert PlanContext(plan_data=plan_data).plan_json() == expected
