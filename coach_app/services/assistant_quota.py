"""Daily usage quota for the plan assistant.

The counter lives in ``assistant_usage`` with one row per (user, UTC day).
Check-and-increment is a single upsert statement so concurrent requests from
the same user cannot lose updates; the caller only decides whether the new
count is within the ceiling.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

from flask import current_app
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import AssistantUsage


class QuotaStoreError(RuntimeError):
    """The usage counter could not be read or updated."""


@dataclass(frozen=True)
class QuotaResult:
    allowed: bool
    new_count: int
    limit: int


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _today() -> date:
    return _now().date()


def _next_reset() -> datetime:
    return datetime.combine(_today() + timedelta(days=1), time(0, 0), tzinfo=timezone.utc)


def daily_limit() -> int:
    return int(current_app.config.get("AI_ASSISTANT_DAILY_LIMIT", 20))


def _upsert_statement(dialect_name: str, user_id: int, usage_date: date):
    if dialect_name == "postgresql":
        insert = postgresql.insert
    elif dialect_name == "sqlite":
        insert = sqlite.insert
    else:
        raise QuotaStoreError(f"Unsupported quota store dialect: {dialect_name}")
    table = AssistantUsage.__table__
    now = _now()
    stmt = insert(table).values(
        user_id=user_id,
        usage_date=usage_date,
        used_count=1,
        created_at=now,
        updated_at=now,
    )
    return stmt.on_conflict_do_update(
        index_elements=[table.c.user_id, table.c.usage_date],
        set_={"used_count": table.c.used_count + 1, "updated_at": now},
    ).returning(table.c.used_count)


def _increment_usage(user_id: int, usage_date: date) -> int:
    dialect_name = db.session.get_bind().dialect.name
    stmt = _upsert_statement(dialect_name, user_id, usage_date)
    new_count = db.session.execute(stmt).scalar_one()
    db.session.commit()
    return int(new_count)


def check_and_increment(user_id: int, max_per_day: int) -> QuotaResult:
    """Atomically count one more assistant call for today and report whether it fits."""

    if max_per_day <= 0:
        raise ValueError("max_per_day must be positive")
    try:
        new_count = _increment_usage(user_id, _today())
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.error("Assistant quota store failure for user %s: %s", user_id, exc)
        raise QuotaStoreError(str(exc)) from exc
    result = QuotaResult(allowed=new_count <= max_per_day, new_count=new_count, limit=max_per_day)
    if not result.allowed:
        current_app.logger.info(
            "Assistant quota exceeded for user %s (%s/%s)", user_id, new_count, max_per_day
        )
    return result


def describe_usage(user_id: int) -> dict:
    row = AssistantUsage.query.filter_by(user_id=user_id, usage_date=_today()).first()
    used = row.used_count if row else 0
    limit = daily_limit()
    return {
        "limit": limit,
        "used": used,
        "remaining": max(limit - used, 0),
        "resets_at": _next_reset().isoformat(),
    }
