"""Calendar helpers shared by plans and the assistant."""

from __future__ import annotations

from datetime import date, datetime, timedelta


def week_start_monday(value: date | datetime | None = None) -> date:
    """Return the Monday of the week containing `value` (server-local today by default)."""

    if value is None:
        value = date.today()
    if isinstance(value, datetime):
        value = value.date()
    return value - timedelta(days=value.weekday())


def format_date_iso(value: date) -> str:
    return value.strftime("%Y-%m-%d")
