from __future__ import annotations

from ..extensions import db
from ..models import NpsResponse


def submit_nps(user_id: int, score: float, comment: str | None = None, context: dict | None = None) -> NpsResponse:
    entry = NpsResponse(
        user_id=user_id,
        score=score,
        comment=comment or "",
        context=context or {},
    )
    db.session.add(entry)
    db.session.commit()
    return entry
