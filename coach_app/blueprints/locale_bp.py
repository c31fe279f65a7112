"""Locale switching for the UI and the assistant."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import get_current_user, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from marshmallow import ValidationError

from ..extensions import db
from ..schemas import LocaleSchema

locale_bp = Blueprint("locale_bp", __name__)

locale_schema = LocaleSchema()


def _optional_user():
    """Current user when a valid token is sent; a bad or stale token counts as anonymous."""

    try:
        verify_jwt_in_request(optional=True)
    except (JWTExtendedException, PyJWTError) as exc:
        current_app.logger.info("Locale change without a usable session: %s", exc)
        return None
    return get_current_user()


@locale_bp.get("/ping")
def ping():
    return jsonify({"module": "locale", "status": "ok"})


@locale_bp.post("")
def set_locale():
    try:
        payload = locale_schema.load(request.get_json(silent=True) or {})
    except ValidationError:
        payload = {}
    locale = "eu" if payload.get("locale") == "eu" else "es"

    response = jsonify({"ok": True})
    response.set_cookie(
        current_app.config.get("LOCALE_COOKIE_NAME", "coach_locale"),
        locale,
        max_age=current_app.config.get("LOCALE_COOKIE_MAX_AGE", 60 * 60 * 24 * 365),
        path="/",
        samesite="Lax",
    )

    user = _optional_user()
    if user is not None:
        user.locale = locale
        db.session.commit()
    return response
