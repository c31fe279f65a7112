"""NPS feedback endpoint."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request
from flask_jwt_extended import get_current_user, verify_jwt_in_request
from marshmallow import ValidationError

from ..schemas import NpsSchema
from ..services import feedback_service

feedback_bp = Blueprint("feedback_bp", __name__)

nps_schema = NpsSchema()


@feedback_bp.errorhandler(ValidationError)
def handle_validation_error(err: ValidationError):
    return jsonify({"error": "score invalido", "errors": err.messages}), HTTPStatus.BAD_REQUEST


@feedback_bp.get("/ping")
def ping():
    return jsonify({"module": "feedback", "status": "ok"})


@feedback_bp.post("/nps")
def submit_nps():
    payload = nps_schema.load(request.get_json(silent=True) or {})

    verify_jwt_in_request(optional=True)
    user = get_current_user()
    if user is None:
        return jsonify({"error": "No autenticado"}), HTTPStatus.UNAUTHORIZED

    entry = feedback_service.submit_nps(
        user.id,
        payload["score"],
        comment=payload.get("comment"),
        context=payload.get("context"),
    )
    return jsonify({"ok": True, "id": entry.id})
