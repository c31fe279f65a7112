"""Client diagnostics: error ingestion and a per-user dashboard."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import current_user, get_current_user, jwt_required, verify_jwt_in_request
from flask_limiter.errors import RateLimitExceeded
from marshmallow import ValidationError

from ..extensions import client_ip, limiter
from ..schemas import DiagnosticPayloadSchema
from ..services import diagnostics_service

diagnostics_bp = Blueprint("diagnostics_bp", __name__)

diagnostic_schema = DiagnosticPayloadSchema()


def _diagnostics_limit() -> str:
    return current_app.config.get("DIAGNOSTICS_RATE_LIMIT", "40 per minute")


@diagnostics_bp.errorhandler(ValidationError)
def handle_validation_error(err: ValidationError):
    return (
        jsonify({"error": "Payload diagnostico invalido", "errors": err.messages}),
        HTTPStatus.BAD_REQUEST,
    )


@diagnostics_bp.errorhandler(RateLimitExceeded)
def handle_rate_limit(_err: RateLimitExceeded):
    return jsonify({"error": "Rate limit excedido"}), HTTPStatus.TOO_MANY_REQUESTS


@diagnostics_bp.get("/ping")
def ping():
    return jsonify({"module": "diagnostics", "status": "ok"})


@diagnostics_bp.post("/error")
@limiter.limit(_diagnostics_limit, key_func=lambda: f"diagnostics:{client_ip()}")
def report_error():
    payload = diagnostic_schema.load(request.get_json(silent=True) or {})

    # Public pages report errors before a session exists.
    verify_jwt_in_request(optional=True)
    user = get_current_user()
    if user is None:
        return jsonify({"ok": True, "skipped": "unauthenticated"}), HTTPStatus.ACCEPTED

    if not diagnostics_service.record_error(user.id, payload):
        return jsonify({"ok": False, "skipped": "insert_failed"}), HTTPStatus.ACCEPTED
    return jsonify({"ok": True})


@diagnostics_bp.get("/error")
@jwt_required()
def error_dashboard():
    limit = diagnostics_service.clamp_limit(request.args.get("limit", 100))
    return jsonify(diagnostics_service.summarize_errors(current_user.id, limit))
