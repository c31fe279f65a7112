"""AI blueprint for the patient plan assistant."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import current_user, get_current_user, jwt_required, verify_jwt_in_request
from marshmallow import ValidationError

from ..schemas import PlanAssistantRequestSchema
from ..services import assistant_quota, plan_assistant
from ..services.ai_client import AIClientError
from ..utils import is_patient

ai_bp = Blueprint("ai_bp", __name__)

assistant_schema = PlanAssistantRequestSchema()

NOT_CONFIGURED_MESSAGE = "AI no configurada (falta GROQ_API_KEY)."
EMPTY_MESSAGE = "Mensaje vacío."
UNAUTHENTICATED_MESSAGE = "No autenticado."
PATIENTS_ONLY_MESSAGE = "Solo disponible para pacientes."


@ai_bp.get("/ping")
def ping():
    return jsonify({"module": "ai", "status": "ok"})


@ai_bp.post("/plan-assistant")
def plan_assistant_view():
    if not current_app.config.get("AI_API_KEY"):
        return jsonify({"error": NOT_CONFIGURED_MESSAGE}), HTTPStatus.NOT_IMPLEMENTED

    try:
        payload = assistant_schema.load(request.get_json(silent=True) or {})
    except ValidationError:
        return jsonify({"error": EMPTY_MESSAGE}), HTTPStatus.BAD_REQUEST
    message = payload["message"]
    if not message:
        return jsonify({"error": EMPTY_MESSAGE}), HTTPStatus.BAD_REQUEST

    verify_jwt_in_request(optional=True)
    user = get_current_user()
    if user is None:
        return jsonify({"error": UNAUTHENTICATED_MESSAGE}), HTTPStatus.UNAUTHORIZED
    if not is_patient(user):
        return jsonify({"error": PATIENTS_ONLY_MESSAGE}), HTTPStatus.FORBIDDEN

    try:
        result = plan_assistant.answer_question(user, message)
    except plan_assistant.AssistantQuotaExceeded as exc:
        return jsonify({"error": str(exc)}), HTTPStatus.TOO_MANY_REQUESTS
    except assistant_quota.QuotaStoreError as exc:
        return jsonify({"error": str(exc)}), HTTPStatus.INTERNAL_SERVER_ERROR
    except AIClientError as exc:
        current_app.logger.error("Plan assistant provider failure: %s", exc)
        return jsonify({"error": str(exc)}), HTTPStatus.INTERNAL_SERVER_ERROR
    return jsonify({"answer": result.answer})


@ai_bp.get("/plan-assistant/quota")
@jwt_required()
def plan_assistant_quota():
    if not is_patient(current_user):
        return jsonify({"error": PATIENTS_ONLY_MESSAGE}), HTTPStatus.FORBIDDEN
    return jsonify({"quota": assistant_quota.describe_usage(current_user.id)})
