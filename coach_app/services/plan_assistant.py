"""Patient plan assistant: quota, moderation guards, context and completion.

Stages run strictly in order and each one gates the next:

    quota -> injection guard -> safety guard -> context -> completion

Moderation blocks are not errors; they return a fixed refusal that the caller
renders like any other answer. Quota and guard failures abort the pipeline.
Only context reads are allowed to degrade to defaults.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List

from flask import current_app

from ..metrics import record_assistant_outcome
from ..utils import week_start_monday
from . import assistant_context, assistant_quota, content_guard
from .ai_client import get_ai_client
from .content_guard import GuardPurpose

SUPPORTED_LOCALES = ("es", "eu")
DEFAULT_LOCALE = "es"

INJECTION_REFUSAL = (
    "Prefiero mantener el contexto clínico. Pregunta sobre tu plan o escribe al nutri."
)
SAFETY_REFUSAL = (
    "No puedo ayudar con eso. Si es una duda médica o urgente, consulta con tu "
    "nutricionista o un profesional sanitario."
)
QUOTA_EXCEEDED_MESSAGE = "Has alcanzado el límite diario del asistente."

LOCALE_SYSTEM_PROMPTS: dict[str, str] = {
    "es": (
        "Eres un asistente sobre el plan nutricional. Usa SOLO el PLAN_JSON y LESSONS "
        "proporcionados. No des diagnósticos, no indiques fármacos, no estimes "
        "calorías/macros y no crees un plan completo nuevo. Si es duda médica o falta "
        "contexto del plan, deriva al nutricionista."
    ),
    "eu": (
        "Zure elikadura-planari buruzko laguntzailea zara. Emandako PLAN_JSON eta LESSONS "
        "bakarrik erabili. Ez eman diagnostikorik, ez botikarik, ez kaloria/makro "
        "estimaziorik, ezta plan berri oso bat ere. Zalantza medikoa bada edo planetik "
        "kanpo badago, bideratu nutrizionistara."
    ),
}


class AssistantQuotaExceeded(Exception):
    def __init__(self, used: int, limit: int):
        super().__init__(QUOTA_EXCEEDED_MESSAGE)
        self.used = used
        self.limit = limit


@dataclass(frozen=True)
class AssistantRequest:
    user_id: int
    message: str
    locale: str
    week_start: date


@dataclass(frozen=True)
class AssistantAnswer:
    answer: str
    outcome: str


def resolve_locale(value: str | None) -> str:
    return value if value in SUPPORTED_LOCALES else DEFAULT_LOCALE


def system_prompt_for(locale: str) -> str:
    return LOCALE_SYSTEM_PROMPTS.get(locale, LOCALE_SYSTEM_PROMPTS[DEFAULT_LOCALE])


def complete_answer(
    system_prompts: List[str],
    message: str,
    temperature: float | None = None,
    max_tokens: int | None = None,
) -> str:
    """System messages in order, then the user message, against the assistant model."""

    config = current_app.config
    messages = [{"role": "system", "content": prompt} for prompt in system_prompts]
    messages.append({"role": "user", "content": message})
    return get_ai_client().complete(
        messages,
        model=config.get("AI_ASSISTANT_MODEL"),
        temperature=config.get("AI_ASSISTANT_TEMPERATURE", 0.3) if temperature is None else temperature,
        max_tokens=config.get("AI_ASSISTANT_MAX_TOKENS", 400) if max_tokens is None else max_tokens,
    )


def build_request(user, message: str) -> AssistantRequest:
    return AssistantRequest(
        user_id=user.id,
        message=message,
        locale=resolve_locale(getattr(user, "locale", None)),
        week_start=week_start_monday(),
    )


def _finish(answer: str, outcome: str) -> AssistantAnswer:
    record_assistant_outcome(outcome)
    current_app.logger.info("Plan assistant finished", extra={"assistant_outcome": outcome})
    return AssistantAnswer(answer=answer, outcome=outcome)


def answer_question(user, message: str) -> AssistantAnswer:
    """Run the moderated pipeline for an authenticated patient.

    Raises AssistantQuotaExceeded, assistant_quota.QuotaStoreError or
    ai_client.AIClientError; the blueprint maps those to HTTP statuses.
    """

    assistant_request = build_request(user, message)
    try:
        quota = assistant_quota.check_and_increment(
            assistant_request.user_id, assistant_quota.daily_limit()
        )
        if not quota.allowed:
            raise AssistantQuotaExceeded(used=quota.new_count, limit=quota.limit)

        if not content_guard.classify(GuardPurpose.PROMPT_INJECTION, assistant_request.message).allowed:
            return _finish(INJECTION_REFUSAL, "blocked_injection")

        if not content_guard.classify(GuardPurpose.SAFETY, assistant_request.message).allowed:
            return _finish(SAFETY_REFUSAL, "blocked_safety")

        context = assistant_context.build_context(
            assistant_request.user_id, assistant_request.locale, assistant_request.week_start
        )
        answer = complete_answer(
            [system_prompt_for(assistant_request.locale), context.render()],
            assistant_request.message,
        )
    except AssistantQuotaExceeded:
        record_assistant_outcome("quota_exceeded")
        raise
    except Exception:
        record_assistant_outcome("error")
        raise
    return _finish(answer, "answered")
