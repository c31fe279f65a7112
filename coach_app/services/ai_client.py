"""Simple AI client for calling OpenAI-compatible chat completion providers (e.g., Groq)."""

from __future__ import annotations

import json
from dataclasses import dataclass
import time

import requests
from flask import current_app

RETRYABLE_STATUS = {429, 500, 502, 503, 504}


class AIClientError(RuntimeError):
    """Provider call failed, returned a non-OK status or an empty completion."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def _provider_message(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = {}
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return f"AI provider error ({response.status_code})"


def _extract_content(data) -> str:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        content = None
    if not content:
        raise AIClientError("AI provider returned an empty response")
    return str(content)


@dataclass
class AIClient:
    api_key: str
    api_base: str
    default_model: str

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def complete(
        self,
        messages,
        model: str | None = None,
        temperature: float = 0.0,
        max_tokens: int = 500,
    ) -> str:
        """Run one chat completion and return the first choice's text."""

        if not self.api_key:
            raise AIClientError("GROQ_API_KEY / AI_API_KEY is not configured")

        payload = {
            "model": model or self.default_model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        app = current_app
        connect_timeout = app.config.get("AI_CONNECT_TIMEOUT_SEC", 10)
        read_timeout = app.config.get("AI_READ_TIMEOUT_SEC", 30)
        max_retries = max(1, int(app.config.get("AI_API_MAX_RETRIES", 3)))
        backoff = float(app.config.get("AI_API_RETRY_BACKOFF", 2.0))

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        attempt = 0
        while True:
            attempt += 1
            try:
                response = requests.post(
                    f"{self.api_base}/chat/completions",
                    headers=headers,
                    data=json.dumps(payload),
                    timeout=(connect_timeout, read_timeout),
                )
            except (requests.ConnectionError, requests.Timeout) as exc:
                if attempt >= max_retries:
                    raise AIClientError(f"AI provider unreachable: {exc}") from exc
                failure = str(exc)
            else:
                if response.ok:
                    try:
                        data = response.json()
                    except ValueError as exc:
                        raise AIClientError("AI provider returned invalid JSON") from exc
                    return _extract_content(data)
                message = _provider_message(response)
                if response.status_code not in RETRYABLE_STATUS or attempt >= max_retries:
                    raise AIClientError(message, status_code=response.status_code)
                failure = message
            delay = backoff * attempt
            app.logger.warning(
                "AI client call failed (attempt %s/%s): %s. Retrying in %.1fs",
                attempt,
                max_retries,
                failure,
                delay,
            )
            time.sleep(delay)


def get_ai_client() -> AIClient:
    app = current_app
    client = app.extensions.get("ai_client")
    if client is None:
        client = AIClient(
            api_key=app.config.get("AI_API_KEY", ""),
            api_base=app.config.get("AI_API_BASE", "https://api.groq.com/openai/v1"),
            default_model=app.config.get("AI_ASSISTANT_MODEL", "llama-3.1-8b-instant"),
        )
        app.extensions["ai_client"] = client
    return client
