"""Tests for the HTTP completion client (timeouts, retries, error mapping)."""

from __future__ import annotations

import json

import pytest
import requests

from coach_app.services import ai_client
from coach_app.services.ai_client import AIClient, AIClientError, get_ai_client


class FakeResponse:
    def __init__(self, status_code=200, payload=None, raw=None):
        self.status_code = status_code
        self._payload = payload
        self._raw = raw

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._raw is not None:
            raise ValueError("not json")
        return self._payload


def _completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.fixture()
def client_under_test(app_with_db):
    return AIClient(api_key="k", api_base="https://provider.test/v1", default_model="base-model")


@pytest.fixture()
def post_calls(monkeypatch):
    calls = []
    queue = []

    def _fake_post(url, headers=None, data=None, timeout=None):
        calls.append({"url": url, "headers": headers, "payload": json.loads(data), "timeout": timeout})
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    monkeypatch.setattr(ai_client.requests, "post", _fake_post)
    monkeypatch.setattr(ai_client.time, "sleep", lambda _seconds: None)
    return calls, queue


def test_returns_first_choice_content(client_under_test, post_calls):
    calls, queue = post_calls
    queue.append(FakeResponse(payload=_completion("ALLOW")))
    out = client_under_test.complete(
        [{"role": "user", "content": "hi"}], model="guard", temperature=0, max_tokens=5
    )
    assert out == "ALLOW"
    call = calls[0]
    assert call["url"] == "https://provider.test/v1/chat/completions"
    assert call["headers"]["Authorization"] == "Bearer k"
    assert call["payload"] == {
        "model": "guard",
        "messages": [{"role": "user", "content": "hi"}],
        "temperature": 0,
        "max_tokens": 5,
    }
    assert call["timeout"] == (10, 30)


def test_default_model_used(client_under_test, post_calls):
    calls, queue = post_calls
    queue.append(FakeResponse(payload=_completion("ok")))
    client_under_test.complete([])
    assert calls[0]["payload"]["model"] == "base-model"


@pytest.mark.parametrize(
    "payload",
    [_completion(""), _completion(None), {"choices": []}, {}],
)
def test_empty_completion_is_an_error(client_under_test, post_calls, payload):
    _, queue = post_calls
    queue.append(FakeResponse(payload=payload))
    with pytest.raises(AIClientError, match="empty response"):
        client_under_test.complete([])


def test_client_error_surfaces_provider_message(client_under_test, post_calls):
    calls, queue = post_calls
    queue.append(FakeResponse(400, payload={"error": {"message": "model not found"}}))
    with pytest.raises(AIClientError) as excinfo:
        client_under_test.complete([])
    assert str(excinfo.value) == "model not found"
    assert excinfo.value.status_code == 400
    assert len(calls) == 1


def test_error_without_body_uses_status(client_under_test, post_calls):
    _, queue = post_calls
    queue.append(FakeResponse(401, raw="<html>"))
    with pytest.raises(AIClientError, match=r"AI provider error \(401\)"):
        client_under_test.complete([])


def test_retries_transient_status(client_under_test, post_calls):
    calls, queue = post_calls
    queue.extend([FakeResponse(503, payload={}), FakeResponse(payload=_completion("fine"))])
    assert client_under_test.complete([]) == "fine"
    assert len(calls) == 2


def test_retries_are_bounded(client_under_test, post_calls):
    calls, queue = post_calls
    queue.extend([requests.ConnectionError("refused"), requests.Timeout("slow")])
    with pytest.raises(AIClientError, match="unreachable"):
        client_under_test.complete([])
    assert len(calls) == 2


def test_missing_key_is_an_error(app_with_db, post_calls):
    calls, _ = post_calls
    with pytest.raises(AIClientError):
        AIClient(api_key="", api_base="https://provider.test/v1", default_model="m").complete([])
    assert calls == []


def test_get_ai_client_uses_config(app_with_db):
    app_with_db.extensions.pop("ai_client", None)
    client = get_ai_client()
    assert client.api_key == "test-key"
    assert client.api_base == "https://api.groq.com/openai/v1"
    assert client.default_model == "llama-3.1-8b-instant"
    assert get_ai_client() is client
