"""Pytest configuration for ensuring project modules resolve correctly."""

from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from coach_app import create_app
from coach_app.extensions import db

INJECTION_MODEL = "llama-prompt-guard-2-86m"
SAFETY_MODEL = "llama-guard-4-12b"
ASSISTANT_MODEL = "llama-3.1-8b-instant"


class FakeAIClient:
    """Stands in for the completion provider; replies are keyed by model id."""

    def __init__(self):
        self.api_key = "test-key"
        self.calls = []
        self.responses = {
            INJECTION_MODEL: "ALLOW",
            SAFETY_MODEL: "ALLOW",
            ASSISTANT_MODEL: "Respuesta del modelo",
        }

    @property
    def configured(self) -> bool:
        return True

    def complete(self, messages, model=None, temperature=0.0, max_tokens=500):
        self.calls.append(
            {
                "messages": messages,
                "model": model,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        reply = self.responses.get(model, "")
        if isinstance(reply, Exception):
            raise reply
        return reply

    def calls_for(self, model):
        return [call for call in self.calls if call["model"] == model]


@pytest.fixture()
def app_with_db():
    app = create_app("test")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app_with_db):
    return app_with_db.test_client()


@pytest.fixture()
def fake_ai(app_with_db):
    fake = FakeAIClient()
    app_with_db.extensions["ai_client"] = fake
    return fake


def _register(client, email, role, locale="es"):
    resp = client.post(
        "/api/auth/register",
        json={
            "email": email,
            "password": "StrongPass123!",
            "role": role,
            "locale": locale,
            "full_name": email.split("@")[0],
        },
    )
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()


@pytest.fixture()
def register_user(client):
    return lambda email, role="patient", locale="es": _register(client, email, role, locale)


@pytest.fixture()
def patient_token(register_user):
    return register_user("patient@example.com")["access_token"]


@pytest.fixture()
def nutri_token(register_user):
    return register_user("nutri@example.com", role="nutri")["access_token"]


@pytest.fixture()
def patient_id(app_with_db, patient_token):
    from coach_app.models import User

    return User.query.filter_by(email="patient@example.com").first().id
