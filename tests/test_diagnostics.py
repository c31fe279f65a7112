from __future__ import annotations

from datetime import datetime, timedelta, timezone

from coach_app.extensions import db
from coach_app.models import AppErrorEvent
from coach_app.services import diagnostics_service


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _payload(**overrides):
    payload = {
        "route": "/app/patient/today",
        "component": "TodayCard",
        "errorName": "TypeError",
        "errorMessage": "x is undefined",
        "fingerprint": "today-card",
        "context": {"step": 2},
    }
    payload.update(overrides)
    return payload


def test_report_is_stored(client, app_with_db, patient_token):
    resp = client.post("/api/diagnostics/error", json=_payload(), headers=_auth(patient_token))
    assert resp.status_code == 200
    assert resp.get_json() == {"ok": True}
    event = AppErrorEvent.query.one()
    assert event.severity == "error"
    assert event.error_name == "TypeError"
    assert event.context == {"step": 2}
    assert event.environment == {}


def test_unauthenticated_report_is_skipped(client, app_with_db):
    resp = client.post("/api/diagnostics/error", json=_payload())
    assert resp.status_code == 202
    assert resp.get_json() == {"ok": True, "skipped": "unauthenticated"}
    assert AppErrorEvent.query.count() == 0


def test_invalid_payload(client, patient_token):
    resp = client.post(
        "/api/diagnostics/error",
        json=_payload(errorName="", severity="panic"),
        headers=_auth(patient_token),
    )
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Payload diagnostico invalido"


def test_insert_failure_is_best_effort(client, patient_token, monkeypatch):
    monkeypatch.setattr(diagnostics_service, "record_error", lambda user_id, payload: False)
    resp = client.post("/api/diagnostics/error", json=_payload(), headers=_auth(patient_token))
    assert resp.status_code == 202
    assert resp.get_json() == {"ok": False, "skipped": "insert_failed"}


def test_rate_limit_per_forwarded_ip(client, app_with_db):
    app_with_db.config["DIAGNOSTICS_RATE_LIMIT"] = "3 per day"
    headers = {"X-Forwarded-For": "203.0.113.7, 10.0.0.1"}
    for _ in range(3):
        resp = client.post("/api/diagnostics/error", json=_payload(), headers=headers)
        assert resp.status_code == 202
    blocked = client.post("/api/diagnostics/error", json=_payload(), headers=headers)
    assert blocked.status_code == 429
    assert blocked.get_json() == {"error": "Rate limit excedido"}

    other = client.post(
        "/api/diagnostics/error", json=_payload(), headers={"X-Forwarded-For": "198.51.100.2"}
    )
    assert other.status_code == 202


def test_dashboard_groups_by_fingerprint(client, app_with_db, patient_id, patient_token):
    base = datetime(2026, 10, 1, tzinfo=timezone.utc)
    rows = [
        AppErrorEvent(user_id=patient_id, error_name="TypeError", error_message="a", fingerprint="fp-1", route="/a", created_at=base),
        AppErrorEvent(user_id=patient_id, error_name="TypeError", error_message="a", fingerprint="fp-1", route="/a", created_at=base + timedelta(hours=2)),
        AppErrorEvent(user_id=patient_id, error_name="RangeError", error_message="b", route="/b", created_at=base + timedelta(hours=1)),
        AppErrorEvent(user_id=patient_id, error_name="RangeError", error_message="b", route=None, created_at=base + timedelta(hours=3)),
    ]
    db.session.add_all(rows)
    db.session.commit()

    resp = client.get("/api/diagnostics/error", headers=_auth(patient_token))
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["total"] == 4
    issues = {issue["fingerprint"]: issue for issue in data["topIssues"]}
    assert issues["fp-1"]["count"] == 2
    assert issues["fp-1"]["lastSeen"].startswith("2026-10-01T02:00:00")
    assert issues["RangeError:/b"]["count"] == 1
    assert issues["RangeError:unknown"]["sampleRoute"] is None
    assert data["topIssues"][0]["fingerprint"] == "fp-1"
    assert data["latest"][0]["created_at"].startswith("2026-10-01T03:00:00")


def test_dashboard_requires_auth(client):
    assert client.get("/api/diagnostics/error").status_code == 401


def test_clamp_limit():
    assert diagnostics_service.clamp_limit("5") == 10
    assert diagnostics_service.clamp_limit("500") == 200
    assert diagnostics_service.clamp_limit("abc") == 100
    assert diagnostics_service.clamp_limit(50) == 50
