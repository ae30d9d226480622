from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient
from jose import jwt

from pinnotes.storage.pin_store import PinStore
from pinnotes.utils.jwt_auth import decode_token
from pinnotes.utils.pin_auth import PinGate

from conftest import PIN, FailingStore, current_session


def test_correct_pin_returns_token(client):
    r = client.post("/api/auth/pin", json={"pin": PIN})
    assert r.status_code == 200
    data = r.json()
    assert "access_token" in data
    assert data["token_type"] == "bearer"
    assert "sid" in decode_token(data["access_token"])


def test_wrong_pin_is_rejected(client, deps):
    r = client.post("/api/auth/pin", json={"pin": "000000"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid PIN"
    assert len(deps.sessions) == 0

    r = client.get("/api/notes")
    assert r.status_code == 401


def test_lookup_error_fails_closed(client, deps, tmp_path, monkeypatch):
    monkeypatch.setattr(deps, "gate", PinGate(PinStore(FailingStore(tmp_path, fail={"get"}))))
    r = client.post("/api/auth/pin", json={"pin": PIN})
    assert r.status_code == 503
    assert r.json()["detail"] == "Error verifying PIN"
    assert len(deps.sessions) == 0


def test_pin_longer_than_form_field_is_rejected(client):
    r = client.post("/api/auth/pin", json={"pin": "1234567"})
    assert r.status_code == 422


def test_protected_requires_token_or_cookie(client):
    # no auth at all
    r = client.get("/api/notes")
    assert r.status_code == 401

    token = client.post("/api/auth/pin", json={"pin": PIN}).json()["access_token"]

    # cookie set by the unlock call
    r = client.get("/api/notes")
    assert r.status_code == 200

    # bearer header works without the cookie
    fresh = TestClient(client.app)
    r = fresh.get("/api/notes", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200


def test_forged_token_is_rejected(client):
    forged = jwt.encode({"sid": "whatever"}, "not-the-secret", algorithm="HS256")
    r = client.get("/api/notes", headers={"Authorization": f"Bearer {forged}"})
    assert r.status_code == 401


def test_token_for_unknown_session_is_rejected(client):
    token = jwt.encode({"sid": "gone"}, "dev-secret-for-tests", algorithm="HS256")
    r = client.get("/api/notes", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401


def test_tokens_do_not_expire_by_default(client):
    token = client.post("/api/auth/pin", json={"pin": PIN}).json()["access_token"]
    assert "exp" not in decode_token(token)


def test_expiry_is_configurable(client, monkeypatch):
    monkeypatch.setenv("SESSION_EXP_MINUTES", "15")
    token = client.post("/api/auth/pin", json={"pin": PIN}).json()["access_token"]
    claims = decode_token(token)
    assert abs(claims["exp"] - claims["iat"] - 15 * 60) <= 1


def test_logout_closes_session(authed, deps):
    assert len(deps.sessions) == 1
    r = authed.post("/api/auth/logout")
    assert r.status_code == 204
    assert len(deps.sessions) == 0

    r = authed.get("/api/notes")
    assert r.status_code == 401


def test_unlocking_again_reuses_the_session(authed, deps):
    assert len(deps.sessions) == 1
    r = authed.post("/api/auth/pin", json={"pin": PIN})
    assert r.status_code == 200
    assert len(deps.sessions) == 1


def test_expired_sessions_are_evicted(client, deps, monkeypatch):
    monkeypatch.setenv("SESSION_EXP_MINUTES", "15")
    for _ in range(3):
        TestClient(client.app).post("/api/auth/pin", json={"pin": PIN})
    assert len(deps.sessions) == 3

    for session in list(deps.sessions._sessions.values()):
        session.expires_at = datetime.now(timezone.utc) - timedelta(seconds=1)

    client.post("/api/auth/pin", json={"pin": PIN})
    assert len(deps.sessions) == 1


def test_expired_session_is_rejected(authed, deps):
    session = current_session(authed, deps)
    session.expires_at = datetime.now(timezone.utc) - timedelta(seconds=1)

    r = authed.get("/api/notes")
    assert r.status_code == 401
    assert len(deps.sessions) == 0
