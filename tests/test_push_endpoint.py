MODULE = "apns_push.adapters.driver.controllers.push_controller"

import types
from importlib import import_module
from fastapi import FastAPI
from fastapi.testclient import TestClient
from apns_push.domain.entities import DeliveryOutcome, Environment, GatewayRejection, SigningIdentity
from apns_push.domain.errors import KeySourceError, PayloadEncodingError, TransportError


def _make_app_and_patch_sender(monkeypatch, *, side_effect=None, return_value=None, **settings_over):
    mod = import_module(MODULE)

    class FakeSender:
        def __init__(self):
            self.calls = []

        async def send(self, identity, target, payload, claims=None):
            self.calls.append((identity, target, payload))
            if side_effect:
                raise side_effect
            return return_value or DeliveryOutcome(status_code=200, headers={"apns-id": "ID-9"})

    base = dict(APNS_TOPIC="com.example.default", APNS_ENVIRONMENT="sandbox")
    base.update(settings_over)
    monkeypatch.setattr(f"{MODULE}.settings", types.SimpleNamespace(**base), raising=True)

    fake = FakeSender()
    monkeypatch.setattr(mod, "_sender", fake, raising=True)
    monkeypatch.setattr(
        mod, "_load_identity", lambda: SigningIdentity(team_id="T", key_id="K", private_key=b"pem"), raising=True
    )

    app = FastAPI()
    app.include_router(mod.router)
    return fake, TestClient(app)


def test_post_push_success(monkeypatch):
    fake, client = _make_app_and_patch_sender(monkeypatch)

    r = client.post(
        "/push",
        json={"device_token": "abc123", "alert": "Hi", "content_available": 1, "badge": 3, "topic": "com.example.app"},
    )
    assert r.status_code == 200
    assert r.json() == {"ok": True, "status_code": 200, "apns_id": "ID-9"}

    assert len(fake.calls) == 1
    identity, target, payload = fake.calls[0]
    assert identity.team_id == "T"
    assert target.device_token == "abc123"
    assert target.topic == "com.example.app"
    assert target.environment is Environment.SANDBOX
    assert payload.aps.alert == "Hi"
    assert payload.aps.content_available == 1
    assert payload.aps.badge == 3
    assert payload.aps.sound is None
    assert payload.custom_key is None


def test_post_push_defaults_topic_and_environment_from_settings(monkeypatch):
    fake, client = _make_app_and_patch_sender(monkeypatch, APNS_ENVIRONMENT="production")

    r = client.post("/push", json={"device_token": "d", "alert": "x"})
    assert r.status_code == 200
    _, target, _ = fake.calls[0]
    assert target.topic == "com.example.default"
    assert target.environment is Environment.PRODUCTION


def test_post_push_without_any_topic_returns_400(monkeypatch):
    fake, client = _make_app_and_patch_sender(monkeypatch, APNS_TOPIC=None)
    r = client.post("/push", json={"device_token": "d", "alert": "x"})
    assert r.status_code == 400
    assert fake.calls == []


def test_post_push_gateway_rejection_reports_reason(monkeypatch):
    rejection = GatewayRejection(status_code=403, headers={"apns-id": "R"}, body=b'{"reason":"InvalidProviderToken"}')
    _, client = _make_app_and_patch_sender(monkeypatch, return_value=rejection)

    r = client.post("/push", json={"device_token": "d", "alert": "x"})
    assert r.status_code == 200
    assert r.json() == {"ok": False, "status_code": 403, "apns_id": "R", "reason": "InvalidProviderToken"}


def test_post_push_invalid_body_returns_422(monkeypatch):
    _, client = _make_app_and_patch_sender(monkeypatch)
    assert client.post("/push", json={"device_token": "d", "alert": "x", "content_available": 2}).status_code == 422
    assert client.post("/push", json={"device_token": "d", "alert": "x", "environment": "staging"}).status_code == 422
    assert client.post("/push", json={"alert": "x"}).status_code == 422


def test_post_push_error_mapping(monkeypatch):
    for exc, status in (
        (PayloadEncodingError("bad payload"), 400),
        (KeySourceError("no key"), 500),
        (TransportError("ConnectError: refused"), 502),
    ):
        _, client = _make_app_and_patch_sender(monkeypatch, side_effect=exc)
        r = client.post("/push", json={"device_token": "d", "alert": "x"})
        assert r.status_code == status
        assert r.json()["detail"] == str(exc)
