"""
Tests for FastAPI backend (vetshop.api).

These tests stay offline: the auth service and the database are fakes.
"""

from __future__ import annotations

import json
import logging

from fastapi.testclient import TestClient

from vetshop.api import create_app
from vetshop.logging_config import StructuredFormatter
from tests.fakes import ADMIN_TOKEN, CUSTOMER_ID, CUSTOMER_TOKEN, FakeAppointmentRepo, make_session


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def test_health(client):
    resp = client.get("/v1/health")
    assert resp.status_code == 200
    assert resp.json()["ok"] is True
    assert resp.headers["cache-control"] == "no-store"


def test_security_headers(client):
    resp = client.get("/v1/health")
    assert resp.headers["x-content-type-options"] == "nosniff"
    assert resp.headers["x-frame-options"] == "DENY"
    assert resp.headers["referrer-policy"] == "strict-origin-when-cross-origin"


def test_request_id_is_echoed(client):
    resp = client.get("/v1/health", headers={"X-Request-ID": "req-123"})
    assert resp.headers["x-request-id"] == "req-123"


def test_request_id_is_generated(client):
    assert client.get("/v1/health").headers["x-request-id"]


class TestLogin:
    def test_customer_goes_to_orders(self, client, auth_client):
        session = make_session(CUSTOMER_ID, CUSTOMER_TOKEN, "cliente@example.com")
        auth_client.credentials["cliente@example.com"] = ("secret", session)

        resp = client.post("/auth/login", json={"email": " cliente@example.com ", "password": "secret"})

        assert resp.status_code == 200
        body = resp.json()
        assert body == {"user_id": CUSTOMER_ID, "email": "cliente@example.com", "redirect_to": "/cuenta/pedidos"}
        cookies = resp.headers.get_list("set-cookie")
        assert any(c.startswith(f"sb-access-token={CUSTOMER_TOKEN}") and "HttpOnly" in c for c in cookies)
        assert any(c.startswith(f"sb-refresh-token=refresh-{CUSTOMER_TOKEN}") for c in cookies)
        assert resp.headers["cache-control"] == "no-store"

    def test_admin_goes_to_dashboard(self, client, auth_client, sessions):
        auth_client.credentials["admin@example.com"] = ("secret", sessions[ADMIN_TOKEN])
        resp = client.post("/auth/login", json={"email": "admin@example.com", "password": "secret"})
        assert resp.json()["redirect_to"] == "/dashboard"

    def test_invalid_credentials(self, client):
        resp = client.post("/auth/login", json={"email": "nadie@example.com", "password": "wrong"})
        assert resp.status_code == 401
        assert resp.json()["error"] == "invalid_credentials"
        assert resp.json()["message"] == "Credenciales incorrectas"
        assert "set-cookie" not in resp.headers

    def test_malformed_body(self, client):
        resp = client.post("/auth/login", json={"email": "a@example.com"})
        assert resp.status_code == 422


class TestLogout:
    def test_signs_out_and_clears_cookies(self, client, auth_client):
        resp = client.post("/auth/logout", headers=_bearer(CUSTOMER_TOKEN))
        assert resp.status_code == 200
        assert resp.json() == {"redirect_to": "/login"}
        assert auth_client.signed_out == [CUSTOMER_TOKEN]
        cleared = resp.headers.get_list("set-cookie")
        assert any(c.startswith("sb-access-token=") and "Max-Age=0" in c for c in cleared)

    def test_without_session(self, client, auth_client):
        resp = client.post("/auth/logout")
        assert resp.status_code == 200
        assert auth_client.signed_out == []


class TestCallback:
    def test_anonymous_goes_to_login(self, client):
        resp = client.get("/auth/callback", follow_redirects=False)
        assert resp.status_code == 307
        assert resp.headers["location"] == "/login"
        assert resp.headers["cache-control"] == "no-store"

    def test_admin_goes_to_dashboard(self, client):
        resp = client.get("/auth/callback", headers=_bearer(ADMIN_TOKEN), follow_redirects=False)
        assert resp.status_code == 307
        assert resp.headers["location"] == "/dashboard"

    def test_customer_goes_to_orders_with_cookies(self, client):
        resp = client.get("/auth/callback", headers=_bearer(CUSTOMER_TOKEN), follow_redirects=False)
        assert resp.headers["location"] == "/cuenta/pedidos"
        assert any(c.startswith("sb-access-token=") for c in resp.headers.get_list("set-cookie"))


class TestAppointments:
    def test_lists_customer_appointments(self, client):
        resp = client.get("/v1/appointments", headers=_bearer(CUSTOMER_TOKEN))
        assert resp.status_code == 200
        items = resp.json()["items"]
        assert [a["id"] for a in items] == ["c2", "c1"]
        assert items[0]["paciente_nombre"] == "Luna"
        assert resp.headers["cache-control"] == "no-store"

    def test_requires_session(self, client):
        resp = client.get("/v1/appointments")
        assert resp.status_code == 401
        assert resp.json()["error"] == "authentication_required"
        assert resp.headers["x-request-id"]

    def test_failed_read_is_empty(self, app_state, settings):
        app_state.appointment_repo = FakeAppointmentRepo({}, fail=True)
        client = TestClient(create_app(settings=settings, state=app_state))
        resp = client.get("/v1/appointments", headers=_bearer(CUSTOMER_TOKEN))
        assert resp.status_code == 200
        assert resp.json() == {"items": []}


class TestDashboardApi:
    def test_admin_sees_all_orders(self, client, order_repo):
        resp = client.get("/dashboard/pedidos", params={"limit": 1}, headers=_bearer(ADMIN_TOKEN))
        assert resp.status_code == 200
        body = resp.json()
        assert len(body["items"]) == 1
        assert body["limit"] == 1
        assert order_repo.calls[-1][0] == "list_all"

    def test_customer_is_redirected(self, client, order_repo):
        resp = client.get("/dashboard/pedidos", headers=_bearer(CUSTOMER_TOKEN), follow_redirects=False)
        assert resp.status_code == 307
        assert resp.headers["location"].endswith("/cuenta/pedidos")
        assert not any(call[0] == "list_all" for call in order_repo.calls)

    def test_failed_read_is_empty(self, client, order_repo):
        order_repo.fail = True
        resp = client.get("/dashboard/pedidos", headers=_bearer(ADMIN_TOKEN))
        assert resp.status_code == 200
        assert resp.json()["items"] == []


def test_unhandled_error_envelope(app_state, settings):
    class BrokenAuthClient:
        def get_session(self, access_token, refresh_token=None):
            raise RuntimeError("socket closed")

    app_state.auth_client = BrokenAuthClient()
    client = TestClient(create_app(settings=settings, state=app_state), raise_server_exceptions=False)

    resp = client.get("/v1/appointments", headers=_bearer(CUSTOMER_TOKEN))

    assert resp.status_code == 500
    assert resp.json() == {"error": "internal_error"}
    assert "socket closed" not in resp.text


class _JsonCapture(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.setFormatter(StructuredFormatter())
        self.entries: list[dict] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.entries.append(json.loads(self.format(record)))


def test_request_id_reaches_worker_thread_logs(client):
    handler = _JsonCapture()
    event_logger = logging.getLogger("event")
    event_logger.addHandler(handler)
    try:
        client.get(
            "/dashboard/pedidos",
            headers={**_bearer(CUSTOMER_TOKEN), "X-Request-ID": "req-42"},
            follow_redirects=False,
        )
    finally:
        event_logger.removeHandler(handler)

    [denied] = [e for e in handler.entries if e["message"] == "admin_access_denied"]
    assert denied["request_id"] == "req-42"
    assert denied["reason"] == "not_admin"
