import httpx
import pytest
from fastapi.testclient import TestClient

from banquet.auth import create_access_token
from banquet.gateway import create_gateway
from helpers import make_settings

ROUTES = {"booking": "http://booking.test", "auth": "http://auth.test"}


@pytest.fixture
def upstream():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if request.url.path.endswith("/missing"):
            return httpx.Response(404, json={"error": "Booking not found"})
        return httpx.Response(200, json={"ok": True})

    return calls, httpx.MockTransport(handler)


@pytest.fixture
def settings():
    return make_settings(GATEWAY_ROUTES=ROUTES)


@pytest.fixture
def gateway(settings, upstream):
    _, transport = upstream
    return TestClient(create_gateway(settings, transport=transport))


def _token(settings, **claims) -> dict:
    data = {"id": "user-1", "role": "user", **claims}
    return {"Authorization": f"Bearer {create_access_token(data, settings)}"}


def test_health(gateway):
    assert gateway.get("/api/health").json() == {"status": "ok", "service": "gateway"}


def test_protected_path_requires_token(gateway, upstream):
    calls, _ = upstream
    res = gateway.get("/api/booking/bookings")
    assert res.status_code == 401
    assert res.json()["error"] == "Authentication required"
    res = gateway.get("/api/booking/bookings", headers={"Authorization": "Bearer forged"})
    assert res.status_code == 401
    assert calls == []


def test_verified_identity_replaces_spoofed_headers(gateway, upstream, settings):
    calls, _ = upstream
    headers = {**_token(settings, kycStatus="approved"), "X-User-Id": "admin-1", "X-User-Role": "admin"}
    res = gateway.get("/api/booking/bookings?page=2", headers=headers)
    assert res.status_code == 200
    assert res.json() == {"ok": True}

    forwarded = calls[0]
    assert str(forwarded.url) == "http://booking.test/api/booking/bookings?page=2"
    assert forwarded.headers["X-User-Id"] == "user-1"
    assert forwarded.headers["X-User-Role"] == "user"
    assert forwarded.headers["X-Kyc-Status"] == "approved"
    assert forwarded.headers["Authorization"].startswith("Bearer ")


def test_public_path_forwards_without_identity(gateway, upstream):
    calls, _ = upstream
    res = gateway.post("/api/auth/login", json={"email": "a@b.c"}, headers={"X-User-Id": "admin-1"})
    assert res.status_code == 200
    assert "x-user-id" not in calls[0].headers
    assert b'"email"' in calls[0].content


def test_upstream_errors_pass_through(gateway, settings):
    res = gateway.get("/api/booking/bookings/missing", headers=_token(settings))
    assert res.status_code == 404
    assert res.json() == {"error": "Booking not found"}


def test_unknown_service(gateway, settings):
    res = gateway.get("/api/payments/charges", headers=_token(settings))
    assert res.status_code == 404
    assert res.json() == {"error": "Unknown service 'payments'"}


def test_unreachable_upstream_is_503(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    gateway = TestClient(create_gateway(settings, transport=httpx.MockTransport(handler)))
    res = gateway.get("/api/booking/bookings", headers=_token(settings))
    assert res.status_code == 503
    assert res.json() == {"error": "booking service unavailable"}
