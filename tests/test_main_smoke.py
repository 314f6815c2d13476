# tests/test_main_smoke.py
import httpx
from fastapi.testclient import TestClient

from order_tracking.core import messages
from order_tracking.main import create_app


def _client(settings, fake_platform):
    return TestClient(create_app(settings, platform_transport=httpx.MockTransport(fake_platform.handler)))


def test_root_reports_service(settings, fake_platform):
    resp = _client(settings, fake_platform).get("/")

    assert resp.status_code == 200
    assert resp.json() == {
        "status": "running",
        "message": "Order Tracking Backend API",
        "version": "1.0.0",
    }
    assert resp.headers["access-control-allow-origin"] == "*"


def test_options_short_circuits_on_any_path(settings, fake_platform):
    client = _client(settings, fake_platform)

    for path in ("/", "/api/order/1006/upload-payment", "/does/not/exist"):
        resp = client.options(path)
        assert resp.status_code == 200
        assert resp.content == b""
        assert resp.headers["access-control-allow-origin"] == "*"
        assert "POST" in resp.headers["access-control-allow-methods"]
        assert "Content-Type" in resp.headers["access-control-allow-headers"]

    assert fake_platform.calls == []


def test_error_responses_carry_cors_headers(settings, fake_platform):
    resp = _client(settings, fake_platform).get("/api/order/1")

    assert resp.status_code == 404
    assert resp.headers["access-control-allow-origin"] == "*"


def test_unknown_route_uses_error_shape(settings, fake_platform):
    resp = _client(settings, fake_platform).get("/nope")

    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": messages.NOT_FOUND}


def test_wrong_method_is_localized(settings, fake_platform):
    resp = _client(settings, fake_platform).put("/api/order/1006/cancel")

    assert resp.status_code == 405
    assert resp.json() == {"success": False, "error": messages.METHOD_NOT_ALLOWED}
    assert resp.headers["access-control-allow-origin"] == "*"


def test_unhandled_error_is_500_with_cors(settings, fake_platform):
    app = create_app(settings, platform_transport=httpx.MockTransport(fake_platform.handler))

    @app.get("/explode")
    async def explode():
        raise RuntimeError("boom")

    resp = TestClient(app).get("/explode")

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": messages.INTERNAL_ERROR}
    assert resp.headers["access-control-allow-origin"] == "*"
    assert "boom" not in resp.text


def test_healthz_and_metrics(settings, fake_platform):
    client = _client(settings, fake_platform)
    client.get("/api/order/1")

    assert client.get("/healthz").json() == {"status": "ok"}
    metrics = client.get("/metrics")
    assert metrics.status_code == 200
    assert "platform_requests_total" in metrics.text
    assert "http_requests_total" in metrics.text


def test_openapi_lists_order_routes(settings, fake_platform):
    paths = _client(settings, fake_platform).get("/openapi.json").json()["paths"]

    assert "/api/order/{order_number}" in paths
    assert "/api/order/{order_number}/upload-payment" in paths
    assert "/api/order/{order_number}/confirm-payment" in paths
    assert "/api/order/{order_number}/cancel" in paths
