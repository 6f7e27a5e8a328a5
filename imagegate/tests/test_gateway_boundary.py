import json

import pytest
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient
from starlette.requests import Request

from imagegate.config.settings import settings
from imagegate.core import gateway


def _build_request(
    path: str,
    *,
    method: str = "POST",
    headers: dict[str, str] | None = None,
    body: bytes = b"{}",
) -> Request:
    raw_headers = [(b"content-type", b"application/json")]
    for k, v in (headers or {}).items():
        raw_headers.append((k.lower().encode("latin-1"), v.encode("latin-1")))
    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": path,
        "raw_path": path.encode("latin-1"),
        "query_string": b"",
        "headers": raw_headers,
        "client": ("127.0.0.1", 50000),
        "server": ("127.0.0.1", 8000),
    }

    sent = False

    async def receive() -> dict:
        nonlocal sent
        if sent:
            return {"type": "http.request", "body": b"", "more_body": False}
        sent = True
        return {"type": "http.request", "body": body, "more_body": False}

    return Request(scope, receive)


async def _allow_next(_request: Request):
    return JSONResponse(status_code=200, content={"ok": True})


async def _explode_next(_request: Request):
    raise RuntimeError("boom")


@pytest.mark.asyncio
async def test_boundary_rejects_oversize_content_length(monkeypatch):
    monkeypatch.setattr(settings, "max_request_body_bytes", 10)
    request = _build_request("/v1/chat/completions", headers={"content-length": "11"})
    response = await gateway.request_boundary_middleware(request, _allow_next)
    assert response.status_code == 413
    assert json.loads(response.body.decode("utf-8"))["error"]["type"] == "request_body_too_large"


@pytest.mark.asyncio
async def test_boundary_measures_body_without_content_length(monkeypatch):
    monkeypatch.setattr(settings, "max_request_body_bytes", 4)
    request = _build_request("/v1/chat/completions", body=b'{"messages": []}')
    response = await gateway.request_boundary_middleware(request, _allow_next)
    assert response.status_code == 413


@pytest.mark.asyncio
async def test_boundary_rejects_invalid_content_length():
    request = _build_request("/v1/chat/completions", headers={"content-length": "abc"})
    response = await gateway.request_boundary_middleware(request, _allow_next)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_boundary_passes_get_requests():
    request = _build_request("/v1/models", method="GET")
    response = await gateway.request_boundary_middleware(request, _allow_next)
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_boundary_turns_unexpected_errors_into_server_error():
    request = _build_request("/v1/chat/completions", headers={"content-length": "2"})
    response = await gateway.request_boundary_middleware(request, _explode_next)
    assert response.status_code == 500
    body = json.loads(response.body.decode("utf-8"))
    assert body["error"] == {"message": "boom", "type": "server_error"}


def test_app_serves_health_models_and_preflight():
    client = TestClient(gateway.app)
    assert client.get("/health").json() == {"status": "ok"}

    models = client.get("/v1/models")
    assert models.status_code == 200
    assert models.json()["object"] == "list"

    preflight = client.options(
        "/v1/chat/completions",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Authorization, Content-Type",
        },
    )
    assert preflight.status_code == 200
    assert preflight.headers["access-control-allow-origin"] == "*"


def test_app_rejects_empty_messages_over_http():
    client = TestClient(gateway.app)
    response = client.post("/v1/chat/completions", json={"messages": []})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "invalid_request"


@pytest.mark.parametrize("raw_body", [b"[]", b'"a cat"', b"not json"])
def test_app_rejects_non_object_bodies_as_invalid_request(raw_body):
    client = TestClient(gateway.app)
    response = client.post(
        "/v1/chat/completions",
        content=raw_body,
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "invalid_request"
    assert error["type"] == "invalid_request"
    assert error["message"]


@pytest.mark.asyncio
@pytest.mark.parametrize(("content_length", "status"), [("999", 413), ("abc", 400)])
async def test_boundary_drains_body_before_rejecting(monkeypatch, content_length, status):
    monkeypatch.setattr(settings, "max_request_body_bytes", 10)
    received: list[dict] = []
    request = _build_request("/v1/chat/completions", headers={"content-length": content_length}, body=b'{"a": 1}')
    original_receive = request._receive

    async def tracking_receive() -> dict:
        message = await original_receive()
        received.append(message)
        return message

    request._receive = tracking_receive
    response = await gateway.request_boundary_middleware(request, _allow_next)
    assert response.status_code == status
    assert received and received[0]["body"] == b'{"a": 1}'
