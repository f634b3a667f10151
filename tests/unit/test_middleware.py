"""Unit tests for inputguard/http/middleware.py.

Tests both middlewares in isolation using a minimal Starlette app.

BodySizeLimitMiddleware:
  - Content-Length > 64 KB → HTTP 413 with the JSON error body
  - Content-Length == 64 KB → accepted (boundary passes)
  - Content-Length not an integer → HTTP 400
  - No Content-Length, streamed body > 64 KB → HTTP 413 (rolling cap)
  - Streamed body within the cap reaches the handler intact

SecurityHeadersMiddleware:
  - production header set when no config is on app.state
  - non-production config → no HSTS, no upgrade-insecure-requests
  - headers set by the handler are not overwritten
"""

from __future__ import annotations

from typing import Iterator

import pytest
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route
from starlette.testclient import TestClient

from inputguard.config import Config, HeadersConfig
from inputguard.constants import MAX_REQUEST_BODY_BYTES
from inputguard.http.headers import HSTS_VALUE
from inputguard.http.middleware import BodySizeLimitMiddleware, SecurityHeadersMiddleware

# ─── Minimal test apps ────────────────────────────────────────────────────────


async def _echo_body(request: Request) -> Response:
    body = await request.body()
    return JSONResponse({"received_bytes": len(body), "ok": True})


async def _ping(request: Request) -> Response:
    return JSONResponse({"pong": True})


async def _framed(request: Request) -> Response:
    response = JSONResponse({"framed": True})
    response.headers["X-Frame-Options"] = "DENY"
    return response


def _make_body_app() -> Starlette:
    app = Starlette(routes=[Route("/upload", _echo_body, methods=["POST"])])
    app.add_middleware(BodySizeLimitMiddleware)
    return app


def _make_headers_app(config: Config | None = None) -> Starlette:
    app = Starlette(routes=[Route("/ping", _ping), Route("/framed", _framed)])
    app.add_middleware(SecurityHeadersMiddleware)
    if config is not None:
        app.state.config = config
    return app


@pytest.fixture()
def client() -> TestClient:
    return TestClient(_make_body_app(), raise_server_exceptions=True)


# ─── Content-Length fast path ─────────────────────────────────────────────────


class TestContentLengthFastPath:
    def test_exactly_at_limit_is_accepted(self, client: TestClient) -> None:
        body = b"x" * MAX_REQUEST_BODY_BYTES
        response = client.post(
            "/upload", content=body, headers={"content-type": "application/octet-stream"}
        )
        assert response.status_code == 200
        assert response.json()["received_bytes"] == MAX_REQUEST_BODY_BYTES

    def test_one_byte_over_limit_is_rejected(self, client: TestClient) -> None:
        body = b"x" * (MAX_REQUEST_BODY_BYTES + 1)
        response = client.post(
            "/upload", content=body, headers={"content-type": "application/octet-stream"}
        )
        assert response.status_code == 413

    def test_413_response_body_format(self, client: TestClient) -> None:
        response = client.post("/upload", content=b"x" * (MAX_REQUEST_BODY_BYTES * 2))
        error = response.json()["error"]
        assert error["code"] == "payload_too_large"
        assert "64KB" in error["message"]

    def test_invalid_content_length_returns_400(self, client: TestClient) -> None:
        response = client.post(
            "/upload", content=b"hello", headers={"content-length": "not-a-number"}
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "bad_request"

    def test_empty_body_is_accepted(self, client: TestClient) -> None:
        response = client.post("/upload", content=b"")
        assert response.status_code == 200
        assert response.json()["received_bytes"] == 0


# ─── Streaming slow path ──────────────────────────────────────────────────────


class TestStreamingRollingCap:
    def test_streamed_body_over_limit_returns_413(self, client: TestClient) -> None:
        def oversized_body() -> Iterator[bytes]:
            for _ in range(5):
                yield b"x" * 16_384

        response = client.post("/upload", content=oversized_body())
        assert response.status_code == 413
        assert response.json()["error"]["code"] == "payload_too_large"

    def test_streamed_body_within_limit_reaches_handler(self, client: TestClient) -> None:
        def small_body() -> Iterator[bytes]:
            yield b'{"a":'
            yield b"1}"

        response = client.post("/upload", content=small_body())
        assert response.status_code == 200
        assert response.json()["received_bytes"] == len(b'{"a":1}')


# ─── Security headers ─────────────────────────────────────────────────────────


class TestSecurityHeadersMiddleware:
    def test_production_headers_without_config(self) -> None:
        response = TestClient(_make_headers_app()).get("/ping")
        assert response.status_code == 200
        assert response.headers["strict-transport-security"] == HSTS_VALUE
        assert "upgrade-insecure-requests" in response.headers["content-security-policy"]
        assert response.headers["x-content-type-options"] == "nosniff"

    def test_production_config(self) -> None:
        app = _make_headers_app(Config(environment="production"))
        response = TestClient(app).get("/ping")
        assert "strict-transport-security" in response.headers

    def test_non_production_config_omits_hsts(self) -> None:
        app = _make_headers_app(Config(environment="development"))
        response = TestClient(app).get("/ping")
        assert "strict-transport-security" not in response.headers
        assert "upgrade-insecure-requests" not in response.headers["content-security-policy"]

    def test_connect_src_from_config(self) -> None:
        config = Config(
            environment="test", headers=HeadersConfig(api_base_url="https://api.example.com")
        )
        response = TestClient(_make_headers_app(config)).get("/ping")
        assert "https://api.example.com" in response.headers["content-security-policy"]

    def test_handler_headers_not_overwritten(self) -> None:
        response = TestClient(_make_headers_app()).get("/framed")
        assert response.headers["x-frame-options"] == "DENY"
        assert response.headers["referrer-policy"] == "strict-origin-when-cross-origin"
