"""HTTP middleware for the InputGuard service.

  - BodySizeLimitMiddleware   — HTTP 413 above MAX_REQUEST_BODY_BYTES.
  - SecurityHeadersMiddleware — adds get_security_headers() to every response.

The body cap is what bounds the JSON validator's work: parse time, the
pollution scan and re-serialization are all linear in the body size.
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from inputguard.constants import MAX_REQUEST_BODY_BYTES
from inputguard.http.headers import DEFAULT_API_BASE_URL, get_security_headers
from inputguard.utils.logger import get_logger

logger = get_logger(__name__)

# ─── Error response bodies ────────────────────────────────────────────────────

_PAYLOAD_TOO_LARGE_BODY: dict = {
    "error": {
        "message": f"Request body too large. Maximum size: {MAX_REQUEST_BODY_BYTES // 1024}KB",
        "code": "payload_too_large",
    }
}

_INVALID_CONTENT_LENGTH_BODY: dict = {
    "error": {
        "message": "Invalid Content-Length header",
        "code": "bad_request",
    }
}


# ─── Middleware ───────────────────────────────────────────────────────────────


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Refuse validation requests whose body exceeds MAX_REQUEST_BODY_BYTES.

    A declared Content-Length is trusted for the early refusal; a body sent
    without one is read up to the cap and handed on only if it fits. A body of
    exactly MAX_REQUEST_BODY_BYTES is accepted.
    """

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        declared = request.headers.get("content-length")
        if declared is not None:
            return await self._check_declared(request, call_next, declared)

        received = bytearray()
        async for chunk in request.stream():
            received.extend(chunk)
            if len(received) > MAX_REQUEST_BODY_BYTES:
                return self._too_large(request, received=len(received))

        # The stream is spent; route handlers read the buffered copy.
        request._body = bytes(received)  # type: ignore[attr-defined]
        return await call_next(request)

    async def _check_declared(self, request: Request, call_next, declared: str) -> Response:
        try:
            size = int(declared)
        except ValueError:
            logger.warning("Invalid Content-Length header", value=declared[:64], path=request.url.path)
            return JSONResponse(status_code=400, content=_INVALID_CONTENT_LENGTH_BODY)
        if size > MAX_REQUEST_BODY_BYTES:
            return self._too_large(request, declared=size)
        return await call_next(request)

    @staticmethod
    def _too_large(request: Request, **sizes: int) -> JSONResponse:
        logger.warning(
            "Validation request body too large",
            limit=MAX_REQUEST_BODY_BYTES,
            path=request.url.path,
            **sizes,
        )
        return JSONResponse(status_code=413, content=_PAYLOAD_TOO_LARGE_BODY)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds the security header set to every HTTP response.

    The production flag and CSP connect-src are read from
    ``app.state.config`` (set by create_app()). Before the config is loaded
    the strict production header set is used. Headers already set by a route
    handler are left untouched.
    """

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        response = await call_next(request)

        config = getattr(request.app.state, "config", None)
        headers = get_security_headers(
            api_base_url=config.headers.api_base_url if config else DEFAULT_API_BASE_URL,
            production=config.is_production if config else True,
        )
        for name, value in headers.items():
            if name not in response.headers:
                response.headers[name] = value
        return response
