"""Validation API endpoints — exposes the sanitizers over HTTP.

Provides (mounted under /api/validate):
  POST /json           — check_json(): normalized JSON or a rejection
  POST /json/syntax    — is_valid_json(): syntax only, for editor feedback
  POST /webhook-url    — check_webhook_url() with the configured production flag
  POST /template       — validate_template_variables()
  POST /config-value   — sanitize_config_value()
  POST /error-message  — sanitize_error_message() on exception text
  POST /redirect-url   — sanitize_redirect_url() with the configured origin / allow-list

A rejected value is a field-level result, not a transport failure: every
endpoint answers HTTP 200 with ``accepted: false`` and a ``{kind, reason}``
error. 4xx is reserved for malformed requests (422), oversized bodies (413)
and rate limiting (429).

All endpoints are rate limited with VALIDATION_RATE_LIMIT per client address.
"""

from typing import Any, Optional
from urllib.parse import urlsplit

from fastapi import APIRouter, Request
from pydantic import BaseModel

from inputguard.api.limiter import VALIDATION_RATE_LIMIT, limiter
from inputguard.config import Config
from inputguard.models.result import Accepted, SanitizationResult
from inputguard.sanitizer.browser import browser_view
from inputguard.sanitizer import (
    check_json,
    check_webhook_url,
    classify_hostname,
    is_valid_json,
    sanitize_config_value,
    sanitize_error_message,
    sanitize_redirect_url,
    validate_template_variables,
)
router = APIRouter(tags=["validation"])


# ─── Request Models ───────────────────────────────────────────────────────────


class JsonRequest(BaseModel):
    """Request body for POST /json and POST /json/syntax."""

    input: str


class WebhookUrlRequest(BaseModel):
    """Request body for POST /webhook-url.

    There is deliberately no ``production`` field: the https requirement
    comes from the service configuration only.
    """

    url: str


class TemplateRequest(BaseModel):
    """Request body for POST /template."""

    template: str


class ConfigValueRequest(BaseModel):
    """Request body for POST /config-value. ``value`` may be any JSON value."""

    value: Any = None


class ErrorMessageRequest(BaseModel):
    """Request body for POST /error-message."""

    message: Optional[str] = None


class RedirectUrlRequest(BaseModel):
    """Request body for POST /redirect-url."""

    url: Optional[str] = None
    fallback: str = "/"


# ─── Response Models ──────────────────────────────────────────────────────────


class RejectionBody(BaseModel):
    kind: str
    reason: str


class CheckResponse(BaseModel):
    accepted: bool
    value: Optional[str] = None
    error: Optional[RejectionBody] = None


class WebhookCheckResponse(CheckResponse):
    host: Optional[dict[str, Optional[str]]] = None


class SyntaxResponse(BaseModel):
    valid: bool


class TemplateResponse(BaseModel):
    is_valid: bool
    invalid_vars: list[str]


class TextResponse(BaseModel):
    text: str


class RedirectUrlResponse(BaseModel):
    url: str


def _check_response(result: SanitizationResult[str]) -> CheckResponse:
    if isinstance(result, Accepted):
        return CheckResponse(accepted=True, value=result.value)
    return CheckResponse(
        accepted=False,
        error=RejectionBody(kind=result.kind.value, reason=result.reason),
    )


def _config(request: Request) -> Config:
    # Production defaults apply if the lifespan has not populated app.state yet.
    return getattr(request.app.state, "config", None) or Config.defaults()


# ─── Endpoints ────────────────────────────────────────────────────────────────


@router.post("/json", response_model=CheckResponse)
@limiter.limit(VALIDATION_RATE_LIMIT)
async def validate_json(request: Request, body: JsonRequest) -> CheckResponse:
    """Parse, pollution-check and normalize a JSON document.

    Returns:
        {"accepted": true, "value": "<compact JSON>", "error": null}
        {"accepted": false, "value": null, "error": {"kind": ..., "reason": ...}}
    """
    return _check_response(check_json(body.input))


@router.post("/json/syntax", response_model=SyntaxResponse)
@limiter.limit(VALIDATION_RATE_LIMIT)
async def validate_json_syntax(request: Request, body: JsonRequest) -> SyntaxResponse:
    """Syntax-only check. Does NOT detect reserved keys — use POST /json before saving."""
    return SyntaxResponse(valid=is_valid_json(body.input))


@router.post("/webhook-url", response_model=WebhookCheckResponse)
@limiter.limit(VALIDATION_RATE_LIMIT)
async def validate_webhook_url(request: Request, body: WebhookUrlRequest) -> WebhookCheckResponse:
    """Validate a webhook endpoint URL against the SSRF policy.

    ``host`` carries the hostname classification (``kind`` and matched
    ``range``) when the URL parsed far enough to have a hostname.
    """
    config = _config(request)
    result = _check_response(check_webhook_url(body.url, production=config.is_production))

    host: Optional[dict[str, Optional[str]]] = None
    try:
        hostname = urlsplit(body.url.strip()).hostname
    except ValueError:
        hostname = None
    if hostname:
        classification = classify_hostname(hostname)
        host = {"kind": classification.kind.value, "range": classification.range}

    return WebhookCheckResponse(**result.model_dump(), host=host)


@router.post("/template", response_model=TemplateResponse)
@limiter.limit(VALIDATION_RATE_LIMIT)
async def validate_template(request: Request, body: TemplateRequest) -> TemplateResponse:
    """Check ``{{variable}}`` references against the allow-list."""
    validation = validate_template_variables(body.template)
    return TemplateResponse(is_valid=validation.is_valid, invalid_vars=validation.invalid_vars)


@router.post("/config-value", response_model=TextResponse)
@limiter.limit(VALIDATION_RATE_LIMIT)
async def render_config_value(request: Request, body: ConfigValueRequest) -> TextResponse:
    """Render an arbitrary config value as markup-free display text."""
    return TextResponse(text=sanitize_config_value(body.value))


@router.post("/error-message", response_model=TextResponse)
@limiter.limit(VALIDATION_RATE_LIMIT)
async def redact_error_message(request: Request, body: ErrorMessageRequest) -> TextResponse:
    """Redact and escape an error message for display.

    The message is treated as exception text: stack frames, file paths and
    line positions are removed before markup is stripped.
    """
    error = Exception(body.message) if body.message else None
    return TextResponse(text=sanitize_error_message(error))


@router.post("/redirect-url", response_model=RedirectUrlResponse)
@limiter.limit(VALIDATION_RATE_LIMIT)
async def sanitize_redirect(request: Request, body: RedirectUrlRequest) -> RedirectUrlResponse:
    """Return a safe redirect target using the configured origin and allow-list."""
    config = _config(request)
    # The caller-supplied fallback is itself a redirect target and gets the same check.
    fallback = sanitize_redirect_url(
        body.fallback,
        allowed_domains=config.redirect.allowed_domains,
        origin=config.redirect.origin,
    )
    safe = sanitize_redirect_url(
        body.url,
        fallback=fallback,
        allowed_domains=config.redirect.allowed_domains,
        origin=config.redirect.origin,
    )
    return RedirectUrlResponse(url=safe)
