"""Security response headers for InputGuard.

Implements the header set every response of the validation service carries
and that a front end embedding sanitizer output should send as well:

  - generate_nonce()              — hex CSP nonce from ``secrets``
  - get_content_security_policy() — CSP value; nonce-based script-src when a
                                    nonce is given
  - get_security_headers()        — full header dict; HSTS only in production

The production flag and API base URL are parameters. Nothing here reads the
environment; main.py passes values from the loaded Config.
"""

from __future__ import annotations

import secrets
from typing import Optional

# ─── Constants ────────────────────────────────────────────────────────────────

HSTS_VALUE: str = "max-age=63072000; includeSubDomains; preload"

PERMISSIONS_POLICY_VALUE: str = "camera=(), microphone=(), geolocation=(), interest-cohort=()"

DEFAULT_NONCE_BYTES: int = 32

# connect-src origin used until a Config is loaded (matches HeadersConfig default).
DEFAULT_API_BASE_URL: str = "http://localhost:8080"


# ─── Public API ───────────────────────────────────────────────────────────────


def generate_nonce(length: int = DEFAULT_NONCE_BYTES) -> str:
    """Return ``length`` cryptographically random bytes as lowercase hex (2×length chars)."""
    return secrets.token_hex(length)


def get_content_security_policy(
    nonce: Optional[str] = None,
    *,
    api_base_url: str,
    production: bool,
) -> str:
    """Build the Content-Security-Policy header value.

    Directives are emitted in a fixed order, joined with ``"; "``. Without a
    nonce, inline scripts fall back to ``'unsafe-inline'``.
    ``upgrade-insecure-requests`` is added in production only.

    Args:
        nonce:        Per-response nonce from generate_nonce(), or None.
        api_base_url: Origin the browser may call (connect-src).
        production:   True in a production deployment.
    """
    directives: list[tuple[str, list[str]]] = [
        (
            "script-src",
            [
                "'self'",
                f"'nonce-{nonce}'" if nonce else "'unsafe-inline'",
                "https://cdnjs.cloudflare.com",
            ],
        ),
        ("style-src", ["'self'", "'unsafe-inline'"]),
        ("img-src", ["'self'", "data:", "https:"]),
        ("font-src", ["'self'", "data:", "https://fonts.gstatic.com"]),
        ("connect-src", ["'self'", api_base_url, "wss:"]),
        ("object-src", ["'none'"]),
        ("media-src", ["'self'"]),
        ("frame-src", ["'self'"]),
        ("form-action", ["'self'"]),
        ("frame-ancestors", ["'self'"]),
        ("base-uri", ["'self'"]),
    ]
    if production:
        directives.append(("upgrade-insecure-requests", []))

    return "; ".join(f"{name} {' '.join(values)}".rstrip() for name, values in directives)


def get_security_headers(
    nonce: Optional[str] = None,
    *,
    api_base_url: str,
    production: bool,
) -> dict[str, str]:
    """Return the full security header set as ``{name: value}``.

    Strict-Transport-Security is included only when ``production`` is True;
    sending HSTS from a plain-http development server would pin browsers to
    https for localhost.
    """
    headers: dict[str, str] = {
        "Content-Security-Policy": get_content_security_policy(
            nonce, api_base_url=api_base_url, production=production
        ),
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "SAMEORIGIN",
        "X-XSS-Protection": "1; mode=block",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "Permissions-Policy": PERMISSIONS_POLICY_VALUE,
    }
    if production:
        headers["Strict-Transport-Security"] = HSTS_VALUE
    return headers
