"""Redirect URL Sanitizer — open-redirect defense for ``?next=`` style parameters.

A redirect target is accepted when it is either
  - a same-site path (``/dashboard``), returned with dot-segments resolved, or
  - an absolute http(s) URL whose host is the current origin's host or an
    allow-listed domain, returned unchanged.
Everything else, protocol-relative ``//evil.com`` included, is replaced by
the caller's fallback.

Browsers drop tab/LF/CR from URLs and read ``\\`` as ``/``; both are applied
before the checks so that ``/\\evil.com`` and ``/\\t/evil.com`` are judged as
the ``//evil.com`` a browser would follow.
"""

from __future__ import annotations

from typing import Iterable, Optional
from urllib.parse import urljoin, urlsplit

from inputguard.sanitizer.browser import browser_view
from inputguard.utils.logger import log_rejection

_COMPONENT = "redirect_url"

_ALLOWED_SCHEMES: frozenset[str] = frozenset({"http", "https"})


def _is_relative_path(url: str) -> bool:
    return url.startswith("/") and not url.startswith("//")


def _host_of(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    try:
        return urlsplit(url).hostname
    except ValueError:
        return None


def is_safe_redirect_url(
    url: str,
    allowed_domains: Optional[Iterable[str]] = None,
    origin: Optional[str] = None,
) -> bool:
    """Return True if redirecting to ``url`` keeps the user on a trusted site.

    Args:
        url:             Candidate redirect target.
        allowed_domains: Extra hostnames an absolute URL may point at
                         (exact, case-insensitive match).
        origin:          The service's own origin, e.g. ``https://app.example.com``.
                         Absolute URLs on this host are accepted.

    Examples:
        ``/dashboard``                                   → True
        ``https://evil.com``                             → False
        ``https://partner.com``, ``["partner.com"]``     → True
        ``javascript:alert(1)``                          → False
    """
    if not url:
        return False
    candidate = browser_view(url)

    if _is_relative_path(candidate):
        return True

    try:
        parts = urlsplit(candidate)
        hostname = parts.hostname
        _ = parts.port
    except ValueError:
        return False

    if parts.scheme.lower() not in _ALLOWED_SCHEMES or not hostname:
        log_rejection(_COMPONENT, "Redirect scheme not allowed", scheme=parts.scheme[:20])
        return False

    trusted = {d.lower().rstrip(".") for d in (allowed_domains or ())}
    origin_host = _host_of(origin)
    if origin_host:
        trusted.add(origin_host)

    if hostname.rstrip(".") not in trusted:
        log_rejection(_COMPONENT, "Redirect host not allowed", hostname=hostname[:255])
        return False
    return True


def sanitize_redirect_url(
    url: Optional[str],
    fallback: str = "/",
    allowed_domains: Optional[Iterable[str]] = None,
    origin: Optional[str] = None,
) -> str:
    """Return a safe redirect target for ``url``, or ``fallback``.

    Examples:
        ``/dashboard``         → ``/dashboard``
        ``/a/../b?x=1``        → ``/b`` (path only)
        ``https://evil.com``   → ``/``
        ``None``, ``"/home"``  → ``/home``
        ``//evil.com``         → ``/``

    NEVER raises.
    """
    if not url or not url.strip():
        return fallback

    candidate = browser_view(url)
    if _is_relative_path(candidate):
        try:
            return urlsplit(urljoin("http://localhost", candidate)).path or "/"
        except ValueError:
            return fallback

    if is_safe_redirect_url(url, allowed_domains, origin):
        return url.strip()
    return fallback
