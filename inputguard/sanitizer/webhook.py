"""Webhook URL Validator — SSRF defense for user-supplied ``rest`` action endpoints.

Provides:
  - ``classify_hostname()``    — lexical host classification (no DNS).
  - ``check_webhook_url()``    — full validation; SanitizationResult with reason.
  - ``sanitize_webhook_url()`` — the same check collapsed to ``Optional[str]``.

SCOPE:
  This is a syntactic classifier. It never resolves DNS or opens a
  connection, so a public name that later resolves to a private address
  (DNS rebinding) is NOT caught here. The egress path that dereferences the
  URL must enforce resolution-time checks.

HOST NORMALIZATION:
  Classification runs on the host as a browser URL parser would serialize
  it, after reading ``\\`` as ``/`` and dropping tab/LF/CR (see
  sanitizer/browser.py): lower-cased, one trailing dot dropped, legacy IPv4 notations
  (``2130706433``, ``0x7f.1``, ``0177.0.0.1``, ``127.1``) rewritten as dotted
  quads, IPv6 literals compressed. Without this, ``http://2130706433/``
  would slip past a dotted-quad check while still reaching 127.0.0.1.

The production flag is a parameter. Nothing here reads the environment.
"""

from __future__ import annotations

import ipaddress
from typing import Optional
from urllib.parse import urlsplit

from inputguard.constants import WEBHOOK_ALLOWED_SCHEMES
from inputguard.models.result import (
    Accepted,
    HostKind,
    HostnameClassification,
    Rejected,
    RejectionKind,
    SanitizationResult,
)
from inputguard.sanitizer.browser import browser_view
from inputguard.sanitizer.definitions import FORBIDDEN_HOST_CHARS, IPV4_DOTTED_QUAD
from inputguard.utils.logger import log_rejection

_COMPONENT = "webhook_url"

# ─── Range tables ─────────────────────────────────────────────────────────────

# Exact loopback / unspecified literals. Anything starting with "127." is
# loopback as well (checked separately).
_LOOPBACK_LITERALS: frozenset[str] = frozenset({"localhost", "127.0.0.1", "0.0.0.0", "::1"})

_CLOUD_METADATA_IPV4: tuple[int, int, int, int] = (169, 254, 169, 254)

# IPv6 instance-metadata convention (fd00:ec2::254).
_CLOUD_METADATA_IPV6_MARKER = "fd00:ec2"

# Unique local addresses, fc00::/7.
_ULA_PREFIXES: tuple[str, ...] = ("fc", "fd")

_REJECTION_REASONS: dict[HostKind, str] = {
    HostKind.LOOPBACK: "Localhost URLs not allowed",
    HostKind.PRIVATE_IPV4: "Private IP range not allowed",
    HostKind.PRIVATE_IPV6: "Private IPv6 range not allowed",
    HostKind.LINK_LOCAL_METADATA: "Cloud metadata endpoint not allowed",
    HostKind.UNPARSEABLE: "Invalid URL format",
}


class _InvalidHost(ValueError):
    """Raised internally when a host cannot be serialized the way a browser would."""


# ─── IPv4 number parsing (browser URL parser semantics) ───────────────────────


def _parse_ipv4_number(part: str) -> int:
    """Parse one dot-separated IPv4 component: decimal, 0-prefixed octal, or 0x hex."""
    radix = 10
    if len(part) >= 2 and part[:2] in ("0x", "0X"):
        part = part[2:]
        radix = 16
    elif len(part) >= 2 and part[0] == "0":
        part = part[1:]
        radix = 8
    if part == "":
        return 0
    digits = "0123456789abcdef"[:radix]
    if any(ch not in digits for ch in part.lower()):
        raise _InvalidHost("not an IPv4 number")
    return int(part, radix)


def _ends_in_number(host: str) -> bool:
    """True when the last host label is numeric, i.e. the host must be IPv4."""
    parts = host.split(".")
    if parts[-1] == "":
        if len(parts) == 1:
            return False
        parts = parts[:-1]
    last = parts[-1]
    if last and all("0" <= ch <= "9" for ch in last):
        return True
    try:
        _parse_ipv4_number(last)
    except _InvalidHost:
        return False
    return last != ""


def _canonical_ipv4(host: str) -> str:
    """Serialize an IPv4 host written in any legacy notation as a dotted quad.

    Raises:
        _InvalidHost: If the host ends in a number but is not a valid IPv4 address.
    """
    parts = host.split(".")
    if parts[-1] == "" and len(parts) > 1:
        parts = parts[:-1]
    if len(parts) > 4 or any(p == "" for p in parts):
        raise _InvalidHost("malformed IPv4 address")

    numbers = [_parse_ipv4_number(p) for p in parts]
    if any(n > 255 for n in numbers[:-1]):
        raise _InvalidHost("IPv4 component out of range")
    if numbers[-1] >= 256 ** (5 - len(numbers)):
        raise _InvalidHost("IPv4 address out of range")

    address = numbers[-1]
    for i, n in enumerate(numbers[:-1]):
        address += n * 256 ** (3 - i)
    return str(ipaddress.IPv4Address(address))


def _normalize_host(hostname: str) -> str:
    """Lower-case and serialize ``hostname`` the way a browser URL parser would.

    Raises:
        _InvalidHost: On forbidden code points or an invalid IP literal.
    """
    host = hostname.lower()

    if ":" in host:
        # IPv6 literal (brackets already removed by urlsplit)
        try:
            return ipaddress.IPv6Address(host).compressed
        except ValueError as exc:
            raise _InvalidHost("invalid IPv6 literal") from exc

    if FORBIDDEN_HOST_CHARS.pattern.search(host):
        raise _InvalidHost("forbidden host code point")

    if host.endswith(".") and len(host) > 1:
        host = host[:-1]

    if _ends_in_number(host):
        return _canonical_ipv4(host)
    return host


# ─── Classification ───────────────────────────────────────────────────────────


def classify_hostname(hostname: str) -> HostnameClassification:
    """Classify a URL hostname for SSRF purposes.

    Order (first match wins):
      1. exact ``localhost`` / ``127.0.0.1`` / ``0.0.0.0`` / ``::1`` or prefix ``127.`` → LOOPBACK
      2. dotted quad in 10.0.0.0/8, 172.16.0.0/12, 192.168.0.0/16         → PRIVATE_IPV4
         exactly 169.254.169.254                                          → LINK_LOCAL_METADATA
      3. contains ``fd00:ec2``                                            → LINK_LOCAL_METADATA
      4. contains ``:`` and starts with ``fc`` / ``fd`` (fc00::/7)        → PRIVATE_IPV6
      5. anything else                                                    → PUBLIC

    Stateless and never cached: the same host is re-classified on every call.
    NEVER raises — an empty or malformed host classifies as UNPARSEABLE.

    Args:
        hostname: Host as returned by ``urlsplit(...).hostname`` (no brackets).

    Returns:
        HostnameClassification with the matched range/literal.
    """
    if not hostname:
        return HostnameClassification(HostKind.UNPARSEABLE)
    try:
        host = _normalize_host(hostname)
    except _InvalidHost:
        return HostnameClassification(HostKind.UNPARSEABLE)

    # ── 1. Loopback / unspecified ─────────────────────────────────────────────
    if host in _LOOPBACK_LITERALS:
        return HostnameClassification(HostKind.LOOPBACK, host)
    if host.startswith("127."):
        return HostnameClassification(HostKind.LOOPBACK, "127.0.0.0/8")

    # ── 2. Private IPv4 + metadata literal ────────────────────────────────────
    m = IPV4_DOTTED_QUAD.pattern.search(host)
    if m:
        a, b, c, d = (int(m.group(i)) for i in range(1, 5))
        if a == 10:
            return HostnameClassification(HostKind.PRIVATE_IPV4, "10.0.0.0/8")
        if a == 172 and 16 <= b <= 31:
            return HostnameClassification(HostKind.PRIVATE_IPV4, "172.16.0.0/12")
        if a == 192 and b == 168:
            return HostnameClassification(HostKind.PRIVATE_IPV4, "192.168.0.0/16")
        if (a, b, c, d) == _CLOUD_METADATA_IPV4:
            return HostnameClassification(HostKind.LINK_LOCAL_METADATA, "169.254.169.254")

    # ── 3. IPv6 metadata convention ───────────────────────────────────────────
    if _CLOUD_METADATA_IPV6_MARKER in host:
        return HostnameClassification(HostKind.LINK_LOCAL_METADATA, "fd00:ec2::/32")

    # ── 4. IPv6 unique local ──────────────────────────────────────────────────
    if ":" in host and host.startswith(_ULA_PREFIXES):
        return HostnameClassification(HostKind.PRIVATE_IPV6, "fc00::/7")

    # IPv4-mapped IPv6 (::ffff:7f00:1) lands here. The egress path's connect-time
    # address check covers it, as it covers DNS results.
    return HostnameClassification(HostKind.PUBLIC)


# ─── Validation ───────────────────────────────────────────────────────────────


def _syntax(reason: str, **fields: object) -> Rejected:
    log_rejection(_COMPONENT, reason, **fields)
    return Rejected(RejectionKind.SYNTAX_INVALID, reason)


def _policy(reason: str, **fields: object) -> Rejected:
    log_rejection(_COMPONENT, reason, **fields)
    return Rejected(RejectionKind.POLICY_REJECTED, reason)


def check_webhook_url(url: str, *, production: bool) -> SanitizationResult[str]:
    """Validate a webhook endpoint URL before it is persisted.

    Steps:
      1. Blank → SYNTAX_INVALID.
      2. Parse browser_view(url) (tab/LF/CR removed, ``\\`` read as ``/``);
         no scheme / no host / bad port / bad IPv6 brackets → SYNTAX_INVALID.
         Scheme other than http/https → POLICY_REJECTED.
      3. ``production`` and scheme != https → POLICY_REJECTED.
      4. classify_hostname(); anything but PUBLIC → rejected.
      5. Accepted(url) — the ORIGINAL string, unmodified (case, trailing
         slash and query string pass through verbatim).

    NEVER raises. Every rejection is logged with the hostname only; the full
    URL may carry secrets in its query string and is never logged.

    Args:
        url:        User-supplied URL.
        production: True in a production deployment (https required). Comes
                    from service configuration, never from the request.
    """
    if not url or not url.strip():
        return _syntax("Webhook URL is empty")

    try:
        parts = urlsplit(browser_view(url))
        scheme = parts.scheme.lower()
        hostname = parts.hostname
        _ = parts.port  # raises ValueError on a malformed or out-of-range port
    except ValueError as exc:
        return _syntax("Invalid URL format", error=str(exc)[:200])

    if not scheme or not parts.netloc:
        return _syntax("Invalid URL format")
    if scheme not in WEBHOOK_ALLOWED_SCHEMES:
        return _policy("Unsupported URL scheme", scheme=scheme[:20])
    if not hostname:
        return _syntax("Invalid URL format")

    if production and scheme != "https":
        return _policy("Non-HTTPS URLs not allowed in production", hostname=hostname)

    classification = classify_hostname(hostname)
    if classification.kind is HostKind.UNPARSEABLE:
        return _syntax(_REJECTION_REASONS[HostKind.UNPARSEABLE], hostname=hostname[:255])
    if classification.is_blocked:
        return _policy(
            _REJECTION_REASONS[classification.kind],
            hostname=hostname,
            host_kind=classification.kind.value,
            range=classification.range,
        )

    return Accepted(url)


def sanitize_webhook_url(url: str, *, production: bool = True) -> Optional[str]:
    """Return ``url`` unchanged if it is a safe webhook target, else None.

    ``production`` defaults to True so that a caller who forgets to pass it
    gets the strict (https-only) policy.

    Examples:
        ``https://api.example.com/webhook``          → returned as-is
        ``http://localhost:3000/hook``                → None
        ``http://169.254.169.254/latest/meta-data``   → None
        ``http://api.example.com/webhook`` (prod)     → None
    """
    result = check_webhook_url(url, production=production)
    if isinstance(result, Accepted):
        return result.value
    return None
