"""JSON Validator/Normalizer for user-edited action and condition config.

Provides:
  - ``check_json()``    — parse, pollution-check, re-serialize; returns a
                          SanitizationResult carrying the rejection reason.
  - ``sanitize_json()`` — the same check collapsed to ``Optional[str]``.
  - ``is_valid_json()`` — syntax-only check for live editor feedback.

``is_valid_json()`` answers "does this parse?" for an editor indicator and
does NOT run the pollution check. Code at a trust boundary (form submit,
persistence) must call ``check_json()`` / ``sanitize_json()``.
"""

from __future__ import annotations

import json
import math
from typing import Any, Optional

from inputguard.models.result import Accepted, Rejected, RejectionKind, SanitizationResult
from inputguard.sanitizer.pollution import has_pollution
from inputguard.utils.logger import log_rejection

_COMPONENT = "json"


def _reject_constant(name: str) -> Any:
    """``parse_constant`` hook: NaN / Infinity / -Infinity are not JSON."""
    raise ValueError(f"Non-standard JSON constant: {name}")


def _finite_float(literal: str) -> Optional[float]:
    """``parse_float`` hook: a number literal too large for a float becomes null.

    ``1e400`` is valid JSON but overflows to ``inf``, which has no JSON
    spelling. Reading it as null matches what a browser round-trip produces.
    """
    value = float(literal)
    if math.isinf(value):
        return None
    return value


def _strict_loads(text: str) -> Any:
    """Parse ``text`` as RFC 8259 JSON. Overflowing numbers parse as None.

    Raises:
        ValueError: On any syntax error (``json.JSONDecodeError`` included).
        RecursionError: When nesting exceeds the interpreter's recursion limit.
    """
    return json.loads(text, parse_constant=_reject_constant, parse_float=_finite_float)


def check_json(text: str) -> SanitizationResult[str]:
    """Validate user-supplied JSON text and return its normalized form.

    Steps:
      1. Blank / whitespace-only input → Rejected(SYNTAX_INVALID).
      2. Strict parse; failure → Rejected(SYNTAX_INVALID).
      3. has_pollution() over the whole tree → Rejected(POLICY_REJECTED).
      4. Compact re-serialization → Accepted(normalized).

    Re-serialization removes insignificant whitespace only. Key order is kept
    as parsed; the output is NOT a canonical form.

    NEVER raises. Every rejection is reported to the diagnostic sink.
    """
    if not text or not text.strip():
        return Rejected(RejectionKind.SYNTAX_INVALID, "JSON input is empty")

    try:
        parsed = _strict_loads(text)
    except (ValueError, RecursionError) as exc:
        log_rejection(_COMPONENT, "Invalid JSON provided", error=str(exc)[:200])
        return Rejected(RejectionKind.SYNTAX_INVALID, "Invalid JSON syntax")

    if has_pollution(parsed):
        log_rejection(_COMPONENT, "Detected prototype pollution attempt in JSON")
        return Rejected(
            RejectionKind.POLICY_REJECTED,
            "JSON contains a reserved key (__proto__, constructor or prototype)",
        )

    try:
        normalized = json.dumps(parsed, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (ValueError, RecursionError) as exc:
        log_rejection(_COMPONENT, "JSON re-serialization failed", error=str(exc)[:200])
        return Rejected(RejectionKind.SYNTAX_INVALID, "Invalid JSON syntax")

    return Accepted(normalized)


def sanitize_json(text: str) -> Optional[str]:
    """Return the normalized JSON text, or None if ``text`` is empty,
    malformed, or contains a reserved key at any inspected depth.

    Examples:
        ``'{"name": "test"}'``               → ``'{"name":"test"}'``
        ``'{"__proto__": {"admin": true}}'`` → None
        ``'not json'``                       → None
    """
    result = check_json(text)
    if isinstance(result, Accepted):
        return result.value
    return None


def is_valid_json(text: str) -> bool:
    """Syntax-only check. Blank input is not valid JSON.

    Does NOT detect pollution — never use this in place of ``sanitize_json()``
    before a trust boundary.
    """
    if not text or not text.strip():
        return False
    try:
        _strict_loads(text)
    except (ValueError, RecursionError):
        return False
    return True
