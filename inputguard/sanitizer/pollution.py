"""Structural Pollution Detector.

Scans parsed JSON for object keys that rewrite shared base-object behaviour
once the document reaches a JavaScript consumer (``__proto__``,
``constructor``, ``prototype``). A pure predicate: nothing is stripped or
mutated, rejecting the document is the caller's job.
"""

from __future__ import annotations

from typing import Any

from inputguard.constants import DANGEROUS_KEYS, MAX_POLLUTION_DEPTH


def has_pollution(value: Any, depth: int = 0) -> bool:
    """Return True if any mapping key at nesting level <= MAX_POLLUTION_DEPTH
    is one of DANGEROUS_KEYS.

    Mappings are checked key by key and their values recursed into; lists are
    recursed element by element. Each container step adds one to ``depth``.
    Primitives and None are never flagged.

    Beyond MAX_POLLUTION_DEPTH the scan stops and returns False: deeper
    levels are not inspected. This keeps adversarial nesting from exhausting
    the stack; overall document size is bounded by the request body cap.

    Args:
        value: Parsed JSON value (dict / list / primitive).
        depth: Current nesting level. Callers start at 0.

    Returns:
        True on the first dangerous key found, False otherwise.
    """
    if depth > MAX_POLLUTION_DEPTH:
        return False

    if isinstance(value, dict):
        for key, child in value.items():
            if key in DANGEROUS_KEYS:
                return True
            if isinstance(child, (dict, list)) and has_pollution(child, depth + 1):
                return True
        return False

    if isinstance(value, list):
        for child in value:
            if isinstance(child, (dict, list)) and has_pollution(child, depth + 1):
                return True

    return False
