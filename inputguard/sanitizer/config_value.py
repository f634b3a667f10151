"""Config Value Renderer — safe display text for arbitrary action-config values.

Dispatch is a closed enum (``ConfigValueKind``) with one renderer per
variant in ``_RENDERERS``. Adding a variant without a renderer fails the
exhaustiveness test instead of silently falling through to a default.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Callable

from inputguard.constants import INVALID_OBJECT_PLACEHOLDER
from inputguard.sanitizer.html import sanitize_html


class ConfigValueKind(str, Enum):
    NULL = "null"
    TEXT = "text"
    JSON = "json"    # containers and any other non-scalar object
    OTHER = "other"  # bool / int / float


def classify_config_value(value: Any) -> ConfigValueKind:
    if value is None:
        return ConfigValueKind.NULL
    if isinstance(value, str):
        return ConfigValueKind.TEXT
    if isinstance(value, (bool, int, float)):
        return ConfigValueKind.OTHER
    return ConfigValueKind.JSON


def _render_null(value: Any) -> str:
    return ""


def _render_text(value: str) -> str:
    return sanitize_html(value)


def _render_json(value: Any) -> str:
    # String fields inside the object are markup-stripped along with the rest.
    try:
        text = json.dumps(value, indent=2, ensure_ascii=False)
    except (TypeError, ValueError, RecursionError):
        return INVALID_OBJECT_PLACEHOLDER
    return sanitize_html(text)


def _render_other(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


_RENDERERS: dict[ConfigValueKind, Callable[[Any], str]] = {
    ConfigValueKind.NULL: _render_null,
    ConfigValueKind.TEXT: _render_text,
    ConfigValueKind.JSON: _render_json,
    ConfigValueKind.OTHER: _render_other,
}


def sanitize_config_value(value: Any) -> str:
    """Render ``value`` as text that is always safe to show as plain text.

    - None                      → ``""``
    - str                       → sanitize_html(value)
    - bool / int / float        → default string form (booleans as ``true`` / ``false``)
    - dict / list / other       → 2-space indented JSON, then sanitize_html();
                                  unserializable (circular, unknown types)
                                  → ``"[Invalid Object]"``

    NEVER raises.
    """
    return _RENDERERS[classify_config_value(value)](value)
