"""Error Message Redactor — strips stack traces and file paths before display.

INVARIANT: no file path, line/column position, or stack frame from an
exception message reaches the caller. The first line of the message is kept
otherwise verbatim and still passes through ``sanitize_html()``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from inputguard.constants import GENERIC_ERROR_MESSAGE
from inputguard.sanitizer.definitions import ERROR_REDACTION_PATTERNS
from inputguard.sanitizer.html import sanitize_html


class ErrorShape(str, Enum):
    ABSENT = "absent"
    EXCEPTION = "exception"
    TEXT = "text"
    OTHER = "other"


def classify_error(error: Any) -> ErrorShape:
    if error is None or (isinstance(error, str) and not error):
        return ErrorShape.ABSENT
    if isinstance(error, BaseException):
        return ErrorShape.EXCEPTION
    if isinstance(error, str):
        return ErrorShape.TEXT
    return ErrorShape.OTHER


def redact_message(message: str) -> str:
    """Keep the first line of ``message`` and strip frames, paths and positions."""
    first_line = message.split("\n", 1)[0]
    for entry in ERROR_REDACTION_PATTERNS:
        first_line = entry.pattern.sub(entry.replacement, first_line)
    return first_line.strip()


def sanitize_error_message(error: Any) -> str:
    """Return a message safe to show the user for ``error``.

    - exception → first line of ``str(error)``, redacted, then sanitize_html();
                  a message with nothing left after redaction → generic message
    - non-empty str → sanitize_html(error)
    - None, ``""``, anything else → ``"An unexpected error occurred"``

    Example:
        ``Exception("Failed at /app/src/lib/api.ts:42:10")`` → ``"Failed"``
    """
    shape = classify_error(error)

    if shape is ErrorShape.EXCEPTION:
        cleaned = sanitize_html(redact_message(str(error)))
        return cleaned or GENERIC_ERROR_MESSAGE
    if shape is ErrorShape.TEXT:
        return sanitize_html(error)
    return GENERIC_ERROR_MESSAGE
