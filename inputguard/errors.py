"""Application error model for InputGuard.

Turns any exception (or non-exception value) raised around a validation or
an outbound REST call into an ``AppError`` with a stable ``ErrorCode``, and
maps each code to a fixed user-facing message. Raw exception text is never
shown to a user without passing through ``sanitize_error_message()``.

Public API:
  - ErrorCode                    — closed set of application error codes
  - AppError                     — exception carrying code / status / details
  - normalize_error()            — any value → AppError
  - get_user_friendly_message()  — fixed message per code
  - handle_error()               — normalize + log + friendly message
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

import httpx

from inputguard.constants import GENERIC_ERROR_MESSAGE
from inputguard.sanitizer.redaction import sanitize_error_message
from inputguard.utils.logger import get_logger

logger = get_logger(__name__)


class ErrorCode(str, Enum):
    # Authentication & authorization
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"

    # Validation
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    DUPLICATE_ENTRY = "DUPLICATE_ENTRY"

    # Resources
    NOT_FOUND = "NOT_FOUND"
    RESOURCE_CONFLICT = "RESOURCE_CONFLICT"

    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    TIMEOUT = "TIMEOUT"

    # Network
    NETWORK_ERROR = "NETWORK_ERROR"
    REQUEST_FAILED = "REQUEST_FAILED"

    # Business rules
    INSUFFICIENT_CREDITS = "INSUFFICIENT_CREDITS"
    TRIGGER_LIMIT_EXCEEDED = "TRIGGER_LIMIT_EXCEEDED"
    INVALID_WEBHOOK_URL = "INVALID_WEBHOOK_URL"


_USER_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.UNAUTHORIZED: "Please log in to continue",
    ErrorCode.FORBIDDEN: "You don't have permission to perform this action",
    ErrorCode.TOKEN_EXPIRED: "Your session has expired. Please log in again",
    ErrorCode.INVALID_CREDENTIALS: "Invalid email or password",
    ErrorCode.VALIDATION_ERROR: "Please check your input and try again",
    ErrorCode.INVALID_INPUT: "The information provided is invalid",
    ErrorCode.DUPLICATE_ENTRY: "This item already exists",
    ErrorCode.NOT_FOUND: "The requested resource was not found",
    ErrorCode.RESOURCE_CONFLICT: "This operation conflicts with existing data",
    ErrorCode.RATE_LIMIT_EXCEEDED: "Too many requests. Please try again later",
    ErrorCode.INTERNAL_ERROR: "Something went wrong. Please try again",
    ErrorCode.SERVICE_UNAVAILABLE: "Service temporarily unavailable. Please try again later",
    ErrorCode.TIMEOUT: "Request timed out. Please try again",
    ErrorCode.NETWORK_ERROR: "Network error. Please check your connection",
    ErrorCode.REQUEST_FAILED: "Request failed. Please try again",
    ErrorCode.INSUFFICIENT_CREDITS: "Insufficient credits. Please purchase more credits",
    ErrorCode.TRIGGER_LIMIT_EXCEEDED: "You have reached the maximum number of triggers",
    ErrorCode.INVALID_WEBHOOK_URL: "Invalid webhook URL provided",
}

_RETRYABLE_CODES: frozenset[ErrorCode] = frozenset(
    {ErrorCode.NETWORK_ERROR, ErrorCode.TIMEOUT, ErrorCode.SERVICE_UNAVAILABLE}
)


class AppError(Exception):
    """Application error with a stable code and optional HTTP status."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        status: Optional[int] = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status
        self.details = details

    @property
    def user_message(self) -> str:
        """``message`` redacted and escaped for display."""
        # Wrapped as an exception so paths and stack frames are redacted too.
        return sanitize_error_message(Exception(self.message))

    @property
    def is_retryable(self) -> bool:
        return self.code in _RETRYABLE_CODES or (self.status is not None and self.status >= 500)

    @property
    def is_client_error(self) -> bool:
        return self.status is not None and 400 <= self.status < 500

    def to_dict(self) -> dict[str, Any]:
        """Structured form for logging. Never sent to a user as-is."""
        return {
            "name": "AppError",
            "code": self.code.value,
            "message": self.message,
            "status": self.status,
            "details": self.details,
        }


# ─── Normalization ────────────────────────────────────────────────────────────


def _code_for_status(status: int) -> ErrorCode:
    if status == 401:
        return ErrorCode.UNAUTHORIZED
    if status == 403:
        return ErrorCode.FORBIDDEN
    if status == 404:
        return ErrorCode.NOT_FOUND
    if status == 429:
        return ErrorCode.RATE_LIMIT_EXCEEDED
    if status >= 500:
        return ErrorCode.INTERNAL_ERROR
    return ErrorCode.REQUEST_FAILED


def normalize_error(error: Any) -> AppError:
    """Convert any raised value into an ``AppError``.

    - AppError                   → returned unchanged
    - httpx.HTTPStatusError      → code from the response status
    - httpx.TimeoutException     → TIMEOUT
    - httpx.TransportError       → NETWORK_ERROR
    - other exception            → TIMEOUT / NETWORK_ERROR when the message
                                   mentions it, otherwise INTERNAL_ERROR
    - anything else              → INTERNAL_ERROR with the generic message
    """
    if isinstance(error, AppError):
        return error

    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        return AppError(_code_for_status(status), str(error), status)

    if isinstance(error, httpx.TimeoutException):
        return AppError(ErrorCode.TIMEOUT, str(error))

    if isinstance(error, httpx.TransportError):
        return AppError(ErrorCode.NETWORK_ERROR, str(error))

    if isinstance(error, Exception):
        message = str(error)
        lowered = message.lower()
        if "timeout" in lowered or "timed out" in lowered:
            return AppError(ErrorCode.TIMEOUT, message)
        if "network" in lowered:
            return AppError(ErrorCode.NETWORK_ERROR, message)
        return AppError(ErrorCode.INTERNAL_ERROR, message)

    return AppError(ErrorCode.INTERNAL_ERROR, GENERIC_ERROR_MESSAGE)


def get_user_friendly_message(error: AppError) -> str:
    return _USER_MESSAGES.get(error.code) or error.user_message


def handle_error(
    error: Any,
    *,
    log: bool = True,
    context: Optional[dict[str, Any]] = None,
) -> str:
    """Normalize ``error``, optionally log it, and return the message to show.

    The log entry carries the code and status; the raw message is logged at
    DEBUG only, since it may contain paths or upstream response text.
    """
    app_error = normalize_error(error)

    if log:
        logger.error(
            "Application error",
            code=app_error.code.value,
            status=app_error.status,
            **(context or {}),
        )
        logger.debug("Application error detail", **app_error.to_dict())

    return get_user_friendly_message(app_error)
