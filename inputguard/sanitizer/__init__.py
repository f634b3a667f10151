"""InputGuard sanitizer package.

Public API:
  - sanitize_html()               — strip all markup, escape what is left
  - has_pollution()               — reserved-key detector for parsed JSON trees
  - check_json() / sanitize_json() / is_valid_json()
  - classify_hostname() / check_webhook_url() / sanitize_webhook_url()
  - sanitize_config_value()       — display text for arbitrary config values
  - validate_template_variables() — {{variable}} allow-list check
  - sanitize_error_message()      — redacted, escaped error text (redact_message() alone)
  - is_safe_redirect_url() / sanitize_redirect_url()

Every function is synchronous, performs no I/O and never raises on bad input.
"""

from __future__ import annotations

from inputguard.sanitizer.config_value import ConfigValueKind, classify_config_value, sanitize_config_value
from inputguard.sanitizer.html import sanitize_html
from inputguard.sanitizer.json_sanitizer import check_json, is_valid_json, sanitize_json
from inputguard.sanitizer.pollution import has_pollution
from inputguard.sanitizer.redaction import ErrorShape, classify_error, redact_message, sanitize_error_message
from inputguard.sanitizer.redirect import is_safe_redirect_url, sanitize_redirect_url
from inputguard.sanitizer.template import extract_template_variables, validate_template_variables
from inputguard.sanitizer.webhook import check_webhook_url, classify_hostname, sanitize_webhook_url

__all__ = [
    "ConfigValueKind",
    "ErrorShape",
    "check_json",
    "check_webhook_url",
    "classify_config_value",
    "classify_error",
    "classify_hostname",
    "extract_template_variables",
    "has_pollution",
    "is_safe_redirect_url",
    "is_valid_json",
    "redact_message",
    "sanitize_config_value",
    "sanitize_error_message",
    "sanitize_html",
    "sanitize_json",
    "sanitize_redirect_url",
    "sanitize_webhook_url",
    "validate_template_variables",
]
