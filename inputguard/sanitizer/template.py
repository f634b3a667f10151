"""Template Variable Validator — allow-list check for ``{{name}}`` references.

The validator only reads variable names. It never renders or evaluates a
template; whoever substitutes real values must still treat them as data,
not markup.
"""

from __future__ import annotations

from inputguard.constants import ALLOWED_TEMPLATE_VARIABLES
from inputguard.models.result import TemplateValidation
from inputguard.sanitizer.definitions import TEMPLATE_VARIABLE_PATTERN
from inputguard.utils.logger import log_rejection


def extract_template_variables(template: str) -> list[str]:
    """Return every ``{{ ... }}`` reference in ``template``, trimmed, in order."""
    if not template:
        return []
    return [m.group(1).strip() for m in TEMPLATE_VARIABLE_PATTERN.pattern.finditer(template)]


def validate_template_variables(template: str) -> TemplateValidation:
    """Check that ``template`` only references allow-listed variables.

    Examples:
        ``'Event: {{eventType}} for agent {{agentId}}'`` → valid, []
        ``'{{malicious}} payload'``                      → invalid, ['malicious']
        ``'No variables here'``                          → valid, []

    Invalid names are returned verbatim (not sanitized) so the form can tell
    the author exactly which reference to fix. Runs in linear time (RE2).
    """
    invalid_vars = [
        name for name in extract_template_variables(template)
        if name not in ALLOWED_TEMPLATE_VARIABLES
    ]
    if invalid_vars:
        log_rejection("template", "Template references disallowed variables", count=len(invalid_vars))
    return TemplateValidation(is_valid=not invalid_vars, invalid_vars=invalid_vars)
