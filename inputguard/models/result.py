"""Classification outcomes shared by the validators.

Nothing here survives past a single validation call:

  - ``Accepted`` / ``Rejected`` — the two arms of ``SanitizationResult``.
  - ``HostKind`` / ``HostnameClassification`` — webhook host classification.
  - ``TemplateValidation`` — outcome of the template variable check.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Optional, TypeVar, Union

T = TypeVar("T")


class RejectionKind(str, Enum):
    """Why a value was refused."""

    SYNTAX_INVALID = "syntax_invalid"    # malformed JSON / URL / empty input
    POLICY_REJECTED = "policy_rejected"  # well-formed but disallowed


@dataclass(frozen=True)
class Accepted(Generic[T]):
    """The value passed validation. ``value`` is the normalized, safe form."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Rejected:
    """The value failed validation and must not be forwarded anywhere.

    ``reason`` is a short, fixed description safe to show next to the form
    field. It never echoes the rejected value.
    """

    kind: RejectionKind
    reason: str

    @property
    def ok(self) -> bool:
        return False


SanitizationResult = Union[Accepted[T], Rejected]


class HostKind(str, Enum):
    """Lexical classification of a webhook hostname."""

    PUBLIC = "public"
    LOOPBACK = "loopback"
    PRIVATE_IPV4 = "private_ipv4"
    PRIVATE_IPV6 = "private_ipv6"
    LINK_LOCAL_METADATA = "link_local_metadata"
    UNPARSEABLE = "unparseable"


@dataclass(frozen=True)
class HostnameClassification:
    """Result of ``classify_hostname()``.

    Fields:
        kind:  Which class the host falls into.
        range: The matched range or literal (``"10.0.0.0/8"``, ``"localhost"``,
               ``"fc00::/7"``, ...). None for PUBLIC and UNPARSEABLE.
    """

    kind: HostKind
    range: Optional[str] = None

    @property
    def is_blocked(self) -> bool:
        return self.kind is not HostKind.PUBLIC


@dataclass(frozen=True)
class TemplateValidation:
    """Outcome of ``validate_template_variables()``.

    ``invalid_vars`` holds the offending names verbatim, in template order,
    duplicates included, so the author sees exactly what to fix.
    """

    is_valid: bool
    invalid_vars: list[str] = field(default_factory=list)
