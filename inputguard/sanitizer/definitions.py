"""Pattern definitions for the sanitizer package.

All patterns are pre-compiled at module load time using google-re2.
NO pattern compilation happens per-call or lazily.

IMPORT RULES:
  - ``import re2`` ONLY — ``import re`` is PROHIBITED in this file and any
    inputguard/sanitizer/ file. RE2 runs in time linear in the input, so an
    adversarial template or error string cannot trigger catastrophic
    backtracking.
  - CI lint gate: tests/security/test_redos_gate.py greps inputguard/sanitizer/
    for a bare ``import re``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import re2  # google-re2 — NOT stdlib re


# ---------------------------------------------------------------------------
# PatternEntry dataclass
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PatternEntry:
    """A single compiled pattern with metadata.

    Fields:
        pattern:     Pre-compiled re2 pattern object. Compiled at module load time.
        slug:        Kebab-case identifier used in diagnostics and tests.
        replacement: Text substituted for each match when the pattern is used
                     for redaction ("" removes the match).
    """
    pattern: Any           # re2._Regexp — pre-compiled at module load
    slug: str
    replacement: str = ""


# ===========================================================================
# TEMPLATE VARIABLES
# ===========================================================================

# {{ name }}: inner text may not contain "}" so braces never nest and the
# match is the shortest possible one.
TEMPLATE_VARIABLE_PATTERN = PatternEntry(
    pattern=re2.compile(r'\{\{([^}]+)\}\}'),
    slug="template-variable",
)


# ===========================================================================
# ERROR MESSAGE REDACTION
# Applied in order to the FIRST line of an exception message.
# ===========================================================================

ERROR_REDACTION_PATTERNS: list[PatternEntry] = [
    # "... at handler (/srv/app/x.py:10:2)": stack frame suffix to end of line
    PatternEntry(
        pattern=re2.compile(r'\bat\s.*$'),
        slug="stack-frame-suffix",
    ),
    # /absolute/or/relative/dirs/: everything between the first and last slash
    PatternEntry(
        pattern=re2.compile(r'/.*/'),
        slug="path-segments",
    ),
    # (file.ts:123:45)
    PatternEntry(
        pattern=re2.compile(r'\(.*:\d+:\d+\)'),
        slug="parenthesized-position",
    ),
    # file.py:42 or file.ts:42:10 left behind once directories are gone
    PatternEntry(
        pattern=re2.compile(r'[\w.-]+\.\w+:\d+(?::\d+)?'),
        slug="file-position",
    ),
    PatternEntry(
        pattern=re2.compile(r'\s+'),
        slug="whitespace-run",
        replacement=" ",
    ),
]


# ===========================================================================
# HOSTNAMES
# ===========================================================================

# Dotted-quad IPv4 literal. \d is ASCII-only under RE2.
IPV4_DOTTED_QUAD = PatternEntry(
    pattern=re2.compile(r'^(\d{1,3})\.(\d{1,3})\.(\d{1,3})\.(\d{1,3})$'),
    slug="ipv4-dotted-quad",
)

# Code points a browser URL parser refuses inside a (non-IPv6) host.
FORBIDDEN_HOST_CHARS = PatternEntry(
    pattern=re2.compile(r'[\x00-\x20#%/:<>?@\[\\\]^|]'),
    slug="forbidden-host-char",
)


ALL_PATTERNS: list[PatternEntry] = [
    TEMPLATE_VARIABLE_PATTERN,
    *ERROR_REDACTION_PATTERNS,
    IPV4_DOTTED_QUAD,
    FORBIDDEN_HOST_CHARS,
]
