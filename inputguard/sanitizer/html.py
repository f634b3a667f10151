"""Text Sanitizer — strips all markup and yields plain text.

``sanitize_html()`` is the final step of every renderer in this package
(config values, error messages), so it has to hold up against nested and
malformed markup, not just well-formed tags.

Two passes:
  1. BeautifulSoup (``html.parser``) removes elements whose *content* must not
     survive either (script, style, template, svg, ...). Stripping only the
     tags would otherwise leave ``alert(1)`` behind as visible text.
  2. ``bleach.clean`` with no allowed tags or attributes unwraps every
     remaining tag, drops comments, and serializes text with ``&``, ``<`` and
     ``>`` entity-escaped. The output therefore never contains a raw ``<`` or
     ``>`` and encoded entities cannot re-assemble into markup.
"""

from __future__ import annotations

import warnings

import bleach
from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning

from inputguard.constants import FORBIDDEN_CONTENT_TAGS

# bs4 warns when plain text such as "https://example.com" looks like a URL or
# file name. Plain text is valid input here.
warnings.filterwarnings("ignore", category=MarkupResemblesLocatorWarning)


def _drop_forbidden_content(dirty: str) -> str:
    """Remove FORBIDDEN_CONTENT_TAGS elements and everything inside them."""
    soup = BeautifulSoup(dirty, "html.parser")
    names = list(FORBIDDEN_CONTENT_TAGS)
    # Re-search after each removal: decomposing an outer element also
    # destroys any forbidden element nested inside it.
    tag = soup.find(names)
    while tag is not None:
        tag.decompose()
        tag = soup.find(names)
    return str(soup)


def sanitize_html(dirty: str) -> str:
    """Remove every tag and attribute from ``dirty`` and return its text.

    NEVER raises. Empty or falsy input returns ``""``.

    Examples:
        ``<script>alert(1)</script>Hello`` → ``Hello``
        ``<b>Bold</b> text``                → ``Bold text``
        ``<img src=x onerror="alert(1)">``  → ``""``

    Args:
        dirty: Untrusted text that may contain markup.

    Returns:
        Plain text, entity-escaped, safe to insert into a page as text.
    """
    if not dirty:
        return ""

    # No "<" means no tag can open, so skip the parse.
    if "<" in dirty:
        dirty = _drop_forbidden_content(dirty)

    return bleach.clean(
        dirty,
        tags=set(),
        attributes={},
        strip=True,
        strip_comments=True,
    )
