"""How a browser URL parser reads a user-supplied URL before parsing it.

WHATWG URL parsing removes tab/LF/CR anywhere in the input and treats ``\\``
as ``/`` for http(s) URLs. ``urllib.parse`` does neither, so host checks run
on ``browser_view(url)`` to judge the host a browser or fetch client would
actually contact: ``http://127.0.0.1\\@evil.com/`` goes to 127.0.0.1.
"""

from __future__ import annotations

_URL_TRANSLATION = str.maketrans({"\t": None, "\n": None, "\r": None, "\\": "/"})


def browser_view(url: str) -> str:
    """Return ``url`` stripped, with tab/LF/CR removed and ``\\`` read as ``/``."""
    return url.strip().translate(_URL_TRANSLATION)
