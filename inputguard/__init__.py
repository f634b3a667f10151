"""InputGuard — input sanitization and validation for user-authored automation config.

The validators live in ``inputguard.sanitizer``; ``inputguard.main`` exposes
them over HTTP for callers that cannot import Python.
"""

__version__ = "1.0.0"
