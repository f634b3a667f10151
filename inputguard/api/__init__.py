"""InputGuard HTTP API package.

  - validation.py — /api/validate/* endpoints exposing the sanitizers
  - limiter.py    — shared slowapi limiter and rate-limit constants
"""
