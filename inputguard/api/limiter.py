"""Shared rate limiter for the InputGuard validation API.

Uses slowapi (Starlette-compatible rate limiting) keyed on the client
address. The validators themselves are cheap; the cap exists so the service
cannot be used as an oracle for bulk-probing the webhook and redirect
policies.

The Limiter instance is created here and shared between:
  - inputguard/api/validation.py  (route decorators)
  - inputguard/main.py            (app.state.limiter + SlowAPIMiddleware registration)
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

# Module-level limiter — imported by main.py and api/validation.py
limiter = Limiter(key_func=get_remote_address)

# Default rate limit for every /api/validate endpoint
VALIDATION_RATE_LIMIT = "120/minute"
