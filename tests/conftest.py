"""Root test configuration for InputGuard.

Clears the INPUTGUARD_* environment overrides for the whole suite so a
developer's shell cannot change the policy under test, and resets the
shared slowapi limiter between tests.
"""

import pytest


@pytest.fixture(autouse=True)
def clear_inputguard_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove INPUTGUARD_ENV / INPUTGUARD_PORT / INPUTGUARD_CONFIG for every test.

    Tests that exercise the overrides set them again with their own monkeypatch.
    """
    for name in ("INPUTGUARD_ENV", "INPUTGUARD_PORT", "INPUTGUARD_CONFIG"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_rate_limiter() -> None:
    """Reset the in-memory rate limiter storage between tests.

    Prevents test-to-test rate limit bleed where multiple tests hitting the
    same endpoint within the same minute would trigger a 429.
    """
    from inputguard.api.limiter import limiter
    try:
        # slowapi stores state in the underlying limits library storage backend
        limiter._storage.reset()
    except Exception:
        pass  # Storage may not support reset in all backends — safe to ignore
