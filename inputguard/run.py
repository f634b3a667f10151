"""Programmatic uvicorn entry point for InputGuard.

Reads host and port from the loaded config (127.0.0.1:8787 by default) and
starts uvicorn with hardened defaults:

  --limit-concurrency 100  Max 100 concurrent connections; HTTP 503 when exceeded
  --backlog 50             OS connection queue depth; limits SYN flood exposure
  --timeout-keep-alive 5   Reduces Slow Loris attack window

Usage:
    python -m inputguard.run   # reads .inputguard/config.yaml
    inputguard                 # via pyproject.toml [project.scripts]
"""

from __future__ import annotations

import uvicorn

from inputguard.config import load_config

# ─── Uvicorn hardened defaults ───────────────────────────────────────────────

# Maximum number of concurrent connections accepted by uvicorn.
UVICORN_LIMIT_CONCURRENCY: int = 100

# OS-level TCP connection backlog queue size.
UVICORN_BACKLOG: int = 50

# HTTP keep-alive timeout in seconds.
UVICORN_TIMEOUT_KEEP_ALIVE: int = 5


def main() -> None:
    """Start the InputGuard validation service.

    Raises:
        SystemExit: Propagated from load_config() on config errors.
    """
    config = load_config()

    uvicorn.run(
        "inputguard.main:app",
        host=config.server.host,
        port=config.server.port,
        limit_concurrency=UVICORN_LIMIT_CONCURRENCY,
        backlog=UVICORN_BACKLOG,
        timeout_keep_alive=UVICORN_TIMEOUT_KEEP_ALIVE,
    )


if __name__ == "__main__":
    main()
