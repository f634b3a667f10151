"""Health endpoint for InputGuard.

Implements:
  GET /health — 503 before ready, 200 after

Shares the ``app.state.ready`` gate established by the lifespan in
inputguard/main.py. Polled by container health probes and load balancers.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request

from inputguard import __version__
from inputguard.config import Config

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    """Primary health check endpoint.

    Response body (200):
        {
          "status": "ok",
          "service": "inputguard",
          "version": "1.0.0",
          "environment": "production" | "development" | "test"
        }

    Response body (503):
        {"error": {"status": "starting", "message": "InputGuard is starting up..."}}
    """
    if not getattr(request.app.state, "ready", False):
        raise HTTPException(
            status_code=503,
            detail={
                "status": "starting",
                "message": "InputGuard is starting up...",
            },
        )

    config: Config = request.app.state.config

    return {
        "status": "ok",
        "service": "inputguard",
        "version": __version__,
        "environment": config.environment,
    }
