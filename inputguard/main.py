"""InputGuard FastAPI application factory + lifespan lifecycle.

This module implements:
  - create_app()  — testable application factory
  - lifespan      — @asynccontextmanager startup/shutdown sequence
  - /health       — delegated to inputguard/health.py
  - /api/validate — delegated to inputguard/api/validation.py
  - /             — service discovery root (inline)
  - app = create_app() — module-level instance for uvicorn

Config is loaded once in create_app() (CORS origins are needed to build the
middleware stack) and published on ``app.state.config``. Every request-time
consumer, the production flag included, reads it from there.

Startup sequence:
  1. app.state.config already set by create_app()
  2. app.state.ready = True → log "InputGuard ready"

Shutdown:
  app.state.ready = False
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRouter

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from inputguard import __version__
from inputguard.api.limiter import limiter
from inputguard.api.validation import router as validation_router
from inputguard.config import Config, load_config
from inputguard.errors import get_user_friendly_message, normalize_error
from inputguard.health import router as health_router
from inputguard.http.middleware import BodySizeLimitMiddleware, SecurityHeadersMiddleware
from inputguard.utils.logger import configure_logging, get_logger

# ─── Logging Setup ────────────────────────────────────────────────────────────
# Configure logging at module import time (before any other imports that may log).
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO" if not DEBUG else "DEBUG")
JSON_LOGS = os.getenv("JSON_LOGS", "true").lower() == "true"

configure_logging(log_level=LOG_LEVEL, json_output=JSON_LOGS)
logger = get_logger(__name__)


# ─── Root Endpoint ────────────────────────────────────────────────────────────

root_router = APIRouter(tags=["root"])


@root_router.get("/")
async def root() -> dict[str, str]:
    """Root endpoint — service identity / discovery."""
    return {
        "service": "InputGuard",
        "tagline": "Input sanitization and validation for automation config",
        "version": __version__,
        "health": "/health",
        "validate": "/api/validate",
    }


# ─── Lifespan ─────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan — startup and shutdown sequence."""
    logger.info("InputGuard starting up...")

    config: Config = app.state.config
    logger.info(
        "Validation policy",
        environment=config.environment,
        https_webhooks_only=config.is_production,
        redirect_origin=config.redirect.origin,
        redirect_allowed_domains=len(config.redirect.allowed_domains),
    )

    app.state.ready = True
    logger.info("InputGuard ready")

    yield

    logger.info("InputGuard shutting down...")
    app.state.ready = False
    logger.info("InputGuard shutdown complete")


# ─── Application Factory ──────────────────────────────────────────────────────


def create_app(config: Optional[Config] = None) -> FastAPI:
    """Create and configure the InputGuard FastAPI application.

    Call this function directly in unit tests to get an isolated app instance:
        app = create_app(Config(environment="test"))

    Args:
        config: Configuration to serve with. Loaded via load_config() when
                omitted (raises SystemExit on an invalid config file).

    Returns:
        Configured FastAPI application with lifespan, routers, and middleware.
    """
    if config is None:
        config = load_config()

    # Swagger UI / ReDoc only with DEBUG=true — they expose the full API schema.
    _debug = os.getenv("DEBUG", "false").lower() == "true"

    application = FastAPI(
        title="InputGuard",
        description="Input sanitization and validation service",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if _debug else None,
        redoc_url="/redoc" if _debug else None,
        openapi_url="/openapi.json" if _debug else None,
    )

    application.state.config = config
    # /health returns 503 until the lifespan marks the app ready.
    application.state.ready = False

    # Rate limiter — attached to app state as required by slowapi.
    application.state.limiter = limiter
    application.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # NOTE: In Starlette, the LAST-added middleware is OUTERMOST (runs first).
    application.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors.allow_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["content-type"],
    )

    # Oversized bodies are refused before any validator or JSON parse runs.
    application.add_middleware(BodySizeLimitMiddleware)

    # Outermost of our own middleware so 413 / 429 responses carry the headers too.
    application.add_middleware(SecurityHeadersMiddleware)

    # Rate limiting middleware. Must be added after state.limiter is set.
    application.add_middleware(SlowAPIMiddleware)

    application.include_router(root_router)
    application.include_router(health_router)
    application.include_router(validation_router, prefix="/api/validate")

    # Global exception handlers
    @application.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        logger.warning(
            "HTTP exception",
            status_code=exc.status_code,
            detail=exc.detail,
            path=str(request.url.path),
        )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @application.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        app_error = normalize_error(exc)
        logger.error(
            "Unhandled exception",
            code=app_error.code.value,
            error_type=type(exc).__name__,
            path=str(request.url.path),
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": app_error.code.value,
                    "message": get_user_friendly_message(app_error),
                }
            },
        )

    return application


app = create_app()
