"""Structured logging utilities for InputGuard.

This module provides structured logging using structlog. Every rejection made
by a validator is reported through ``log_rejection()``, the diagnostic sink
operators use for abuse monitoring.
"""

import logging
import sys
import time
from typing import Any

import structlog
from structlog.types import EventDict, Processor


def add_timestamp(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add epoch timestamp to log entries."""
    event_dict["timestamp"] = time.time()
    return event_dict


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = True
) -> None:
    """Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON format. If False, use console format.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_timestamp,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        # Pretty console output for development
        processors.extend([
            structlog.dev.ConsoleRenderer(colors=True),
        ])

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = "inputguard") -> structlog.stdlib.BoundLogger:
    """Get a configured logger instance.

    Args:
        name: Logger name (typically module name)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


_sink = get_logger("inputguard.rejections")


def log_rejection(component: str, reason: str, **fields: Any) -> None:
    """Report a validator rejection to the diagnostic sink at WARNING level.

    Best-effort: a failing sink never changes the outcome of the validation
    call that reported it, so any exception raised while logging is dropped.

    Args:
        component: Validator that rejected the value (e.g. ``"webhook_url"``).
        reason:    Short human-readable rejection reason.
        **fields:  Extra key/value context. Never pass the raw rejected value
                   when it may carry credentials (e.g. a full URL).
    """
    try:
        _sink.warning(reason, component=component, **fields)
    except Exception:  # noqa: BLE001
        pass  # diagnostics never fail a validation


# Initialize logging with sensible defaults
# This will be reconfigured by main.py based on environment
configure_logging()
