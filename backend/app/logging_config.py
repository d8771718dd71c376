"""Structured logging configuration using structlog.

Provides JSON logging in production and colorized console output in development.
Session identifiers and credentials are automatically filtered; researcher
ids are replaced with a stable digest.
"""

from __future__ import annotations

import hashlib
import logging
import sys
from typing import Any

import structlog

from app.config import Environment, get_settings


def _filter_sensitive_data(
    _logger: Any, _method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Remove sensitive fields from log events."""
    sensitive_keys = {
        "password",
        "secret",
        "token",
        "authorization",
        "cookie",
        "session_id",
    }
    for key in list(event_dict.keys()):
        if any(s in key.lower() for s in sensitive_keys):
            event_dict[key] = "[REDACTED]"
    return event_dict


def _filter_pii(
    _logger: Any, _method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Remove personal data from log events."""
    pii_keys = {"email", "full_name", "student_name", "ip_address"}
    for key in list(event_dict.keys()):
        if key in pii_keys:
            event_dict[key] = "[PII_REDACTED]"
    return event_dict


def _pseudonymize_researcher(
    _logger: Any, _method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Replace researcher ids with a stable short digest.

    Log lines for one researcher stay correlatable without exposing the
    identity-provider id.
    """
    researcher_id = event_dict.get("researcher_id")
    if researcher_id is not None:
        digest = hashlib.sha256(str(researcher_id).encode()).hexdigest()[:12]
        event_dict["researcher_id"] = f"r_{digest}"
    return event_dict


def setup_logging() -> None:
    """Configure structured logging for the application."""
    settings = get_settings()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        _filter_sensitive_data,
        _filter_pii,
        _pseudonymize_researcher,
    ]

    if settings.environment == Environment.PRODUCTION:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, settings.log_level.upper()))

    # Suppress noisy loggers
    for logger_name in ("uvicorn.access", "sqlalchemy.engine", "aiosqlite"):
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
