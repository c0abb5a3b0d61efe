"""
Structured logging for the URL redirector.

Provides:
- setup_logging(): configure stdlib logging + structlog from LoggingSettings
- get_logger(): get a configured logger instance
- should_sample(): decide whether a high-frequency event gets logged
- hash_ip(): hash IP addresses for privacy in production

Production uses JSON output, development a pretty console renderer.
"""

from __future__ import annotations

import hashlib
import logging
import random
import sys
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

import structlog
from structlog.stdlib import BoundLogger
from structlog.types import EventDict, Processor

if TYPE_CHECKING:
    from config import AppSettings

# Sampling rates for high-frequency events; overwritten by setup_logging()
SAMPLING_RATES: dict[str, float] = {
    "url_redirect": 0.05,
    "stats_query": 0.20,
}

# Sensitive fields to redact from logs
REDACTED_FIELDS = {
    "password",
    "token",
    "api_key",
    "authorization",
    "cookie",
    "secret",
    "mongodb_uri",
    "redis_uri",
}

_hash_ips = False


def add_timestamp(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add ISO format timestamp to event dict."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def redact_sensitive_fields(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Redact sensitive fields from logs."""
    for key in list(event_dict.keys()):
        if key in ("level", "event", "timestamp", "logger"):
            continue
        lowered = key.lower()
        if lowered in REDACTED_FIELDS or any(
            sensitive in lowered for sensitive in ("password", "token", "secret")
        ):
            event_dict[key] = "***REDACTED***"
    return event_dict


def configure_structlog(log_format: str) -> None:
    """
    Configure structlog with appropriate processors for the environment.

    json: one JSON object per line, for log shipping
    console: pretty, colored output for development
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_timestamp,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        redact_sensitive_fields,
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            pad_event=15,
            sort_keys=False,
        )

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_stdlib_logging(log_level: str) -> None:
    """Route stdlib logging to stdout and quiet noisy third-party loggers."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)

    # Silence pymongo debug logs (connection pool, server monitoring, etc.)
    logging.getLogger("pymongo").setLevel(logging.WARNING)


def setup_logging(settings: "AppSettings") -> None:
    """
    Initialize logging for the application.

    Called once from create_app(), before anything else logs.
    """
    global _hash_ips

    log_settings = settings.logging
    log_format = log_settings.log_format
    if settings.is_production and log_format == "console":
        log_format = "json"

    configure_stdlib_logging(log_settings.log_level)
    configure_structlog(log_format)

    SAMPLING_RATES["url_redirect"] = log_settings.sample_rate_redirect
    SAMPLING_RATES["stats_query"] = log_settings.sample_rate_stats
    _hash_ips = settings.is_production

    get_logger(__name__).info(
        "logging_initialized",
        env=settings.env,
        log_level=log_settings.log_level,
        log_format=log_format,
        sentry_enabled=bool(settings.sentry.sentry_dsn),
    )


def get_logger(name: str) -> BoundLogger:
    """
    Get a configured logger instance.

    Example:
        >>> log = get_logger(__name__)
        >>> log.info("url_shortened", short_code="aB3xYz")
    """
    return structlog.get_logger(name)


def should_sample(event_type: str) -> bool:
    """
    Determine if an event should be logged based on its sampling rate.

    Events without a configured rate are always logged.
    """
    sample_rate = SAMPLING_RATES.get(event_type, 1.0)

    if sample_rate >= 1.0:
        return True
    if sample_rate <= 0.0:
        return False

    return random.random() < sample_rate


def hash_ip(ip_address: Optional[str]) -> Optional[str]:
    """
    Hash an IP address for privacy in production.

    In production: SHA-256 hash (first 16 chars).
    Elsewhere: the original IP for easier debugging.
    """
    if not ip_address:
        return ip_address
    if _hash_ips:
        return hashlib.sha256(ip_address.encode()).hexdigest()[:16]
    return ip_address


__all__ = [
    "SAMPLING_RATES",
    "get_logger",
    "hash_ip",
    "setup_logging",
    "should_sample",
]
