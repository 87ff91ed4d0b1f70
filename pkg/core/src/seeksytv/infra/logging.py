"""
Logging configuration for SeeksyTV.

This module configures structlog for JSON logging across the application.
"""

import logging
import re
from typing import Any

import structlog

from .settings import settings

# Keys whose values are never written to the log
SECRET_KEYS = (
    "apikey",
    "api_key",
    "anon_key",
    "authorization",
    "token",
    "password",
    "secret",
)

SECRET_PATTERNS = (
    r"://[^:/]+:[^@]+@",  # URLs with credentials
    r"apikey=[^&\s]+",
    r"token=[^&\s]+",
    r"Bearer [^\s\"']+",
)


def _redact_string(value: str) -> str:
    for pattern in SECRET_PATTERNS:
        value = re.sub(pattern, _mask_match, value)
    return value


def _mask_match(match: re.Match[str]) -> str:
    text = match.group(0)
    if text.startswith("://"):
        return "://***@"
    if text.startswith("Bearer "):
        return "Bearer ***"
    return text.split("=")[0] + "=***"


def redact_secrets(_, __, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Redact sensitive information from log events."""

    def redact_value(value: Any) -> Any:
        if isinstance(value, str):
            return _redact_string(value)
        elif isinstance(value, dict):
            return {k: redact_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [redact_value(item) for item in value]
        return value

    for key in list(event_dict.keys()):
        if any(secret in key.lower() for secret in SECRET_KEYS):
            event_dict[key] = "***REDACTED***"
        else:
            event_dict[key] = redact_value(event_dict[key])

    return event_dict


def configure_logging(level: str | None = None) -> None:
    """Configure structlog for JSON logging."""
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, (level or settings.log_level).upper(), logging.INFO),
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            redact_secrets,  # Redact secrets before rendering
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a configured logger with service context."""
    return structlog.get_logger(name, service="seeksytv", env=settings.env)
