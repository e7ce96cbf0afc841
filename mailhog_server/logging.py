"""
Structured logging configuration for the MailHog server.

Provides consistent logging format across all modules with:
- JSON structured output for production
- Human-readable output for development
- Automatic redaction of sensitive fields (relay credentials)
"""

import logging
import sys
from datetime import UTC, datetime
from typing import Any

# Fields that should be redacted in logs
REDACTED_FIELDS = {
    "password",
    "secret",
    "token",
    "authorization",
    "auth",
    "credential",
}


def redact_sensitive(data: Any, depth: int = 0) -> Any:
    """
    Recursively redact sensitive fields from data structures.

    Args:
        data: Data to redact (dict, list, or scalar)
        depth: Current recursion depth (prevents infinite recursion)

    Returns:
        Data with sensitive fields replaced with "[REDACTED]"
    """
    if depth > 10:
        return data

    if isinstance(data, dict):
        return {
            k: (
                "[REDACTED]"
                if any(redact in str(k).lower() for redact in REDACTED_FIELDS)
                else redact_sensitive(v, depth + 1)
            )
            for k, v in data.items()
        }
    elif isinstance(data, list):
        return [redact_sensitive(item, depth + 1) for item in data]
    return data


class MailHogFormatter(logging.Formatter):
    """
    Formatter adding an ISO timestamp to every record.
    """

    def format(self, record: logging.LogRecord) -> str:
        record.timestamp = datetime.now(UTC).isoformat()
        return super().format(record)


def setup_logging(level: str = "INFO", json_output: bool = False) -> logging.Logger:
    """
    Configure logging for the MailHog server.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON format (for production)

    Returns:
        Configured root logger
    """
    root = logging.getLogger()
    root.handlers.clear()

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root.setLevel(numeric_level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)

    if json_output:
        fmt = (
            '{"timestamp": "%(timestamp)s", "level": "%(levelname)s", '
            '"module": "%(name)s", "message": "%(message)s"}'
        )
    else:
        fmt = "%(timestamp)s | %(levelname)-8s | %(name)s | %(message)s"

    handler.setFormatter(MailHogFormatter(fmt))
    root.addHandler(handler)

    # Suppress noisy third-party loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    return root


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a specific module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
