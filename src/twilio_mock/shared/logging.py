"""
Structured JSON logging configuration.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

# Configure log level from environment
LOG_LEVEL = os.getenv("TWILIO_MOCK_LOG_LEVEL", "INFO").upper()


class StructuredFormatter(logging.Formatter):
    """JSON-like structured log formatter."""

    _RESERVED = {
        # standard LogRecord attributes
        "name", "msg", "args", "levelname", "levelno", "pathname", "filename",
        "module", "exc_info", "exc_text", "stack_info", "lineno", "funcName",
        "created", "msecs", "relativeCreated", "thread", "threadName",
        "processName", "process", "message", "taskName",
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # 1) Custom extra_data (from log_with_context)
        if hasattr(record, "extra_data") and isinstance(record.extra_data, dict):  # type: ignore[attr-defined]
            log_data.update(record.extra_data)  # type: ignore[attr-defined]

        # 2) Standard logging extra=... fields
        for k, v in record.__dict__.items():
            if k in self._RESERVED or k == "extra_data":
                continue
            if k in log_data:
                log_data[f"extra_{k}"] = v
            else:
                log_data[k] = v

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def mask(s: str, keep: int = 6) -> str:
    """Hide all but the first characters of a credential."""
    if not s:
        return ""
    if len(s) <= keep:
        return "*" * len(s)
    return f"{s[:keep]}***"


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a twilio-mock module.

    Args:
        name: Logger name (typically __name__).

    Returns:
        Logger instance; level and handlers are inherited from the
        ``twilio_mock`` package logger (see ``setup_logging``).
    """
    return logging.getLogger(name)


def setup_logging(level: str | None = None, stream: Any = None) -> logging.Handler:
    """Attach a structured JSON handler to the package logger.

    Only the ``twilio_mock`` logger is configured so the host test suite's
    logging setup is left alone.
    """
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(StructuredFormatter())

    package_logger = logging.getLogger("twilio_mock")
    package_logger.setLevel((level or LOG_LEVEL).upper())
    package_logger.handlers = [handler]

    # respx and httpx log every intercepted request at DEBUG
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    return handler


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **extra: Any,
) -> None:
    """Log a message with extra context data."""
    record = logger.makeRecord(
        logger.name,
        level,
        "",
        0,
        message,
        (),
        None,
    )
    record.extra_data = extra  # type: ignore[attr-defined]
    logger.handle(record)
