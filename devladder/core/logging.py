"""Structured logging for devladder.

Log lines are flat ``key=value`` pairs so pipeline and readiness decisions
can be grepped by project or format. Context fields promoted to the top of
the line are listed in CONTEXT_FIELDS; anything else passed to
log_with_context rides along in ``extra_data``.
"""

import logging
import sys
from typing import Any

# Record attributes printed right after the message, in this order
CONTEXT_FIELDS = ("project_id", "format_key")


def _quote(value: Any) -> str:
    text = str(value)
    if not text or any(ch.isspace() for ch in text) or "=" in text:
        return '"' + text.replace('"', '\\"') + '"'
    return text


class StructuredFormatter(logging.Formatter):
    """key=value log formatter with promoted context fields."""

    def format(self, record: logging.LogRecord) -> str:
        fields: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "function": record.funcName,
            "message": record.getMessage(),
        }
        for name in CONTEXT_FIELDS:
            if hasattr(record, name):
                fields[name] = getattr(record, name)
        fields.update(getattr(record, "extra_data", None) or {})

        line = " ".join(f"{key}={_quote(value)}" for key, value in fields.items())
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def _resolve_level() -> int | str:
    """LOG_LEVEL wins; otherwise DEBUG in dev and INFO everywhere else."""
    try:
        from devladder.core.config import get_settings

        settings = get_settings()
    except Exception:
        # Unreadable settings fall back to INFO
        return logging.INFO
    if settings.LOG_LEVEL:
        return settings.LOG_LEVEL.upper()
    return logging.DEBUG if settings.DEVLADDER_ENV == "dev" else logging.INFO


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the structured stdout handler attached.

    The handler is attached once per logger name, so repeated calls at
    import time are safe.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
        logger.setLevel(_resolve_level())
    return logger


def log_with_context(logger: logging.Logger, level: int, msg: str, **kwargs: Any) -> None:
    """
    Log with context fields.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        msg: Log message
        **kwargs: Context fields; project_id and format_key are promoted,
                  the rest go to extra_data
    """
    extra: dict[str, Any] = {name: kwargs.pop(name) for name in CONTEXT_FIELDS if name in kwargs}
    extra["extra_data"] = kwargs
    logger.log(level, msg, extra=extra)
