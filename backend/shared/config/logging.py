"""
Structured logging for the QC backend.

Loggers returned by get_logger() accept keyword context on every call; the
context is rendered as a JSON "data" object in production and as
``key=value`` pairs in development:

    logger.info("Entity created", entity="customer", key="C0001")
    logger.error("Failed to update Part", entity="part", exc_info=True)
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from shared.config.settings import settings

LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
RESET = "\033[0m"
DIM = "\033[2m"

# Third-party loggers and the level they are held at
QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "uvicorn.error": logging.INFO,
    "sqlalchemy.engine": logging.WARNING,
    "aiosqlite": logging.WARNING,
    "asyncio": logging.WARNING,
}


def _request_id(record: logging.LogRecord) -> str | None:
    request_id = getattr(record, "request_id", None)
    return request_id if request_id and request_id != "-" else None


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = _request_id(record)
        if request_id:
            entry["request_id"] = request_id
        data = getattr(record, "extra_data", None)
        if data:
            entry["data"] = data
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class DevelopmentFormatter(logging.Formatter):
    """Single coloured line per record, context appended in parentheses."""

    def format(self, record: logging.LogRecord) -> str:
        color = LEVEL_COLORS.get(record.levelname, RESET)
        parts = [f"{color}[{datetime.now():%H:%M:%S}] {record.levelname:8}{RESET}"]
        request_id = _request_id(record)
        if request_id:
            parts.append(f"{DIM}[{request_id[:8]}]{RESET}")
        parts.append(f"{record.name}: {record.getMessage()}")

        line = " ".join(parts)
        data = getattr(record, "extra_data", None)
        if data:
            line += " (" + " | ".join(f"{k}={v}" for k, v in data.items()) + ")"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class StructuredLogger(logging.Logger):
    """Logger whose keyword arguments become the record's ``extra_data``."""

    def _log_with_data(self, level: int, msg: str, args: tuple, exc_info: Any = None, **context: Any) -> None:
        if not self.isEnabledFor(level):
            return
        self._log(level, msg, args, exc_info=exc_info, extra={"extra_data": context or None})

    def debug(self, msg: str, *args: Any, **context: Any) -> None:
        self._log_with_data(logging.DEBUG, msg, args, **context)

    def info(self, msg: str, *args: Any, **context: Any) -> None:
        self._log_with_data(logging.INFO, msg, args, **context)

    def warning(self, msg: str, *args: Any, **context: Any) -> None:
        self._log_with_data(logging.WARNING, msg, args, **context)

    def error(self, msg: str, *args: Any, **context: Any) -> None:
        self._log_with_data(logging.ERROR, msg, args, **context)

    def critical(self, msg: str, *args: Any, **context: Any) -> None:
        self._log_with_data(logging.CRITICAL, msg, args, **context)


logging.setLoggerClass(StructuredLogger)


def setup_logging() -> None:
    """
    Install the stdout handler on the root logger.
    Call once at application startup; calling again replaces the handler.
    """
    from shared.infrastructure.correlation import CorrelationIdFilter

    level = logging.DEBUG if settings.debug else logging.INFO
    formatter = StructuredFormatter() if settings.environment == "production" else DevelopmentFormatter()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)


def get_logger(name: str) -> StructuredLogger:
    """Logger for a module or entity (``qc_api.entities.<name>``)."""
    return logging.getLogger(name)  # type: ignore


qc_api_logger = get_logger("qc_api")
