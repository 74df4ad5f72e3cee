"""
Centralized logging configuration for EduShelf.

Every service component logs one line per record:
Format: 2026-01-06T14:05:52Z [source] LEVEL message

Environment Variables:
    LOG_LEVEL: "INFO" (default), "DEBUG" or "TRACE"
               - TRACE additionally logs raw store payloads

Usage:
    from shelf.logging_config import configure_logging, get_logger

    configure_logging(source="api")
    logger = get_logger(__name__)
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import UTC, datetime

# Custom TRACE level for very verbose diagnostics
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

HEALTH_PATHS = frozenset({"/health"})


class ISO8601Formatter(logging.Formatter):
    """Formatter producing ``<UTC timestamp> [source] LEVEL message``."""

    def __init__(self, source: str = "shelf"):
        self.source = source
        super().__init__()

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return f"{timestamp} [{self.source}] {record.levelname} {message}"


class HealthCheckFilter(logging.Filter):
    """Drop health check access lines unless DEBUG logging is enabled.

    Load balancers poll /health every few seconds.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno <= logging.DEBUG:
            return True
        message = record.getMessage()
        return not any(path in message and ("GET" in message or "200" in message) for path in HEALTH_PATHS)


def _level_from_env() -> int:
    log_level_env = os.getenv("LOG_LEVEL", "").upper()
    if log_level_env == "TRACE":
        return TRACE
    if log_level_env == "DEBUG":
        return logging.DEBUG
    return logging.INFO


def configure_logging(source: str = "shelf", level: int | None = None) -> logging.Logger:
    """Configure the root logger for a service component.

    Args:
        source: Identifier shown in brackets (e.g., "api", "stats")
        level: Logging level; defaults to LOG_LEVEL from the environment

    Returns:
        Configured root logger
    """
    if level is None:
        level = _level_from_env()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(ISO8601Formatter(source=source))
    handler.addFilter(HealthCheckFilter())
    root_logger.addHandler(handler)

    # Uvicorn installs its own handlers; route them through ours instead
    for uvicorn_logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(uvicorn_logger_name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.addHandler(handler)
        uvicorn_logger.setLevel(level)
        uvicorn_logger.propagate = False

    # The PocketBase SDK talks over httpx
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
