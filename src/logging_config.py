"""Logging configuration for the mortgage planning engine.

The calculation modules never configure handlers themselves. They receive a
logger (or fall back to ``get_logger``) and the application decides where the
records go by calling ``configure_logging`` once at startup.
"""

import json
import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any, Optional

LOGGER_NAMESPACE = "mortgage_planning"

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Environment variable names
ENV_LOG_LEVEL = "MORTGAGE_LOG_LEVEL"
ENV_LOG_FILE = "MORTGAGE_LOG_FILE"
ENV_STRUCTURED_LOGS = "MORTGAGE_STRUCTURED_LOGS"

_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message"}


class StructuredFormatter(logging.Formatter):
    """Formatter that outputs log records as JSON lines."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Fields passed through ``extra=``
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the package namespace.

    Args:
        name: Short component name, e.g. ``"amortization"``

    Example:
        >>> logger = get_logger("refinance")
        >>> logger.info("Variant C term found", extra={"term_months": 180})
    """
    if not name.startswith(LOGGER_NAMESPACE):
        name = f"{LOGGER_NAMESPACE}.{name}"
    return logging.getLogger(name)


def configure_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    console: bool = True,
    structured: bool = False,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> None:
    """Configure handlers for the package logger.

    Args:
        level: Logging level name. Defaults to MORTGAGE_LOG_LEVEL or INFO.
        log_file: Optional log file path. Defaults to MORTGAGE_LOG_FILE.
        console: Whether to log to stdout
        structured: Emit JSON records. Also enabled by MORTGAGE_STRUCTURED_LOGS.
        max_bytes: Size at which the log file rotates
        backup_count: Number of rotated files to keep
    """
    logger = logging.getLogger(LOGGER_NAMESPACE)
    logger.handlers.clear()

    log_level_str = level or os.getenv(ENV_LOG_LEVEL) or DEFAULT_LOG_LEVEL
    log_level = getattr(logging, log_level_str.upper(), logging.INFO)
    logger.setLevel(log_level)

    use_structured = structured or os.getenv(ENV_STRUCTURED_LOGS, "").lower() in (
        "true",
        "1",
        "yes",
    )

    if use_structured:
        formatter: logging.Formatter = StructuredFormatter(datefmt=DEFAULT_DATE_FORMAT)
    else:
        formatter = logging.Formatter(DEFAULT_LOG_FORMAT, datefmt=DEFAULT_DATE_FORMAT)

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    log_file_path = log_file or os.getenv(ENV_LOG_FILE)
    if log_file_path:
        Path(log_file_path).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False


def disable_logging() -> None:
    """Silence all package logging."""
    logger = logging.getLogger(LOGGER_NAMESPACE)
    logger.handlers.clear()
    logger.addHandler(logging.NullHandler())
    logger.propagate = False
