"""
Logging configuration and utilities for the JSX PDF service
"""
import asyncio
import json
import logging
import logging.config
import os
import sys
import time
from functools import wraps
from pathlib import Path
from typing import Any, Dict, Optional

LOGGER_NAME = "jsx_pdf"

# LogRecord attributes that are not user supplied ``extra`` fields
_RECORD_ATTRIBUTES = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime", "taskName"}


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    json_format: bool = False,
) -> logging.Logger:
    """
    Set up logging configuration for the service.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file to write logs to
        json_format: Use JSON format for structured logging

    Returns:
        Configured package logger
    """
    level = level.upper()

    if json_format:
        formatter: Dict[str, Any] = {"()": f"{__name__}.JsonFormatter"}
    else:
        formatter = {"format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"}

    handlers = ["console"]
    logging_config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"standard": formatter},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "standard",
                "stream": sys.stdout,
            },
        },
        "loggers": {
            LOGGER_NAME: {
                "level": level,
                "handlers": handlers,
                "propagate": False,
            },
        },
    }

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logging_config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": level,
            "formatter": "standard",
            "filename": str(log_file),
            "maxBytes": 10 * 1024 * 1024,
            "backupCount": 5,
        }
        handlers.append("file")

    logging.config.dictConfig(logging_config)

    logger = logging.getLogger(LOGGER_NAME)
    logger.info(f"Logging initialized with level: {level}")
    if log_file:
        logger.info(f"Log file: {log_file}")
    return logger


class JsonFormatter(logging.Formatter):
    """One JSON object per log line, including ``extra`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRIBUTES:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


def _log_timing(name: str, start_time: float, error: Optional[BaseException] = None) -> None:
    logger = logging.getLogger(f"{LOGGER_NAME}.performance")
    duration = time.time() - start_time
    extra: Dict[str, Any] = {
        "operation": name,
        "duration_ms": round(duration * 1000, 2),
        "success": error is None,
    }
    if error is None:
        logger.info(f"Operation '{name}' completed", extra=extra)
    else:
        extra["error"] = str(error)
        extra["error_type"] = type(error).__name__
        logger.error(f"Operation '{name}' failed", extra=extra)


def timed_operation(operation_name: Optional[str] = None):
    """Decorator to time sync or async function execution."""
    def decorator(func):
        name = operation_name or f"{func.__module__}.{func.__name__}"

        if asyncio.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                start_time = time.time()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    _log_timing(name, start_time, e)
                    raise
                _log_timing(name, start_time)
                return result
            return async_wrapper

        @wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _log_timing(name, start_time, e)
                raise
            _log_timing(name, start_time)
            return result
        return wrapper
    return decorator


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Get a configured logger instance."""
    return logging.getLogger(name)


def configure_logging_from_env() -> logging.Logger:
    """Configure logging from ``JSX_PDF_LOG_*`` environment variables."""
    level = os.getenv("JSX_PDF_LOG_LEVEL", "INFO").upper()
    log_file = os.getenv("JSX_PDF_LOG_FILE")
    json_format = os.getenv("JSX_PDF_LOG_JSON", "false").lower() == "true"

    return setup_logging(
        level=level,
        log_file=Path(log_file) if log_file else None,
        json_format=json_format,
    )
