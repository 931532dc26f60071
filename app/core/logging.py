"""
Logging setup: one JSON object per line in production, readable text locally.

Structured fields travel as `extra={"extra_data": {...}}` and are merged into
the JSON record or appended to the text line.
"""
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from app.core.config import get_settings

APP_LOGGER = "app"


class JSONFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra = getattr(record, "extra_data", None)
        if extra:
            log_data.update(extra)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extra = getattr(record, "extra_data", None)
        if extra:
            line += " [" + " ".join(f"{key}={value}" for key, value in extra.items()) + "]"
        return line


def _build_handler(log_format: str, level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if log_format == "json" else TextFormatter())
    return handler


def setup_logging() -> logging.Logger:
    """
    Configure the application logger tree.

    The `app` logger gets the configured level; APScheduler's own loggers
    share the handler but only report warnings and above, so a misfired or
    failing job still shows up without per-run chatter.
    """
    settings = get_settings()
    level = getattr(logging, settings.log_level, logging.INFO)
    handler = _build_handler(settings.log_format, level)

    logger = logging.getLogger(APP_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.propagate = False

    scheduler_logger = logging.getLogger("apscheduler")
    scheduler_logger.setLevel(logging.WARNING)
    scheduler_logger.handlers.clear()
    scheduler_logger.addHandler(handler)
    scheduler_logger.propagate = False

    return logger


def get_logger(name: str = APP_LOGGER) -> logging.Logger:
    return logging.getLogger(name)
