"""Structured JSON logging for prnotifier."""

import json
import logging
import os
import traceback
from datetime import UTC, datetime
from typing import Any, ClassVar

ROOT_LOGGER_NAME = "prnotifier"

TRUTHY_VALUES = {"1", "true", "yes", "on"}


class JsonFormatter(logging.Formatter):
    """Format log records as JSON for structured logging."""

    # Fields that are part of the standard LogRecord but not useful in JSON output
    RESERVED_ATTRS: ClassVar[set[str]] = {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "message",
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON.

        Args:
            record: The log record to format.

        Returns:
            JSON-formatted string.
        """
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.levelno >= logging.WARNING:
            log_entry["location"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_entry["exception"] = "".join(traceback.format_exception(*record.exc_info))

        for key, value in record.__dict__.items():
            if key not in self.RESERVED_ATTRS and not key.startswith("_"):
                try:
                    json.dumps(value)
                    log_entry[key] = value
                except (TypeError, ValueError):
                    log_entry[key] = str(value)

        return json.dumps(log_entry, default=str)


class VisibilityFilter(logging.Filter):
    """Redact identifying fields on records tagged with private visibility.

    Records carry a ``visibility`` extra field ("public" or "private").
    Private records keep their message and numeric identifiers but lose
    the fields listed in ``REDACTED_FIELDS`` unless private details are allowed.
    """

    REDACTED_FIELDS: ClassVar[tuple[str, ...]] = ("title", "author", "label", "url")
    REDACTED = "<redacted>"

    def __init__(self, allow_private: bool = False) -> None:
        super().__init__()
        self.allow_private = allow_private

    def filter(self, record: logging.LogRecord) -> bool:
        if self.allow_private or getattr(record, "visibility", None) != "private":
            return True

        for field_name in self.REDACTED_FIELDS:
            if hasattr(record, field_name):
                setattr(record, field_name, self.REDACTED)

        return True


def configure_logging(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Configure structured JSON logging for the application.

    Reads ``LOG_LEVEL`` (default INFO) and ``LOG_PRIVATE_DETAILS``
    (default false) from the environment.

    Args:
        name: The root logger name.

    Returns:
        Configured logger instance.
    """
    log_level_str = os.environ.get("LOG_LEVEL", "INFO").upper()
    log_level = logging.getLevelNamesMapping().get(log_level_str, logging.INFO)

    allow_private = os.environ.get("LOG_PRIVATE_DETAILS", "").strip().lower() in TRUTHY_VALUES

    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setLevel(log_level)
    handler.setFormatter(JsonFormatter())
    handler.addFilter(VisibilityFilter(allow_private=allow_private))
    logger.addHandler(handler)

    logger.propagate = False

    return logger


def get_logger(module_name: str) -> logging.Logger:
    """Get a child logger for a specific module.

    Args:
        module_name: The module name to create a child logger for.

    Returns:
        Child logger instance.
    """
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{module_name}")
