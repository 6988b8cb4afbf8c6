"""Utility modules for prnotifier."""

from prnotifier.utils.logging import (
    JsonFormatter,
    VisibilityFilter,
    configure_logging,
    get_logger,
)
from prnotifier.utils.retry import RetryConfig, RetryError, retry_with_backoff

__all__ = [
    "JsonFormatter",
    "RetryConfig",
    "RetryError",
    "VisibilityFilter",
    "configure_logging",
    "get_logger",
    "retry_with_backoff",
]
