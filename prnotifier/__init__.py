"""Scheduled notifier for pull requests awaiting review."""

__version__ = "0.1.0"
