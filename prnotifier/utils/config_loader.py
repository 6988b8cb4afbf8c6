"""Environment configuration loader."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from dotenv import find_dotenv, load_dotenv

from prnotifier.models.config import DEFAULT_GITHUB_API_URL, FilterConfig, NotifierConfig
from prnotifier.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = get_logger("utils.config_loader")


class ConfigurationError(Exception):
    """Error raised when required configuration is missing or invalid."""

    pass


REPOSITORIES_VAR = "GITHUB_REPOSITORIES"
TOKEN_VAR = "GITHUB_TOKEN"
WEBHOOK_URL_VAR = "GOOGLE_WEBHOOK_URL"
IGNORED_USERS_VAR = "GITHUB_IGNORED_USERS"
ANNOUNCED_USERS_VAR = "GITHUB_ANNOUNCED_USERS"
IGNORED_LABELS_VAR = "GITHUB_IGNORED_LABELS"
SHOW_AGE_VAR = "SHOW_PR_AGE"
API_URL_VAR = "GITHUB_API_URL"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def load_dotenv_file() -> bool:
    """Load the nearest ``.env`` file found from the working directory upwards.

    Variables already present in the environment are not overridden.

    Returns:
        True if a file was found and loaded.
    """
    return load_dotenv(find_dotenv(usecwd=True), override=False)


def load_config(environ: Mapping[str, str] | None = None) -> NotifierConfig:
    """Build the run configuration from environment variables.

    Args:
        environ: Mapping to read from. Defaults to ``os.environ``.

    Returns:
        NotifierConfig instance.

    Raises:
        ConfigurationError: If a required variable is missing or a value is invalid.
    """
    if environ is None:
        environ = os.environ

    repositories = split_list(_require(environ, REPOSITORIES_VAR))
    if not repositories:
        raise ConfigurationError(f"{REPOSITORIES_VAR} must list at least one repository")

    announced = split_list(environ.get(ANNOUNCED_USERS_VAR, ""))

    filters = FilterConfig(
        excluded_users=frozenset(split_list(environ.get(IGNORED_USERS_VAR, ""))),
        allowed_users=frozenset(announced) if announced else None,
        excluded_labels=frozenset(split_list(environ.get(IGNORED_LABELS_VAR, ""))),
        show_age=parse_bool(environ.get(SHOW_AGE_VAR, ""), SHOW_AGE_VAR),
    )

    try:
        config = NotifierConfig(
            repositories=tuple(repositories),
            github_token=_require(environ, TOKEN_VAR),
            webhook_url=_require(environ, WEBHOOK_URL_VAR),
            filters=filters,
            github_api_url=environ.get(API_URL_VAR, "").strip() or DEFAULT_GITHUB_API_URL,
        )
    except ValueError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    logger.info(
        "Loaded configuration",
        extra={
            "repositories": list(config.repositories),
            "excluded_user_count": len(filters.excluded_users),
            "allow_list": filters.has_allow_list,
            "excluded_labels": sorted(filters.excluded_labels),
            "show_age": filters.show_age,
        },
    )
    return config


def split_list(value: str) -> list[str]:
    """Split a comma-separated value, trimming whitespace and dropping blanks."""
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_bool(value: str, name: str) -> bool:
    """Parse a boolean flag value.

    Raises:
        ConfigurationError: If the value is not a recognized boolean.
    """
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean (true/false), got {value!r}")


def _require(environ: Mapping[str, str], name: str) -> str:
    value = environ.get(name, "").strip()
    if not value:
        raise ConfigurationError(f"{name} must be set")
    return value
