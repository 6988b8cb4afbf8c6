"""Configuration models for prnotifier."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from urllib.parse import urlsplit

DEFAULT_GITHUB_API_URL = "https://api.github.com"


@dataclass(frozen=True)
class FilterConfig:
    """Decision inputs for selecting pull requests that need review."""

    excluded_users: frozenset[str] = field(default_factory=frozenset)
    allowed_users: frozenset[str] | None = None  # None means no allow-list
    excluded_labels: frozenset[str] = field(default_factory=frozenset)
    show_age: bool = False

    def __post_init__(self) -> None:
        """Normalize an empty allow-list to no restriction."""
        if self.allowed_users is not None and not self.allowed_users:
            object.__setattr__(self, "allowed_users", None)

    @property
    def has_allow_list(self) -> bool:
        return self.allowed_users is not None


@dataclass(frozen=True)
class NotifierConfig:
    """Validated configuration for a single notifier run."""

    repositories: tuple[str, ...]
    github_token: str
    webhook_url: str
    filters: FilterConfig = field(default_factory=FilterConfig)
    github_api_url: str = DEFAULT_GITHUB_API_URL

    REPO_PATTERN = re.compile(r"^[a-zA-Z0-9_.-]+/[a-zA-Z0-9_.-]+$")

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not self.repositories:
            raise ValueError("At least one repository must be configured")

        for repository in self.repositories:
            if not self.REPO_PATTERN.match(repository):
                raise ValueError(
                    f"Invalid repository format: {repository}. Expected format: owner/repo"
                )

        if not self.github_token:
            raise ValueError("GitHub token must not be empty")

        for name, url in (("webhook_url", self.webhook_url), ("github_api_url", self.github_api_url)):
            parts = urlsplit(url)
            if parts.scheme not in ("http", "https") or not parts.netloc:
                raise ValueError(f"{name} must be an http(s) URL, got {url!r}")
