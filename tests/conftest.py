"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import os
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any
from unittest.mock import MagicMock

import pytest

from prnotifier.models.config import FilterConfig
from prnotifier.models.pull_request import PullRequest
from prnotifier.models.review import Review
from tests.fixtures.github_payloads import create_pr_payload, create_review_payload

if TYPE_CHECKING:
    from collections.abc import Callable, Generator


@pytest.fixture(autouse=True)
def reset_env() -> Generator[None]:
    """Reset environment variables after each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def mock_env() -> dict[str, str]:
    """Standard environment variables for testing."""
    return {
        "GITHUB_REPOSITORIES": "owner/repo,owner/other",
        "GITHUB_TOKEN": "ghp_testtoken",
        "GOOGLE_WEBHOOK_URL": "https://chat.googleapis.com/v1/spaces/AAA/messages?key=k&token=t",
        "GITHUB_IGNORED_USERS": "49699333",
        "GITHUB_IGNORED_LABELS": "Stale",
        "SHOW_PR_AGE": "true",
        "LOG_LEVEL": "DEBUG",
    }


@pytest.fixture
def set_mock_env(mock_env: dict[str, str]) -> Generator[None]:
    """Set mock environment variables for a test."""
    for key, value in mock_env.items():
        os.environ[key] = value
    yield


@pytest.fixture
def now() -> datetime:
    """Fixed current time (a Monday)."""
    return datetime(2026, 10, 19, 8, 0, tzinfo=UTC)


@pytest.fixture
def make_pr() -> Callable[..., PullRequest]:
    """Factory building PullRequest models from payload overrides."""

    def _make(**kwargs: Any) -> PullRequest:
        return PullRequest.from_api_payload(create_pr_payload(**kwargs))

    return _make


@pytest.fixture
def make_review() -> Callable[..., Review]:
    """Factory building Review models from payload overrides."""

    def _make(**kwargs: Any) -> Review:
        return Review.from_api_payload(create_review_payload(**kwargs))

    return _make


@pytest.fixture
def filter_config() -> FilterConfig:
    """Filter configuration excluding one user and one label."""
    return FilterConfig(
        excluded_users=frozenset({"999"}),
        excluded_labels=frozenset({"Stale"}),
    )


@pytest.fixture
def mock_github_client() -> MagicMock:
    """Mock PyGithub client whose requester returns empty lists."""
    client = MagicMock()
    client.requester.requestJsonAndCheck.return_value = ({}, [])
    return client
