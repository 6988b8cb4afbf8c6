"""Data models for prnotifier."""

from prnotifier.models.config import DEFAULT_GITHUB_API_URL, FilterConfig, NotifierConfig
from prnotifier.models.pull_request import Label, PullRequest, Repository, User
from prnotifier.models.review import Review, ReviewState

__all__ = [
    "DEFAULT_GITHUB_API_URL",
    "FilterConfig",
    "Label",
    "NotifierConfig",
    "PullRequest",
    "Repository",
    "Review",
    "ReviewState",
    "User",
]
