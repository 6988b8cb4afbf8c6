"""GitHub pull request source."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, TypeVar

import requests
from github import Auth, Github, GithubException

from prnotifier.models.pull_request import PullRequest
from prnotifier.models.review import Review
from prnotifier.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

logger = get_logger("tools.github")

T = TypeVar("T")

USER_AGENT = "GU-PR-Bot"
PER_PAGE = 100


class SourceFetchError(Exception):
    """Error raised when the GitHub API cannot be queried or decoded."""

    def __init__(self, message: str, url: str, body: str | None = None) -> None:
        """Initialize the SourceFetchError.

        Args:
            message: Error message.
            url: The API URL that was being queried.
            body: Raw response body, when one was received.
        """
        detail = f"{message} when querying {url}"
        if body is not None:
            detail = f"{detail}: {body}"
        super().__init__(detail)
        self.url = url
        self.body = body


class BearerToken(Auth.Token):
    """Token authentication sent as ``Authorization: Bearer <token>``."""

    @property
    def token_type(self) -> str:
        return "Bearer"


def create_github_client(token: str, base_url: str = "https://api.github.com") -> Github:
    """Create a GitHub client authenticated with a bearer token.

    Args:
        token: Personal access or app token.
        base_url: API root, overridable for GitHub Enterprise.

    Returns:
        Authenticated Github client.
    """
    return Github(
        auth=BearerToken(token),
        base_url=base_url,
        user_agent=USER_AGENT,
        per_page=PER_PAGE,
    )


def _raw_body(data: Any) -> str:
    if isinstance(data, str):
        return data
    try:
        return json.dumps(data)
    except (TypeError, ValueError):
        return str(data)


class GitHubPullRequestSource:
    """Fetches open pull requests and their reviews from the GitHub REST API."""

    def __init__(self, client: Github) -> None:
        self.client = client

    def _get_pages(self, url: str, parameters: dict[str, Any]) -> list[dict[str, Any]]:
        """GET every page of a list endpoint.

        Raises:
            SourceFetchError: On transport failures, API errors or non-list bodies.
        """
        items: list[dict[str, Any]] = []
        page = 1

        while True:
            try:
                _, data = self.client.requester.requestJsonAndCheck(
                    "GET",
                    url,
                    parameters={**parameters, "per_page": PER_PAGE, "page": page},
                )
            except GithubException as e:
                raise SourceFetchError(
                    f"GitHub API returned status {e.status}", url, _raw_body(e.data)
                ) from e
            except json.JSONDecodeError as e:
                raise SourceFetchError(f"Failed to parse JSON ({e})", url, e.doc) from e
            except requests.RequestException as e:
                raise SourceFetchError(f"Failed to get response ({e})", url) from e
            except ValueError as e:
                raise SourceFetchError(f"Failed to parse JSON ({e})", url) from e

            if not isinstance(data, list):
                raise SourceFetchError("Expected a JSON array", url, _raw_body(data))

            items.extend(data)

            if len(data) < PER_PAGE:
                return items
            page += 1

    def _decode(
        self,
        url: str,
        items: list[dict[str, Any]],
        decode: Callable[[dict[str, Any]], T],
    ) -> list[T]:
        try:
            return [decode(item) for item in items]
        except (KeyError, TypeError, ValueError) as e:
            raise SourceFetchError(
                f"Failed to parse JSON ({type(e).__name__}: {e})", url, _raw_body(items)
            ) from e

    def list_open_pull_requests(self, repository: str) -> list[PullRequest]:
        """List all open pull requests of a repository.

        Args:
            repository: Repository in owner/repo format.

        Returns:
            Pull requests in API order.

        Raises:
            SourceFetchError: If the pull requests cannot be fetched or decoded.
        """
        url = f"/repos/{repository}/pulls"
        items = self._get_pages(url, {"state": "open"})
        pull_requests = self._decode(url, items, PullRequest.from_api_payload)

        logger.info(
            "Listed open pull requests",
            extra={"repository": repository, "count": len(pull_requests)},
        )
        return pull_requests

    def list_reviews(self, pull_request: PullRequest) -> list[Review]:
        """List the reviews submitted on a pull request.

        Args:
            pull_request: The pull request whose reviews to fetch.

        Returns:
            Reviews in submission order.

        Raises:
            SourceFetchError: If the reviews cannot be fetched or decoded.
        """
        url = f"{pull_request.url}/reviews"
        items = self._get_pages(url, {})
        reviews = self._decode(url, items, Review.from_api_payload)

        logger.debug(
            "Listed reviews",
            extra={
                "pr_id": pull_request.id,
                "pr_number": pull_request.number,
                "review_count": len(reviews),
                "visibility": pull_request.visibility,
            },
        )
        return reviews
