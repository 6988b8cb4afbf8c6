"""Selection of pull requests that are waiting for review."""

from __future__ import annotations

from typing import TYPE_CHECKING

from prnotifier.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from prnotifier.models.config import FilterConfig
    from prnotifier.models.pull_request import PullRequest
    from prnotifier.models.review import Review

    ReviewsFetcher = Callable[[PullRequest], Sequence[Review]]

logger = get_logger("pipeline.review_filter")


def exclusion_reason(pull_request: PullRequest, config: FilterConfig) -> str | None:
    """Check the rules that can be decided without fetching reviews.

    Rules are applied in order and the first match wins: draft, excluded
    author, author missing from the allow-list, excluded label.

    Args:
        pull_request: The pull request to check.
        config: Filtering configuration.

    Returns:
        A short reason if the pull request is excluded, otherwise None.
    """
    if pull_request.draft:
        return "draft"

    author_ids = pull_request.user.identifiers

    if author_ids & config.excluded_users:
        return "excluded author"

    if config.allowed_users is not None and not author_ids & config.allowed_users:
        return "author not announced"

    if pull_request.label_names & config.excluded_labels:
        return "excluded label"

    return None


def has_approval(reviews: Iterable[Review]) -> bool:
    """Whether any review approves the pull request."""
    return any(review.is_approval for review in reviews)


def evaluate(
    pull_requests: Iterable[PullRequest],
    reviews_fetcher: ReviewsFetcher,
    config: FilterConfig,
) -> list[PullRequest]:
    """Select the pull requests that still need a review.

    Reviews are fetched only for pull requests that pass every other rule.
    A pull request with no approving review (including one with no reviews
    at all) needs review. Input order is preserved.

    Args:
        pull_requests: Open pull requests of one repository.
        reviews_fetcher: Returns the reviews of a pull request.
        config: Filtering configuration.

    Returns:
        The pull requests awaiting review.

    Raises:
        SourceFetchError: Propagated from ``reviews_fetcher``.
    """
    pending: list[PullRequest] = []

    for pull_request in pull_requests:
        context = {
            "pr_id": pull_request.id,
            "pr_number": pull_request.number,
            "title": pull_request.title,
            "author": pull_request.user.login,
            "visibility": pull_request.visibility,
        }

        reason = exclusion_reason(pull_request, config)
        if reason is not None:
            if reason == "excluded label":
                context["label"] = sorted(pull_request.label_names & config.excluded_labels)
            logger.info("Ignoring pull request", extra={**context, "reason": reason})
            continue

        reviews = reviews_fetcher(pull_request)

        if has_approval(reviews):
            logger.info(
                "Ignoring pull request",
                extra={**context, "reason": "approved", "review_count": len(reviews)},
            )
            continue

        logger.info(
            "Pull request needs review",
            extra={**context, "review_count": len(reviews)},
        )
        pending.append(pull_request)

    return pending
