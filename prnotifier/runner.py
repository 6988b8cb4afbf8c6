"""Run orchestration: scan repositories, then announce pending pull requests."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from prnotifier.messages import build_header, format_pull_request
from prnotifier.pipeline.review_filter import evaluate
from prnotifier.tools.chat import new_thread_key
from prnotifier.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from prnotifier.models.config import FilterConfig
    from prnotifier.models.pull_request import PullRequest
    from prnotifier.tools.chat import GoogleChatSink
    from prnotifier.tools.github import GitHubPullRequestSource

logger = get_logger("runner")


def _utc_now() -> datetime:
    return datetime.now(UTC)


class Notifier:
    """Scans repositories for pull requests awaiting review and posts them to chat.

    Repositories, pull requests and messages are processed strictly one at a
    time, in configuration order. Any fetch or send failure aborts the run.
    """

    def __init__(
        self,
        source: GitHubPullRequestSource,
        sink: GoogleChatSink,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialize the notifier.

        Args:
            source: Where open pull requests and reviews come from.
            sink: Where messages are sent.
            clock: Returns the current aware datetime.
        """
        self.source = source
        self.sink = sink
        self.clock = clock

    def scan_repository(self, repository: str, config: FilterConfig) -> list[PullRequest]:
        """Find the pull requests of one repository that need review."""
        logger.info("Starting pull request scan", extra={"repository": repository})

        pull_requests = self.source.list_open_pull_requests(repository)
        pending = evaluate(pull_requests, self.source.list_reviews, config)

        logger.info(
            "Finished pull request scan",
            extra={
                "repository": repository,
                "open_count": len(pull_requests),
                "pending_count": len(pending),
            },
        )
        return pending

    def collect(self, repositories: Sequence[str], config: FilterConfig) -> list[PullRequest]:
        """Find pending pull requests across repositories, in repository order."""
        pending: list[PullRequest] = []
        for repository in repositories:
            pending.extend(self.scan_repository(repository, config))
        return pending

    def announce(self, pending: Sequence[PullRequest], config: FilterConfig) -> str | None:
        """Post the header and one threaded reply per pending pull request.

        Args:
            pending: Pull requests to announce, in display order.
            config: Filtering configuration (for the age option and label hint).

        Returns:
            The thread key used, or None if nothing was sent.
        """
        if not pending:
            logger.info("No pull requests need review, nothing to send")
            return None

        now = self.clock()
        thread_key = new_thread_key(now.date())

        self.sink.send(build_header(now.date(), config.excluded_labels), thread_key)

        for pull_request in pending:
            self.sink.send(format_pull_request(pull_request, now, config.show_age), thread_key)

        logger.info(
            "Announced pull requests",
            extra={"count": len(pending), "thread_key": thread_key},
        )
        return thread_key

    def run(self, repositories: Sequence[str], config: FilterConfig) -> list[PullRequest]:
        """Scan every repository and announce what needs review.

        Args:
            repositories: Repositories in owner/repo format.
            config: Filtering configuration.

        Returns:
            The pull requests that were announced.
        """
        pending = self.collect(repositories, config)
        self.announce(pending, config)
        return pending
