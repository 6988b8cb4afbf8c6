"""Chat message formatting."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Collection
    from datetime import date, datetime

    from prnotifier.models.pull_request import PullRequest

BOT_TAG = "\U0001f916 (bot)"
SEPARATOR = "--------------------"


def build_header(today: date, excluded_labels: Collection[str] = ()) -> str:
    """Build the banner message that opens a run's thread.

    Args:
        today: Date of the run, used for the day-of-week greeting.
        excluded_labels: Labels that hide a pull request from the notifier.

    Returns:
        Header message text.
    """
    lines = [
        f"Good morning Team! Happy {today.strftime('%A')}! "
        "The following PRs are open and need reviews:",
    ]
    if excluded_labels:
        labels = ", ".join(f"*{label}*" for label in sorted(excluded_labels))
        lines.append(f"(PRs can be hidden from this bot by adding one of these labels: {labels})")
    lines.append(SEPARATOR)
    return "\n".join(lines)


def format_age(created_at: datetime, now: datetime) -> str:
    """Describe how long ago a pull request was opened.

    Args:
        created_at: When the pull request was opened.
        now: Current time.

    Returns:
        "NEW" for less than a day, otherwise "opened N day(s) ago".
    """
    days = (now - created_at).days
    if days <= 0:
        return "NEW"
    if days == 1:
        return "opened 1 day ago"
    return f"opened {days} days ago"


def format_author(pull_request: PullRequest) -> str:
    author = pull_request.user
    if author.is_bot:
        return f"Author: {author.login} {BOT_TAG}"
    return f"Author: {author.login}"


def format_pull_request(pull_request: PullRequest, now: datetime, show_age: bool = False) -> str:
    """Format the thread reply announcing a single pull request.

    The size (``+additions/-deletions``) is included only when the payload the
    pull request was built from carried line counts. Pull requests from the
    open-PR list endpoint never do, so their messages have no size detail.

    Args:
        pull_request: The pull request awaiting review.
        now: Current time, used when ``show_age`` is set.
        show_age: Whether to include how long the pull request has been open.

    Returns:
        Message text in Google Chat markup.
    """
    lines = [f"<{pull_request.html_url}|{pull_request.reference}> - {pull_request.title}"]

    details = [format_author(pull_request)]
    if pull_request.additions is not None and pull_request.deletions is not None:
        details.append(f"+{pull_request.additions}/-{pull_request.deletions}")
    if show_age:
        age = format_age(pull_request.created_at, now)
        details.append(f"*{age}*" if age == "NEW" else age)
    lines.append(" | ".join(details))

    return "\n".join(lines)
