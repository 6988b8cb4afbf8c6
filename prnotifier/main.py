"""Command line entry point for prnotifier."""

from __future__ import annotations

import sys

from prnotifier import __version__
from prnotifier.runner import Notifier
from prnotifier.tools.chat import GoogleChatSink, NotificationSendError
from prnotifier.tools.github import GitHubPullRequestSource, SourceFetchError, create_github_client
from prnotifier.utils.config_loader import ConfigurationError, load_config, load_dotenv_file
from prnotifier.utils.logging import configure_logging, get_logger

logger = get_logger("main")


def main() -> int:
    """Run one scan-filter-notify pass.

    Returns:
        Process exit status: 0 on success (including when nothing was sent),
        1 on a configuration, fetch or send failure.
    """
    load_dotenv_file()
    configure_logging()

    logger.info("Starting prnotifier", extra={"version": __version__})

    try:
        config = load_config()
    except ConfigurationError:
        logger.exception("Invalid configuration")
        return 1

    source = GitHubPullRequestSource(
        create_github_client(config.github_token, config.github_api_url)
    )

    try:
        with GoogleChatSink(config.webhook_url) as sink:
            pending = Notifier(source, sink).run(config.repositories, config.filters)
    except SourceFetchError as e:
        logger.exception("Failed to fetch pull requests", extra={"url": e.url})
        return 1
    except NotificationSendError as e:
        logger.exception(
            "Failed to send notification",
            extra={"status_code": e.status_code, "attempts": e.attempts},
        )
        return 1

    logger.info("Run complete", extra={"announced": len(pending)})
    return 0


if __name__ == "__main__":
    sys.exit(main())
