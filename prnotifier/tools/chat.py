"""Google Chat webhook notification sink."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import requests

from prnotifier.tools.github import USER_AGENT
from prnotifier.utils.logging import get_logger
from prnotifier.utils.retry import RetryConfig, RetryError, retry_with_backoff

if TYPE_CHECKING:
    from datetime import date

logger = get_logger("tools.chat")

THREAD_KEY_PARAM = "threadKey"
REPLY_OPTION_PARAM = "messageReplyOption"
REPLY_OPTION_FALLBACK = "REPLY_MESSAGE_FALLBACK_TO_NEW_THREAD"

# Google Chat allows 60 requests per minute per space
RATE_LIMIT_DELAY_SECONDS = 1.5
RATE_LIMIT_MAX_RETRIES = 3

REQUEST_TIMEOUT_SECONDS = 30


class NotificationSendError(Exception):
    """Error raised when a chat message cannot be delivered."""

    def __init__(
        self,
        message: str,
        url: str,
        status_code: int | None = None,
        body: str | None = None,
        attempts: int = 1,
    ) -> None:
        """Initialize the NotificationSendError.

        Args:
            message: Error message.
            url: The webhook URL that was posted to.
            status_code: HTTP status of the last response, if any.
            body: Raw body of the last response, if any.
            attempts: Number of attempts made.
        """
        detail = f"{message} (url={url}, attempts={attempts})"
        if body is not None:
            detail = f"{detail}: {body}"
        super().__init__(detail)
        self.url = url
        self.status_code = status_code
        self.body = body
        self.attempts = attempts


class RateLimitedError(Exception):
    """The webhook answered with HTTP 429."""

    def __init__(self, response: requests.Response) -> None:
        super().__init__(f"Rate limited with status {response.status_code}")
        self.response = response


def build_webhook_url(webhook_url: str, thread_key: str) -> str:
    """Build a webhook URL that posts into the thread named by ``thread_key``.

    Existing ``threadKey`` and ``messageReplyOption`` parameters are replaced;
    all other query parameters are kept in their original order.

    Args:
        webhook_url: Configured incoming webhook URL.
        thread_key: Key grouping the messages of one run.

    Returns:
        The threaded webhook URL.
    """
    parts = urlsplit(webhook_url)
    params = [
        (name, value)
        for name, value in parse_qsl(parts.query, keep_blank_values=True)
        if name not in (THREAD_KEY_PARAM, REPLY_OPTION_PARAM)
    ]
    params.append((REPLY_OPTION_PARAM, REPLY_OPTION_FALLBACK))
    params.append((THREAD_KEY_PARAM, thread_key))
    return urlunsplit(parts._replace(query=urlencode(params)))


def new_thread_key(today: date) -> str:
    """Create a thread key unique to one run."""
    return f"pr-review-{today.isoformat()}-{uuid.uuid4().hex[:12]}"


class GoogleChatSink:
    """Posts text messages to a Google Chat incoming webhook."""

    def __init__(
        self,
        webhook_url: str,
        session: requests.Session | None = None,
        retry_config: RetryConfig | None = None,
    ) -> None:
        """Initialize the sink.

        Args:
            webhook_url: Incoming webhook URL of the chat space.
            session: Session to post with. A session created here is closed by ``close``.
            retry_config: Rate limit retry policy.
        """
        self.webhook_url = webhook_url
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()
        self.retry_config = retry_config or RetryConfig.fixed(
            RATE_LIMIT_DELAY_SECONDS, RATE_LIMIT_MAX_RETRIES
        )

    def close(self) -> None:
        """Close the HTTP session if this sink created it."""
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> GoogleChatSink:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _post(self, url: str, text: str) -> requests.Response:
        try:
            response = self.session.post(
                url,
                json={"text": text},
                headers={"User-Agent": USER_AGENT},
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
        except requests.RequestException as e:
            raise NotificationSendError(f"Failed to reach webhook ({e})", self.webhook_url) from e

        if response.status_code == requests.codes.too_many_requests:
            raise RateLimitedError(response)
        return response

    def send(self, text: str, thread_key: str) -> dict[str, Any]:
        """Send a message into a thread, retrying while rate limited.

        Args:
            text: Message text.
            thread_key: Thread key shared by all messages of the run.

        Returns:
            The decoded JSON body of the webhook response.

        Raises:
            NotificationSendError: If the message is rejected, the webhook is
                unreachable, or rate limiting persists past the retry bound.
        """
        url = build_webhook_url(self.webhook_url, thread_key)

        def log_retry(error: BaseException, attempt: int, delay: float) -> None:  # noqa: ARG001
            logger.info(
                "Rate limited by webhook, retrying",
                extra={"attempt": attempt, "delay": delay, "thread_key": thread_key},
            )

        try:
            response = retry_with_backoff(
                lambda: self._post(url, text),
                config=self.retry_config,
                retry_on=(RateLimitedError,),
                on_retry=log_retry,
            )
        except RetryError as e:
            last = e.last_exception
            response_text = last.response.text if isinstance(last, RateLimitedError) else None
            raise NotificationSendError(
                "Webhook kept rate limiting",
                self.webhook_url,
                status_code=requests.codes.too_many_requests,
                body=response_text,
                attempts=e.attempts,
            ) from e

        if not response.ok:
            raise NotificationSendError(
                f"Webhook rejected message with status {response.status_code}",
                self.webhook_url,
                status_code=response.status_code,
                body=response.text,
            )

        try:
            result: dict[str, Any] = response.json()
        except ValueError as e:
            raise NotificationSendError(
                "Failed to parse webhook response JSON",
                self.webhook_url,
                status_code=response.status_code,
                body=response.text,
            ) from e

        logger.debug(
            "Message sent",
            extra={"thread_key": thread_key, "status_code": response.status_code},
        )
        return result
