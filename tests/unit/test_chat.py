"""Unit tests for the Google Chat notification sink."""

from datetime import date
from unittest.mock import MagicMock, patch
from urllib.parse import parse_qsl, urlsplit

import pytest
import requests

from prnotifier.tools.chat import (
    GoogleChatSink,
    NotificationSendError,
    build_webhook_url,
    new_thread_key,
)
from prnotifier.tools.github import USER_AGENT

WEBHOOK = "https://example.com/ABCDEF"
THREADED = f"{WEBHOOK}?messageReplyOption=REPLY_MESSAGE_FALLBACK_TO_NEW_THREAD&threadKey=1234"


def _response(status_code: int, json_body: dict | None = None, text: str = "") -> MagicMock:
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.ok = 200 <= status_code < 400
    response.text = text
    if json_body is None:
        response.json.side_effect = ValueError("Expecting value")
    else:
        response.json.return_value = json_body
    return response


class TestBuildWebhookUrl:
    """Tests for threaded webhook URL construction."""

    def test_without_placeholder(self) -> None:
        """Test adding thread parameters to a bare URL."""
        assert build_webhook_url(WEBHOOK, "1234") == THREADED

    def test_replaces_placeholder(self) -> None:
        """Test that an existing threadKey placeholder is replaced."""
        assert build_webhook_url(f"{WEBHOOK}?threadKey={{threadKey}}", "1234") == THREADED

    def test_preserves_other_existing_params(self) -> None:
        """Test that unrelated parameters are kept ahead of thread parameters."""
        result = build_webhook_url(f"{WEBHOOK}?foo=bar", "1234")

        assert result == (
            f"{WEBHOOK}?foo=bar"
            "&messageReplyOption=REPLY_MESSAGE_FALLBACK_TO_NEW_THREAD&threadKey=1234"
        )

    def test_overrides_existing_reply_option(self) -> None:
        """Test that an existing messageReplyOption is overwritten."""
        assert build_webhook_url(f"{WEBHOOK}?messageReplyOption=REPLY_MESSAGE", "1234") == THREADED

    def test_idempotent(self) -> None:
        """Test that applying the builder twice yields the same parameters."""
        base = "https://chat.googleapis.com/v1/spaces/AAA/messages?key=abc&token=x%3Dy"

        once = build_webhook_url(base, "run-1")
        twice = build_webhook_url(once, "run-1")

        assert parse_qsl(urlsplit(twice).query) == parse_qsl(urlsplit(once).query)
        assert dict(parse_qsl(urlsplit(once).query)) == {
            "key": "abc",
            "token": "x=y",
            "messageReplyOption": "REPLY_MESSAGE_FALLBACK_TO_NEW_THREAD",
            "threadKey": "run-1",
        }


class TestNewThreadKey:
    """Tests for thread key generation."""

    def test_thread_keys_are_unique_per_run(self) -> None:
        """Test that each run gets its own dated key."""
        first = new_thread_key(date(2026, 10, 19))
        second = new_thread_key(date(2026, 10, 19))

        assert first.startswith("pr-review-2026-10-19-")
        assert first != second


class TestGoogleChatSink:
    """Tests for sending messages."""

    @pytest.fixture
    def session(self) -> MagicMock:
        """Mock requests session."""
        session = MagicMock(spec=requests.Session)
        session.headers = {}
        return session

    def test_send_success(self, session: MagicMock) -> None:
        """Test posting a message into a thread."""
        session.post.return_value = _response(200, {"name": "spaces/AAA/messages/1"})
        sink = GoogleChatSink(WEBHOOK, session=session)

        result = sink.send("Hello", "1234")

        assert result == {"name": "spaces/AAA/messages/1"}
        assert session.headers == {}
        session.post.assert_called_once_with(
            THREADED,
            json={"text": "Hello"},
            headers={"User-Agent": USER_AGENT},
            timeout=30,
        )

    def test_retries_when_rate_limited(self, session: MagicMock) -> None:
        """Test two rate limits then success waits twice for 1.5 seconds."""
        session.post.side_effect = [
            _response(429, text="slow down"),
            _response(429, text="slow down"),
            _response(200, {"name": "ok"}),
        ]
        sink = GoogleChatSink(WEBHOOK, session=session)

        with patch("prnotifier.utils.retry.time.sleep") as mock_sleep:
            result = sink.send("Hello", "1234")

        assert result == {"name": "ok"}
        assert session.post.call_count == 3
        assert [c.args[0] for c in mock_sleep.call_args_list] == [1.5, 1.5]

    def test_succeeds_on_last_allowed_attempt(self, session: MagicMock) -> None:
        """Test three rate limits then success is still within the bound."""
        session.post.side_effect = [_response(429)] * 3 + [_response(200, {"name": "ok"})]
        sink = GoogleChatSink(WEBHOOK, session=session)

        with patch("prnotifier.utils.retry.time.sleep") as mock_sleep:
            assert sink.send("Hello", "1234") == {"name": "ok"}

        assert mock_sleep.call_count == 3

    def test_fails_after_fourth_rate_limit(self, session: MagicMock) -> None:
        """Test that a fourth consecutive rate limit surfaces as failure."""
        session.post.side_effect = [_response(429, text="quota exceeded")] * 4
        sink = GoogleChatSink(WEBHOOK, session=session)

        with patch("prnotifier.utils.retry.time.sleep") as mock_sleep:
            with pytest.raises(NotificationSendError, match="quota exceeded") as exc_info:
                sink.send("Hello", "1234")

        assert session.post.call_count == 4
        assert mock_sleep.call_count == 3
        assert exc_info.value.status_code == 429
        assert exc_info.value.attempts == 4

    def test_other_errors_not_retried(self, session: MagicMock) -> None:
        """Test that non-rate-limit failures surface immediately."""
        session.post.return_value = _response(400, text='{"error": "bad request"}')
        sink = GoogleChatSink(WEBHOOK, session=session)

        with patch("prnotifier.utils.retry.time.sleep") as mock_sleep:
            with pytest.raises(NotificationSendError, match="status 400") as exc_info:
                sink.send("Hello", "1234")

        assert session.post.call_count == 1
        mock_sleep.assert_not_called()
        assert exc_info.value.body == '{"error": "bad request"}'
        assert exc_info.value.url == WEBHOOK

    def test_transport_error(self, session: MagicMock) -> None:
        """Test that an unreachable webhook fails without retrying."""
        session.post.side_effect = requests.ConnectionError("unreachable")
        sink = GoogleChatSink(WEBHOOK, session=session)

        with pytest.raises(NotificationSendError, match="unreachable"):
            sink.send("Hello", "1234")

        assert session.post.call_count == 1

    def test_invalid_json_response(self, session: MagicMock) -> None:
        """Test that a success status with a non-JSON body fails."""
        session.post.return_value = _response(200, text="<html>")
        sink = GoogleChatSink(WEBHOOK, session=session)

        with pytest.raises(NotificationSendError, match="parse"):
            sink.send("Hello", "1234")

    def test_close_leaves_caller_session_open(self, session: MagicMock) -> None:
        """Test that a session passed in by the caller is not closed."""
        with GoogleChatSink(WEBHOOK, session=session):
            pass

        session.close.assert_not_called()

    def test_close_owned_session(self) -> None:
        """Test that a session created by the sink is closed on exit."""
        with patch("prnotifier.tools.chat.requests.Session") as mock_session_cls:
            with GoogleChatSink(WEBHOOK) as sink:
                assert sink.session is mock_session_cls.return_value

        mock_session_cls.return_value.close.assert_called_once_with()
