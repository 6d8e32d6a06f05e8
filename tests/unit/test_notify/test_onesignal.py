"""Unit tests for the OneSignal sink."""

import json

import httpx
import pytest

from hn30.notify import ONESIGNAL_API_URL, NotificationError, OneSignalSink
from tests.helpers.fakes import make_item


def _sink(handler) -> OneSignalSink:
    return OneSignalSink("app-1", "key-1", transport=httpx.MockTransport(handler))


class TestBuildPayload:
    """Tests for the request body."""

    def test_payload_fields(self) -> None:
        """Test the full notification payload."""
        sink = OneSignalSink("app-1", "key-1")
        item = make_item(77, title="Show HN: A thing")

        payload = sink.build_payload(item)

        assert payload == {
            "app_id": "app-1",
            "target_channel": "push",
            "included_segments": ["Total Subscriptions"],
            "headings": {"en": "Top Story on Hacker News"},
            "contents": {"en": "Show HN: A thing"},
            "url": "https://example.com/77?ref=hn30",
            "web_push_topic": "hn30_notifications-77",
            "priority": 10,
        }


class TestSend:
    """Tests for delivery."""

    def test_success_returns_notification_id(self) -> None:
        """Test that the id from the response is returned."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": "n-123", "external_id": None})

        notification_id = _sink(handler).send(make_item(1))

        assert notification_id == "n-123"
        assert str(seen[0].url) == ONESIGNAL_API_URL
        assert seen[0].headers["authorization"] == "Key key-1"
        assert json.loads(seen[0].content)["web_push_topic"] == "hn30_notifications-1"

    def test_rejected_request(self) -> None:
        """Test that a non-2xx status raises with the status code."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"errors": ["bad app id"]})

        with pytest.raises(NotificationError) as exc_info:
            _sink(handler).send(make_item(1))

        assert exc_info.value.status_code == 400

    def test_accepted_without_id(self) -> None:
        """Test that a response with no notification id is a failure."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, json={"id": "", "errors": ["All included players are not subscribed"]}
            )

        with pytest.raises(NotificationError, match="not subscribed"):
            _sink(handler).send(make_item(1))

    def test_transport_failure(self) -> None:
        """Test that network errors raise NotificationError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(NotificationError):
            _sink(handler).send(make_item(1))
