"""OneSignal REST notification sink."""

import httpx
import structlog

from hn30.notify.errors import NotificationError
from hn30.source import Item


logger = structlog.get_logger()

ONESIGNAL_API_URL = "https://api.onesignal.com/notifications"
NOTIFICATION_TIMEOUT_SECONDS = 10.0
NOTIFICATION_HEADING = "Top Story on Hacker News"
NOTIFICATION_SEGMENT = "Total Subscriptions"
REF_SUFFIX = "?ref=hn30"


class OneSignalSink:
    """Sends web push notifications through the OneSignal REST API."""

    def __init__(
        self,
        app_id: str,
        api_key: str,
        transport: httpx.BaseTransport | None = None,
        timeout: float = NOTIFICATION_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the sink.

        Args:
            app_id: OneSignal application id.
            api_key: OneSignal REST API key.
            transport: Optional httpx transport for tests.
            timeout: Request timeout in seconds.
        """
        self._app_id = app_id
        self._api_key = api_key
        self._transport = transport
        self._timeout = timeout
        self._log = logger.bind(component="notify", provider="onesignal")

    def build_payload(self, item: Item) -> dict[str, object]:
        """Build the notification request body.

        Args:
            item: Item to announce.

        Returns:
            JSON-serializable payload.
        """
        return {
            "app_id": self._app_id,
            "target_channel": "push",
            "included_segments": [NOTIFICATION_SEGMENT],
            "headings": {"en": NOTIFICATION_HEADING},
            "contents": {"en": item.title},
            "url": item.url + REF_SUFFIX,
            # One topic per item so notifications never replace each other.
            "web_push_topic": f"hn30_notifications-{item.id}",
            "priority": 10,
        }

    def send(self, item: Item) -> str:
        """Deliver one notification.

        Args:
            item: Item to announce.

        Returns:
            OneSignal notification id.

        Raises:
            NotificationError: If the request fails or is rejected.
        """
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(
                    ONESIGNAL_API_URL,
                    headers={"Authorization": f"Key {self._api_key}"},
                    json=self.build_payload(item),
                )
        except httpx.HTTPError as e:
            msg = f"OneSignal request failed: {e}"
            raise NotificationError(msg) from e

        if not response.is_success:
            msg = f"OneSignal returned {response.status_code}"
            raise NotificationError(msg, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            msg = "OneSignal returned malformed JSON"
            raise NotificationError(msg, status_code=response.status_code) from e

        notification_id = str(data.get("id") or "")
        if not notification_id:
            errors = data.get("errors")
            msg = f"OneSignal accepted no notification: {errors}"
            raise NotificationError(msg, status_code=response.status_code)

        return notification_id
