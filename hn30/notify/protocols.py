"""Protocol interface for notification sinks."""

from typing import Protocol, runtime_checkable

from hn30.source import Item


@runtime_checkable
class NotificationSink(Protocol):
    """Anything that can deliver a push notification for an item."""

    def send(self, item: Item) -> str:
        """Deliver one notification.

        Args:
            item: Item to announce.

        Returns:
            Provider-assigned notification id.

        Raises:
            NotificationError: If delivery fails.
        """
        ...
