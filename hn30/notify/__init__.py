"""Push notification delivery."""

from hn30.notify.dispatcher import NotificationDispatcher
from hn30.notify.errors import NotificationError
from hn30.notify.onesignal import ONESIGNAL_API_URL, OneSignalSink
from hn30.notify.protocols import NotificationSink


__all__ = [
    "ONESIGNAL_API_URL",
    "NotificationDispatcher",
    "NotificationError",
    "NotificationSink",
    "OneSignalSink",
]
