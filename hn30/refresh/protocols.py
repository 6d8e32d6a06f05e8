"""Collaborator interfaces used by the refresh engine.

Any object with matching methods can be injected; tests use in-memory fakes.
"""

from collections.abc import Sequence
from typing import Protocol

from hn30.enrich import OpenGraphData
from hn30.source import Item


class RemoteSource(Protocol):
    """Ranked id list and per-id item details."""

    def top_story_ids(self) -> list[int]: ...

    def item(self, item_id: int) -> Item: ...


class ContentEnricher(Protocol):
    """Secondary metadata for a URL. Raises only on transport/parse failure."""

    def enrich(self, url: str) -> OpenGraphData: ...


class PersistentLedger(Protocol):
    """Durable notify-once state."""

    def upsert(self, item: Item) -> None: ...

    def is_eligible(self, item_id: int) -> bool: ...

    def mark_notified(self, item_id: int) -> bool: ...


class Dispatcher(Protocol):
    """Fire-and-forget notification delivery."""

    def dispatch(self, item: Item) -> object: ...


class ReplicaSink(Protocol):
    """Best-effort mirror of the ranked items."""

    def sync(self, items: Sequence[Item]) -> None: ...
