"""In-memory snapshot of the current ranked, enriched items."""

import threading
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType

import structlog

from hn30.cache.models import EnrichedItem


logger = structlog.get_logger()


@dataclass(frozen=True)
class _State:
    """Immutable ranking plus entries. Replaced wholesale on every write."""

    ids: tuple[int, ...] = ()
    items: Mapping[int, EnrichedItem] = field(
        default_factory=lambda: MappingProxyType({})
    )


class SnapshotCache:
    """Concurrent read-optimized store of the current enriched set.

    Writers serialize on a lock and publish a new immutable ``_State``;
    readers take a single reference read and never block. Each write
    operation is its own atomic step, so a refresh in progress is seen by
    readers as a series of discrete updates.

    Invariant: ``items`` never holds an id outside ``ids`` once
    ``replace_ranking`` has run; ``upsert`` may add an unranked id
    transiently until the next ``replace_ranking``.
    """

    def __init__(self) -> None:
        self._state = _State()
        self._last_updated: datetime | None = None
        self._write_lock = threading.Lock()
        self._log = logger.bind(component="cache")

    def replace_ranking(self, ids: Iterable[int]) -> None:
        """Swap the ranking and prune entries that fell out of it.

        Args:
            ids: New ranking in order.
        """
        new_ids = tuple(ids)
        keep = set(new_ids)

        with self._write_lock:
            current = self._state
            removed = [i for i in current.items if i not in keep]
            if removed:
                items = {k: v for k, v in current.items.items() if k in keep}
                self._state = _State(ids=new_ids, items=MappingProxyType(items))
            else:
                self._state = _State(ids=new_ids, items=current.items)

        for item_id in removed:
            self._log.info("cache_entry_pruned", story_id=item_id)

    def upsert(self, item_id: int, item: EnrichedItem) -> None:
        """Insert or fully replace the entry for an id.

        Args:
            item_id: Entry key.
            item: Value to store.
        """
        with self._write_lock:
            current = self._state
            items = dict(current.items)
            items[item_id] = item
            self._state = _State(ids=current.ids, items=MappingProxyType(items))

    def update(
        self,
        item_id: int,
        fn: Callable[[EnrichedItem | None], EnrichedItem | None],
    ) -> EnrichedItem | None:
        """Atomically read, modify and write one entry.

        ``fn`` runs under the write lock with the current entry (or None)
        and must not block. Returning None leaves the entry untouched.

        Args:
            item_id: Entry key.
            fn: Maps the current entry to its replacement.

        Returns:
            The entry stored after the call.
        """
        with self._write_lock:
            current = self._state
            replacement = fn(current.items.get(item_id))
            if replacement is None:
                return current.items.get(item_id)
            items = dict(current.items)
            items[item_id] = replacement
            self._state = _State(ids=current.ids, items=MappingProxyType(items))
            return replacement

    def get(self, item_id: int) -> EnrichedItem | None:
        """Look up one entry.

        Args:
            item_id: Entry key.

        Returns:
            The cached entry, or None if absent.
        """
        return self._state.items.get(item_id)

    def get_all(self) -> list[EnrichedItem]:
        """Return entries in ranking order, skipping ids with no entry.

        Returns:
            Cached entries for the current ranking.
        """
        state = self._state
        result: list[EnrichedItem] = []
        for item_id in state.ids:
            entry = state.items.get(item_id)
            if entry is None:
                self._log.info("cache_miss", story_id=item_id)
                continue
            result.append(entry)
        return result

    @property
    def ranking(self) -> tuple[int, ...]:
        """Current ranking."""
        return self._state.ids

    def __len__(self) -> int:
        return len(self._state.items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._state.items

    def set_last_updated(self, when: datetime) -> None:
        """Record the completion time of a refresh cycle.

        Args:
            when: Completion timestamp.
        """
        with self._write_lock:
            self._last_updated = when

    def last_updated(self) -> datetime | None:
        """Completion time of the last refresh cycle, None before the first."""
        return self._last_updated
