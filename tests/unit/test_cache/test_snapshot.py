"""Unit tests for the snapshot cache."""

import threading
from datetime import UTC, datetime

from hn30.cache import EnrichedItem, SnapshotCache
from tests.helpers.fakes import make_item


def _entry(item_id: int, **overrides: object) -> EnrichedItem:
    return EnrichedItem(item=make_item(item_id, **overrides))


class TestReplaceRanking:
    """Tests for ranking replacement and pruning."""

    def test_prunes_entries_outside_new_ranking(self) -> None:
        """Test that ids dropped from the ranking lose their entries."""
        cache = SnapshotCache()
        cache.replace_ranking([1, 2, 3])
        for i in (1, 2, 3):
            cache.upsert(i, _entry(i))

        cache.replace_ranking([2, 3, 4])

        assert cache.get(1) is None
        assert cache.get(2) is not None
        assert cache.get(3) is not None
        assert len(cache) == 2

    def test_empty_ranking_clears_everything(self) -> None:
        """Test that an empty ranking leaves an empty cache."""
        cache = SnapshotCache()
        cache.replace_ranking([1])
        cache.upsert(1, _entry(1))

        cache.replace_ranking([])

        assert cache.get_all() == []
        assert len(cache) == 0

    def test_ranking_property_tracks_order(self) -> None:
        """Test that the stored ranking keeps the given order."""
        cache = SnapshotCache()
        cache.replace_ranking([9, 3, 5])

        assert cache.ranking == (9, 3, 5)


class TestUpsertAndGet:
    """Tests for entry writes and lookups."""

    def test_get_missing_returns_none(self) -> None:
        """Test that an absent id reads as None."""
        assert SnapshotCache().get(42) is None

    def test_upsert_is_idempotent(self) -> None:
        """Test that repeating an upsert leaves the same visible state."""
        cache = SnapshotCache()
        cache.replace_ranking([1])
        entry = _entry(1)

        cache.upsert(1, entry)
        cache.upsert(1, entry)

        assert cache.get(1) == entry
        assert len(cache) == 1

    def test_upsert_replaces_whole_entry(self) -> None:
        """Test that an upsert overwrites the previous value."""
        cache = SnapshotCache()
        cache.upsert(1, _entry(1, title="Old"))
        cache.upsert(1, _entry(1, title="New"))

        entry = cache.get(1)
        assert entry is not None
        assert entry.item.title == "New"

    def test_unranked_upsert_is_visible_until_next_ranking(self) -> None:
        """Test that an upsert for an unranked id survives until pruned."""
        cache = SnapshotCache()
        cache.replace_ranking([1])
        cache.upsert(7, _entry(7))

        assert 7 in cache
        assert [e.id for e in cache.get_all()] == []

        cache.replace_ranking([1])
        assert 7 not in cache


class TestUpdate:
    """Tests for atomic read-modify-write."""

    def test_applies_function_to_current_entry(self) -> None:
        """Test that the function sees the stored entry and its result is stored."""
        cache = SnapshotCache()
        cache.upsert(1, _entry(1, score=10))

        stored = cache.update(1, lambda current: current.with_stats(99, 5))

        assert stored is not None
        assert stored.item.score == 99
        assert cache.get(1) == stored

    def test_none_result_leaves_entry_untouched(self) -> None:
        """Test that returning None is a no-op."""
        cache = SnapshotCache()
        entry = _entry(1)
        cache.upsert(1, entry)

        stored = cache.update(1, lambda current: None)

        assert stored == entry
        assert cache.get(1) == entry

    def test_absent_entry_passed_as_none(self) -> None:
        """Test that an absent id reaches the function as None."""
        cache = SnapshotCache()
        seen: list[EnrichedItem | None] = []

        def record(current: EnrichedItem | None) -> EnrichedItem | None:
            seen.append(current)
            return None

        assert cache.update(5, record) is None
        assert seen == [None]
        assert 5 not in cache

    def test_concurrent_updates_are_not_lost(self) -> None:
        """Test that parallel increments through update all land."""
        cache = SnapshotCache()
        cache.upsert(1, _entry(1, score=0))

        def bump() -> None:
            for _ in range(200):
                cache.update(
                    1,
                    lambda current: current.with_stats(
                        current.item.score + 1, current.item.descendants
                    ),
                )

        threads = [threading.Thread(target=bump) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        entry = cache.get(1)
        assert entry is not None
        assert entry.item.score == 800


class TestGetAll:
    """Tests for ordered reads."""

    def test_returns_ranking_order(self) -> None:
        """Test that entries come back in ranking order, not insert order."""
        cache = SnapshotCache()
        cache.replace_ranking([3, 1, 2])
        for i in (1, 2, 3):
            cache.upsert(i, _entry(i))

        assert [e.id for e in cache.get_all()] == [3, 1, 2]

    def test_skips_ids_without_entry(self) -> None:
        """Test that ranked ids with no entry are skipped."""
        cache = SnapshotCache()
        cache.replace_ranking([1, 2, 3])
        cache.upsert(1, _entry(1))
        cache.upsert(3, _entry(3))

        assert [e.id for e in cache.get_all()] == [1, 3]

    def test_returned_list_is_detached(self) -> None:
        """Test that mutating the returned list does not affect the cache."""
        cache = SnapshotCache()
        cache.replace_ranking([1])
        cache.upsert(1, _entry(1))

        snapshot = cache.get_all()
        snapshot.clear()

        assert len(cache.get_all()) == 1


class TestLastUpdated:
    """Tests for the refresh timestamp."""

    def test_none_before_first_refresh(self) -> None:
        """Test that the timestamp is unset initially."""
        assert SnapshotCache().last_updated() is None

    def test_set_and_read(self) -> None:
        """Test that the recorded time is returned."""
        cache = SnapshotCache()
        when = datetime(2024, 1, 1, tzinfo=UTC)
        cache.set_last_updated(when)

        assert cache.last_updated() == when


class TestConcurrency:
    """Tests for concurrent readers and writers."""

    def test_readers_never_see_unranked_entries(self) -> None:
        """Test that every read is a consistent subset of some ranking."""
        cache = SnapshotCache()
        rankings = [list(range(start, start + 10)) for start in range(0, 50, 5)]
        errors: list[str] = []
        done = threading.Event()

        def writer() -> None:
            for ranking in rankings:
                cache.replace_ranking(ranking)
                for i in ranking:
                    cache.upsert(i, _entry(i))
            done.set()

        def reader() -> None:
            while not done.is_set():
                ids = [e.id for e in cache.get_all()]
                if len(ids) != len(set(ids)):
                    errors.append(f"duplicate ids: {ids}")

        threads = [threading.Thread(target=reader) for _ in range(4)]
        for t in threads:
            t.start()
        writer()
        for t in threads:
            t.join()

        assert errors == []
        assert [e.id for e in cache.get_all()] == rankings[-1]
