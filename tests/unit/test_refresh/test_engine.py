"""Unit tests for the refresh engine."""

import threading

import pytest

from hn30.cache import SnapshotCache
from hn30.ledger import LedgerError
from hn30.refresh import RefreshEngine, RefreshMetrics
from hn30.source import Item
from hn30.summarize import Summarizer
from tests.helpers.fakes import (
    FakeDispatcher,
    FakeEnricher,
    FakeLedger,
    FakeReplica,
    FakeSource,
    make_item,
)
from tests.helpers.time import FakeClock


class FailingUpsertLedger(FakeLedger):
    """Ledger whose writes always fail."""

    def upsert(self, item: Item) -> None:
        raise LedgerError("disk full")


class StaticExtractor:
    def extract(self, url: str) -> str:
        return "Article body."


class StaticModel:
    model = "static-model"

    def generate_content(self, prompt: str) -> str:
        return "S"


class SummarizingLedger(FakeLedger):
    """Ledger that lets a summary land while one item is being processed."""

    def __init__(self, summarizer: Summarizer, item_id: int) -> None:
        super().__init__()
        self.summarizer = summarizer
        self.item_id = item_id

    def upsert(self, item: Item) -> None:
        super().upsert(item)
        if item.id == self.item_id:
            self.summarizer.summarize(item.id)


class Harness:
    """Engine plus its fakes."""

    def __init__(self, ranking: list[int], top_n: int = 30) -> None:
        self.source = FakeSource(ranking, {i: make_item(i) for i in ranking})
        self.enricher = FakeEnricher()
        self.ledger = FakeLedger()
        self.dispatcher = FakeDispatcher()
        self.replica = FakeReplica()
        self.cache = SnapshotCache()
        self.clock = FakeClock()
        self.sleeps: list[float] = []
        self.top_n = top_n

    def engine(self) -> RefreshEngine:
        return RefreshEngine(
            source=self.source,
            enricher=self.enricher,
            ledger=self.ledger,
            dispatcher=self.dispatcher,
            cache=self.cache,
            replica=self.replica,
            top_n=self.top_n,
            sleep=self.sleeps.append,
            now=self.clock.now,
        )

    def ids(self) -> list[int]:
        return [entry.id for entry in self.cache.get_all()]


@pytest.fixture
def harness() -> Harness:
    return Harness([1, 2, 3])


class TestCycle:
    """Tests for a complete refresh cycle."""

    def test_populates_cache_in_ranking_order(self, harness: Harness) -> None:
        """Test that every ranked item is fetched, enriched and cached in order."""
        result = harness.engine().run_cycle()

        assert result.success
        assert result.error is None
        assert result.enriched == 3
        assert result.reused == 0
        assert harness.ids() == [1, 2, 3]
        assert harness.enricher.calls == [
            "https://example.com/1",
            "https://example.com/2",
            "https://example.com/3",
        ]
        entry = harness.cache.get(1)
        assert entry is not None
        assert entry.og_image == "https://example.com/1/og.png"

    def test_sets_last_updated_on_success(self, harness: Harness) -> None:
        """Test that the completion time is stamped."""
        harness.engine().run_cycle()

        assert harness.cache.last_updated() == harness.clock.now()

    def test_truncates_ranking_to_top_n(self) -> None:
        """Test that only the first top_n ids are used."""
        harness = Harness(list(range(1, 41)))

        result = harness.engine().run_cycle()

        assert result.ids_total == 40
        assert result.ids_used == 30
        assert harness.ids() == list(range(1, 31))
        assert 31 not in harness.source.item_calls

    def test_records_metrics(self, harness: Harness) -> None:
        """Test that the cycle is folded into the process metrics."""
        harness.engine().run_cycle()

        metrics = RefreshMetrics.get_instance().to_dict()
        assert metrics["cycles_total"] == 1
        assert metrics["items_enriched_total"] == 3

    def test_delay_after_each_processed_item(self) -> None:
        """Test that the pacing delay follows successes but not failures."""
        harness = Harness([1, 2, 3])
        harness.source.failing_ids = {2}

        harness.engine().run_cycle()

        assert harness.sleeps == [0.5, 0.5]


class TestRankingFailure:
    """Tests for a failed ranking fetch."""

    def test_prior_snapshot_untouched(self, harness: Harness) -> None:
        """Test that a ranking error leaves the cache exactly as it was."""
        engine = harness.engine()
        engine.run_cycle()
        before = harness.cache.get_all()
        stamped = harness.cache.last_updated()

        harness.source.fail_ranking = True
        harness.clock.advance(300)
        result = engine.run_cycle()

        assert not result.success
        assert result.error == "ranking unavailable"
        assert harness.cache.get_all() == before
        assert harness.cache.last_updated() == stamped
        assert RefreshMetrics.get_instance().cycles_failed == 1

    def test_replica_not_synced(self, harness: Harness) -> None:
        """Test that nothing is mirrored after a ranking failure."""
        harness.source.fail_ranking = True

        harness.engine().run_cycle()

        assert harness.replica.batches == []


class TestItemFailures:
    """Tests for per-item failure isolation."""

    def test_failed_item_skipped(self, harness: Harness) -> None:
        """Test that one failing id does not stop the others."""
        harness.source.failing_ids = {2}

        result = harness.engine().run_cycle()

        assert result.success
        assert result.failed == 1
        assert harness.ids() == [1, 3]

    def test_enrichment_failure_stores_empty_metadata(self, harness: Harness) -> None:
        """Test that an enrichment error still caches the item."""
        harness.enricher.failing_urls = {"https://example.com/2"}

        harness.engine().run_cycle()

        entry = harness.cache.get(2)
        assert entry is not None
        assert entry.og_image == ""
        assert entry.og_description == ""

    def test_ledger_failure_does_not_drop_item(self, harness: Harness) -> None:
        """Test that a ledger write error is logged and the item still cached."""
        harness.ledger = FailingUpsertLedger()

        result = harness.engine().run_cycle()

        assert result.success
        assert harness.ids() == [1, 2, 3]


class TestReuse:
    """Tests for enrichment reuse across cycles."""

    def test_unchanged_url_reuses_enrichment(self, harness: Harness) -> None:
        """Test that a second cycle skips enrichment and updates stats."""
        engine = harness.engine()
        engine.run_cycle()
        first = harness.cache.get(1)
        assert first is not None

        harness.source.items[1] = make_item(1, score=250, descendants=40)
        result = engine.run_cycle()

        second = harness.cache.get(1)
        assert second is not None
        assert result.reused == 3
        assert result.enriched == 0
        assert len(harness.enricher.calls) == 3
        assert second.og_image == first.og_image
        assert second.og_description == first.og_description
        assert second.item.score == 250
        assert second.item.descendants == 40

    def test_changed_url_reenriches(self, harness: Harness) -> None:
        """Test that a new URL for the same id triggers enrichment."""
        engine = harness.engine()
        engine.run_cycle()

        harness.source.items[2] = make_item(2, url="https://other.example/post")
        result = engine.run_cycle()

        entry = harness.cache.get(2)
        assert entry is not None
        assert result.enriched == 1
        assert entry.og_image == "https://other.example/post/og.png"

    def test_reuse_keeps_summary(self, harness: Harness) -> None:
        """Test that a generated summary survives a refresh."""
        engine = harness.engine()
        engine.run_cycle()
        entry = harness.cache.get(3)
        assert entry is not None
        harness.cache.upsert(3, entry.model_copy(update={"summary": "S"}))

        engine.run_cycle()

        refreshed = harness.cache.get(3)
        assert refreshed is not None
        assert refreshed.summary == "S"

    def test_reuse_keeps_summary_written_mid_cycle(self, harness: Harness) -> None:
        """Test that a summary stored while an item is processed is not lost."""
        engine = harness.engine()
        engine.run_cycle()
        summarizer = Summarizer(harness.cache, StaticExtractor(), StaticModel())
        harness.ledger = SummarizingLedger(summarizer, item_id=3)
        harness.source.items[3] = make_item(3, score=321)

        result = harness.engine().run_cycle()

        refreshed = harness.cache.get(3)
        assert result.reused == 3
        assert refreshed is not None
        assert refreshed.summary == "S"
        assert refreshed.summary_model == "static-model"
        assert refreshed.article_text == "Article body."
        assert refreshed.item.score == 321

    def test_ranking_change_prunes_and_adds(self) -> None:
        """Test that [5, 6] followed by [6, 7] leaves exactly 6 and 7."""
        harness = Harness([5, 6])
        engine = harness.engine()
        engine.run_cycle()

        harness.source.ranking = [6, 7]
        harness.source.items[7] = make_item(7)
        engine.run_cycle()

        assert harness.ids() == [6, 7]
        assert harness.cache.get(5) is None
        assert harness.enricher.calls.count("https://example.com/6") == 1


class TestUrlFallback:
    """Tests for items without an external URL."""

    def test_missing_url_uses_discussion_page(self) -> None:
        """Test that a text post is enriched from its discussion page."""
        harness = Harness([9])
        harness.source.items[9] = make_item(9, url="")

        harness.engine().run_cycle()

        entry = harness.cache.get(9)
        assert entry is not None
        assert entry.url == "https://news.ycombinator.com/item?id=9"
        assert harness.enricher.calls == ["https://news.ycombinator.com/item?id=9"]

    def test_missing_url_reused_on_next_cycle(self) -> None:
        """Test that the fallback URL compares equal across cycles."""
        harness = Harness([9])
        harness.source.items[9] = make_item(9, url="")
        engine = harness.engine()

        engine.run_cycle()
        result = engine.run_cycle()

        assert result.reused == 1
        assert len(harness.enricher.calls) == 1


class TestNotifications:
    """Tests for the notify-once decision."""

    def test_eligible_item_notified_once_across_cycles(self) -> None:
        """Test that a hot item is dispatched in one cycle only."""
        harness = Harness([1, 2])
        harness.source.items[1] = make_item(1, score=700)
        engine = harness.engine()

        first = engine.run_cycle()
        second = engine.run_cycle()

        assert [item.id for item in harness.dispatcher.dispatched] == [1]
        assert first.notified == 1
        assert second.notified == 0
        assert harness.ledger.rows[1]["notified_at"] is not None

    def test_low_score_not_notified(self, harness: Harness) -> None:
        """Test that items under the score threshold are not dispatched."""
        harness.engine().run_cycle()

        assert harness.dispatcher.dispatched == []

    def test_young_item_not_notified(self) -> None:
        """Test that a fresh item waits for the minimum age."""
        harness = Harness([1])
        harness.source.items[1] = make_item(1, score=900, time=1_700_099_000)

        harness.engine().run_cycle()

        assert harness.dispatcher.dispatched == []

    def test_every_item_recorded_in_ledger(self, harness: Harness) -> None:
        """Test that each processed item is upserted, reused or not."""
        engine = harness.engine()
        engine.run_cycle()
        engine.run_cycle()

        assert harness.ledger.upserts == [1, 2, 3, 1, 2, 3]


class TestReplica:
    """Tests for the best-effort mirror."""

    def test_synced_with_ranked_items(self, harness: Harness) -> None:
        """Test that the replica receives the cached items in order."""
        harness.source.failing_ids = {2}

        harness.engine().run_cycle()

        assert harness.replica.batches == [[1, 3]]

    def test_replica_failure_does_not_fail_cycle(self, harness: Harness) -> None:
        """Test that a mirror error is logged and ignored."""
        harness.replica.fail = True

        result = harness.engine().run_cycle()

        assert result.success
        assert harness.ids() == [1, 2, 3]


class TestStop:
    """Tests for interrupting a cycle."""

    def test_stop_event_interrupts_between_items(self, harness: Harness) -> None:
        """Test that a set stop event ends the cycle without finishing it."""
        stop_event = threading.Event()
        stop_event.set()

        result = harness.engine().run_cycle(stop_event=stop_event)

        assert not result.success
        assert result.error == "stopped"
        assert harness.cache.last_updated() is None
        assert harness.source.item_calls == []
