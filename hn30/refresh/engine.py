"""Refresh cycle orchestration."""

import threading
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

import structlog

from hn30.cache import EnrichedItem, SnapshotCache
from hn30.enrich import EnrichmentError, OpenGraphData
from hn30.ledger import LedgerError
from hn30.observability import bind_cycle_context, clear_cycle_context
from hn30.refresh.constants import ITEM_DELAY_SECONDS, TOP_N
from hn30.refresh.metrics import RefreshMetrics
from hn30.refresh.models import CycleResult, ItemOutcome
from hn30.refresh.protocols import (
    ContentEnricher,
    Dispatcher,
    PersistentLedger,
    RemoteSource,
    ReplicaSink,
)
from hn30.refresh.state_machine import CycleState, CycleStateMachine
from hn30.source import Item, SourceError, item_page_url


logger = structlog.get_logger()


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _patch_stats(
    current: EnrichedItem | None, fallback: EnrichedItem, item: Item
) -> EnrichedItem:
    """Apply fresh stats to whatever is cached now, keeping later writes."""
    if current is None or current.url != item.url:
        return fallback
    return current.with_stats(item.score, item.descendants)


@dataclass
class _Tally:
    reused: int = 0
    enriched: int = 0
    failed: int = 0
    notified: int = 0


class RefreshEngine:
    """Runs refresh cycles against the snapshot cache.

    A cycle fetches the ranking, swaps it into the cache, then fetches,
    enriches (or reuses), records and possibly notifies for each id in
    order, writing each result to the cache as it goes. Every error is
    absorbed here: a ranking failure ends the cycle with the prior
    snapshot untouched, an item failure skips that id.
    """

    def __init__(
        self,
        source: RemoteSource,
        enricher: ContentEnricher,
        ledger: PersistentLedger,
        dispatcher: Dispatcher,
        cache: SnapshotCache,
        replica: ReplicaSink | None = None,
        top_n: int = TOP_N,
        item_delay_seconds: float = ITEM_DELAY_SECONDS,
        sleep: Callable[[float], object] = time.sleep,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize the engine.

        Args:
            source: Ranking and item source.
            enricher: Secondary metadata provider.
            ledger: Durable notify-once state.
            dispatcher: Notification dispatcher.
            cache: Snapshot cache to populate.
            replica: Optional best-effort mirror.
            top_n: Ranking truncation.
            item_delay_seconds: Delay between items.
            sleep: Sleep function for the inter-item delay.
            now: Wall clock.
        """
        self._source = source
        self._enricher = enricher
        self._ledger = ledger
        self._dispatcher = dispatcher
        self._cache = cache
        self._replica = replica
        self._top_n = top_n
        self._item_delay_seconds = item_delay_seconds
        self._sleep = sleep
        self._now = now
        self._metrics = RefreshMetrics.get_instance()
        self._log = logger.bind(component="refresh")

    @property
    def cache(self) -> SnapshotCache:
        """The cache this engine writes to."""
        return self._cache

    def run_cycle(self, stop_event: threading.Event | None = None) -> CycleResult:
        """Run one refresh cycle.

        Args:
            stop_event: When set, remaining items are skipped and the
                inter-item delay returns early.

        Returns:
            Summary of the cycle. Never raises for upstream failures.
        """
        cycle_id = str(uuid.uuid4())
        bind_cycle_context(cycle_id)
        try:
            result = self._run(cycle_id, stop_event)
        finally:
            clear_cycle_context()

        self._metrics.record_cycle(result)
        return result

    def _run(self, cycle_id: str, stop_event: threading.Event | None) -> CycleResult:
        started_at = self._now()
        start_ns = time.perf_counter_ns()
        machine = CycleStateMachine(cycle_id)
        tally = _Tally()

        def finish(
            error: str | None, ids_total: int = 0, ids_used: int = 0
        ) -> CycleResult:
            duration_ms = (time.perf_counter_ns() - start_ns) / 1_000_000
            return CycleResult(
                cycle_id=cycle_id,
                started_at=started_at,
                finished_at=self._now(),
                success=machine.is_success(),
                error=error,
                ids_total=ids_total,
                ids_used=ids_used,
                reused=tally.reused,
                enriched=tally.enriched,
                failed=tally.failed,
                notified=tally.notified,
                duration_ms=round(duration_ms, 2),
            )

        self._log.info("cache_refresh_started")
        machine.transition(CycleState.FETCHING_RANKING)

        try:
            all_ids = self._source.top_story_ids()
        except SourceError as e:
            machine.fail()
            self._log.error(
                "cache_refresh_failed", stage="get_top_story_ids", error=str(e)
            )
            return finish(str(e))

        top_ids = all_ids[: self._top_n]
        self._cache.replace_ranking(top_ids)
        self._log.info(
            "top_story_ids_fetched", total_ids=len(all_ids), used_ids=len(top_ids)
        )

        machine.transition(CycleState.PROCESSING_ITEMS)
        for item_id in top_ids:
            if stop_event is not None and stop_event.is_set():
                machine.fail()
                self._log.warning("cache_refresh_interrupted", story_id=item_id)
                return finish("stopped", len(all_ids), len(top_ids))

            outcome, notified = self._process_item(item_id)
            if outcome is ItemOutcome.REUSED:
                tally.reused += 1
            elif outcome is ItemOutcome.ENRICHED:
                tally.enriched += 1
            else:
                tally.failed += 1
                continue
            if notified:
                tally.notified += 1

            if stop_event is not None:
                stop_event.wait(self._item_delay_seconds)
            else:
                self._sleep(self._item_delay_seconds)

        machine.transition(CycleState.FINALIZING)
        self._cache.set_last_updated(self._now())
        self._sync_replica(top_ids)
        machine.transition(CycleState.CYCLE_FINISHED_SUCCESS)

        result = finish(None, len(all_ids), len(top_ids))
        self._log.info(
            "cache_refresh_completed",
            duration_ms=result.duration_ms,
            stories_processed=result.processed,
            stories_reused=result.reused,
            stories_failed=result.failed,
            notified=result.notified,
        )
        return result

    def _process_item(self, item_id: int) -> tuple[ItemOutcome, bool]:
        """Fetch, enrich or reuse, record, notify and cache one id.

        Args:
            item_id: Ranked id.

        Returns:
            Outcome and whether a notification was dispatched.
        """
        start_ns = time.perf_counter_ns()
        log = self._log.bind(story_id=item_id)

        try:
            item = self._source.item(item_id)
        except SourceError as e:
            log.warning(
                "story_processing_failed", stage="get_story_details", error=str(e)
            )
            return ItemOutcome.FAILED, False

        try:
            url_was_missing = not item.has_url
            if url_was_missing:
                item = item.model_copy(update={"url": item_page_url(item_id)})

            existing = self._cache.get(item_id)
            if existing is not None and existing.url == item.url:
                outcome = ItemOutcome.REUSED
                entry = existing.with_stats(item.score, item.descendants)
            else:
                outcome = ItemOutcome.ENRICHED
                og = self._enrich(item)
                entry = EnrichedItem(
                    item=item,
                    og_image=og.image,
                    og_description=og.description,
                )

            self._record(item)
            notified = self._notify_if_eligible(entry.item)
            if outcome is ItemOutcome.REUSED:
                patched = entry
                entry = self._cache.update(
                    item_id, lambda current: _patch_stats(current, patched, item)
                ) or patched
            else:
                self._cache.upsert(item_id, entry)
        except Exception as e:  # noqa: BLE001
            log.error(
                "story_processing_failed",
                stage="process",
                error=str(e),
                error_type=type(e).__name__,
            )
            return ItemOutcome.FAILED, False

        log.info(
            "story_skipped_cached" if outcome is ItemOutcome.REUSED else "story_processed",
            url=item.url,
            url_was_missing=url_was_missing,
            score=item.score,
            descendants=item.descendants,
            og_image_present=bool(entry.og_image),
            og_description_present=bool(entry.og_description),
            notified=notified,
            duration_ms=round((time.perf_counter_ns() - start_ns) / 1_000_000, 2),
        )
        return outcome, notified

    def _enrich(self, item: Item) -> OpenGraphData:
        try:
            return self._enricher.enrich(item.url)
        except EnrichmentError as e:
            self._log.warning(
                "og_fetch_failed", story_id=item.id, url=item.url, error=str(e)
            )
            return OpenGraphData()

    def _record(self, item: Item) -> None:
        try:
            self._ledger.upsert(item)
        except LedgerError as e:
            self._log.error("story_upsert_failed", story_id=item.id, error=str(e))

    def _notify_if_eligible(self, item: Item) -> bool:
        """Mark then dispatch, at most once per id.

        The marker is written on this path before dispatch, so a slow or
        failing sink can never cause a second attempt.
        """
        if not self._ledger.is_eligible(item.id):
            return False

        try:
            newly_marked = self._ledger.mark_notified(item.id)
        except LedgerError as e:
            self._log.error("mark_notified_failed", story_id=item.id, error=str(e))
            return False

        if not newly_marked:
            return False

        self._dispatcher.dispatch(item)
        return True

    def _sync_replica(self, top_ids: list[int]) -> None:
        if self._replica is None:
            return

        items = [entry.item for i in top_ids if (entry := self._cache.get(i))]
        try:
            self._replica.sync(items)
        except Exception as e:  # noqa: BLE001
            self._log.warning("replica_sync_failed", error=str(e))
