"""Detached notification dispatch."""

import time
import uuid
from concurrent.futures import Future, ThreadPoolExecutor

import structlog

from hn30.notify.protocols import NotificationSink
from hn30.source import Item


logger = structlog.get_logger()


class NotificationDispatcher:
    """Hands notifications to a small background pool and returns at once.

    The outcome of a dispatch is only logged. With no sink configured,
    dispatch is a logged no-op.
    """

    def __init__(self, sink: NotificationSink | None, max_workers: int = 2) -> None:
        """Initialize the dispatcher.

        Args:
            sink: Delivery backend, or None when notifications are disabled.
            max_workers: Size of the background pool.
        """
        self._sink = sink
        self._executor = (
            ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="hn30-notify")
            if sink is not None
            else None
        )
        self._log = logger.bind(component="notify")

    @property
    def enabled(self) -> bool:
        """Whether a sink is configured."""
        return self._sink is not None

    def dispatch(self, item: Item) -> Future[str] | None:
        """Schedule delivery without waiting for it.

        Args:
            item: Item to announce.

        Returns:
            The pending delivery, or None if disabled or shut down.
        """
        job_id = str(uuid.uuid4())
        log = self._log.bind(job_id=job_id, story_id=item.id)

        if self._sink is None or self._executor is None:
            log.info("notification_dispatch_disabled")
            return None

        try:
            future = self._executor.submit(self._deliver, self._sink, item, job_id)
        except RuntimeError:
            log.warning("notification_dispatch_after_shutdown")
            return None

        log.info("notification_dispatched", story_title=item.title)
        return future

    def _deliver(self, sink: NotificationSink, item: Item, job_id: str) -> str:
        log = self._log.bind(job_id=job_id, story_id=item.id)
        start_ns = time.perf_counter_ns()
        try:
            notification_id = sink.send(item)
        except Exception as e:
            log.error(
                "notification_send_failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=round((time.perf_counter_ns() - start_ns) / 1_000_000, 2),
            )
            raise

        log.info(
            "notification_sent",
            notification_id=notification_id,
            duration_ms=round((time.perf_counter_ns() - start_ns) / 1_000_000, 2),
        )
        return notification_id

    def close(self, wait: bool = False) -> None:
        """Stop accepting work.

        Args:
            wait: Block until queued deliveries finish.
        """
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None
