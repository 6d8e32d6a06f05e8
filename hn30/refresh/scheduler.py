"""Background refresh worker."""

import threading

import structlog

from hn30.refresh.constants import REFRESH_INTERVAL_SECONDS
from hn30.refresh.engine import RefreshEngine


logger = structlog.get_logger()


class RefreshScheduler:
    """Runs refresh cycles on a single daemon thread.

    The first cycle starts immediately; the interval is measured from the
    end of one cycle to the start of the next, so cycles never overlap.
    """

    def __init__(
        self,
        engine: RefreshEngine,
        interval_seconds: float = REFRESH_INTERVAL_SECONDS,
    ) -> None:
        """Initialize the scheduler.

        Args:
            engine: Engine that runs each cycle.
            interval_seconds: Pause between cycles.
        """
        self._engine = engine
        self._interval_seconds = interval_seconds
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._cycles_run = 0
        self._log = logger.bind(component="scheduler")

    @property
    def is_running(self) -> bool:
        """Whether the worker thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    @property
    def cycles_run(self) -> int:
        """Number of cycles started so far."""
        return self._cycles_run

    def start(self) -> None:
        """Start the worker thread. No-op if already running."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._loop, name="hn30-refresh", daemon=True
        )
        self._thread.start()
        self._log.info(
            "cache_refresher_started", interval_seconds=self._interval_seconds
        )

    def stop(self, timeout: float | None = 5.0) -> None:
        """Ask the worker to stop and wait briefly for it.

        An in-progress cycle is interrupted between items; the thread is a
        daemon, so shutdown never blocks on a hanging upstream call.

        Args:
            timeout: Seconds to wait for the thread to exit.
        """
        self._stop_event.set()
        if self._thread is None:
            return

        self._thread.join(timeout)
        if self._thread.is_alive():
            self._log.warning("cache_refresher_stop_timeout", timeout=timeout)
        else:
            self._log.info("cache_refresher_stopped", cycles_run=self._cycles_run)
        self._thread = None

    def _loop(self) -> None:
        while not self._stop_event.is_set():
            self._cycles_run += 1
            try:
                self._engine.run_cycle(stop_event=self._stop_event)
            except Exception as e:  # noqa: BLE001
                self._log.error(
                    "cache_refresh_crashed",
                    error=str(e),
                    error_type=type(e).__name__,
                )

            if self._stop_event.wait(self._interval_seconds):
                break
