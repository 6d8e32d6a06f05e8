"""Process-wide refresh counters."""

import threading
from dataclasses import dataclass, field
from typing import ClassVar

from hn30.refresh.models import CycleResult


@dataclass
class RefreshMetrics:
    """Counters accumulated across refresh cycles.

    Singleton; written by the refresh worker, read by the health endpoint.
    """

    cycles_total: int = 0
    cycles_failed: int = 0
    items_reused_total: int = 0
    items_enriched_total: int = 0
    items_failed_total: int = 0
    notifications_total: int = 0
    last_cycle_duration_ms: float = 0.0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    _instance: ClassVar["RefreshMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "RefreshMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_cycle(self, result: CycleResult) -> None:
        """Fold one cycle result into the counters.

        Args:
            result: Finished cycle.
        """
        with self._lock:
            self.cycles_total += 1
            if not result.success:
                self.cycles_failed += 1
            self.items_reused_total += result.reused
            self.items_enriched_total += result.enriched
            self.items_failed_total += result.failed
            self.notifications_total += result.notified
            self.last_cycle_duration_ms = result.duration_ms

    def to_dict(self) -> dict[str, int | float]:
        """Convert metrics to dictionary."""
        with self._lock:
            return {
                "cycles_total": self.cycles_total,
                "cycles_failed": self.cycles_failed,
                "items_reused_total": self.items_reused_total,
                "items_enriched_total": self.items_enriched_total,
                "items_failed_total": self.items_failed_total,
                "notifications_total": self.notifications_total,
                "last_cycle_duration_ms": self.last_cycle_duration_ms,
            }
