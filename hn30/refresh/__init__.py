"""Refresh cycle engine and scheduling."""

from hn30.refresh.constants import ITEM_DELAY_SECONDS, REFRESH_INTERVAL_SECONDS, TOP_N
from hn30.refresh.engine import RefreshEngine
from hn30.refresh.metrics import RefreshMetrics
from hn30.refresh.models import CycleResult, ItemOutcome
from hn30.refresh.protocols import (
    ContentEnricher,
    Dispatcher,
    PersistentLedger,
    RemoteSource,
    ReplicaSink,
)
from hn30.refresh.scheduler import RefreshScheduler
from hn30.refresh.state_machine import CycleState, CycleStateError, CycleStateMachine


__all__ = [
    "ITEM_DELAY_SECONDS",
    "REFRESH_INTERVAL_SECONDS",
    "TOP_N",
    "ContentEnricher",
    "CycleResult",
    "CycleState",
    "CycleStateError",
    "CycleStateMachine",
    "Dispatcher",
    "ItemOutcome",
    "PersistentLedger",
    "RefreshEngine",
    "RefreshMetrics",
    "RefreshScheduler",
    "RemoteSource",
    "ReplicaSink",
]
