"""Notification ledger (SQLite) and its secondary replica."""

from hn30.ledger.constants import NOTIFY_MIN_AGE_SECONDS, NOTIFY_MIN_SCORE
from hn30.ledger.errors import (
    LedgerConnectionError,
    LedgerError,
    MigrationError,
    ReplicaError,
)
from hn30.ledger.migrations import CURRENT_VERSION, MigrationManager
from hn30.ledger.models import LedgerRecord, LedgerStats
from hn30.ledger.replica import TursoReplica, extract_domain, to_http_url
from hn30.ledger.store import LedgerStore


__all__ = [
    "CURRENT_VERSION",
    "NOTIFY_MIN_AGE_SECONDS",
    "NOTIFY_MIN_SCORE",
    "LedgerConnectionError",
    "LedgerError",
    "LedgerRecord",
    "LedgerStats",
    "LedgerStore",
    "MigrationError",
    "MigrationManager",
    "ReplicaError",
    "TursoReplica",
    "extract_domain",
    "to_http_url",
]
