"""Snapshot cache of ranked, enriched items."""

from hn30.cache.models import EnrichedItem
from hn30.cache.snapshot import SnapshotCache


__all__ = [
    "EnrichedItem",
    "SnapshotCache",
]
