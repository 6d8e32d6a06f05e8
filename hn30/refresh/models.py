"""Data models for refresh cycle results."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ItemOutcome(str, Enum):
    """What happened to one ranked id during a cycle.

    - REUSED: URL unchanged, only score/discussion count refreshed
    - ENRICHED: New id or changed URL, metadata fetched
    - FAILED: Item detail could not be fetched or processed
    """

    REUSED = "REUSED"
    ENRICHED = "ENRICHED"
    FAILED = "FAILED"


class CycleResult(BaseModel):
    """Summary of one refresh cycle."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    cycle_id: str
    started_at: datetime
    finished_at: datetime
    success: bool
    error: str | None = None
    ids_total: int = Field(default=0, ge=0, description="Ids in the full ranking")
    ids_used: int = Field(default=0, ge=0, description="Ids after truncation")
    reused: int = Field(default=0, ge=0)
    enriched: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    notified: int = Field(default=0, ge=0)
    duration_ms: float = Field(default=0.0, ge=0)

    @property
    def processed(self) -> int:
        """Ids written to the cache this cycle."""
        return self.reused + self.enriched
