"""Data models for the notification ledger."""

from pydantic import BaseModel, ConfigDict, Field


class LedgerRecord(BaseModel):
    """Durable per-item record.

    Timestamps are unix seconds.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: int
    title: str
    url: str = ""
    first_seen_at: int = Field(description="First-seen time")
    last_seen_at: int = Field(description="Last upsert time")
    max_score: int = Field(ge=0, description="Running maximum score")
    notified_at: int | None = Field(default=None, description="Notification time")

    @property
    def is_notified(self) -> bool:
        """Check if a notification was already attempted."""
        return self.notified_at is not None


class LedgerStats(BaseModel):
    """Summary counts for the ledger."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    schema_version: int
    total_items: int
    notified_items: int
