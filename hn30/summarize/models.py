"""Data models for summaries."""

from pydantic import BaseModel, ConfigDict


class SummaryResult(BaseModel):
    """A generated or cached summary as returned to clients."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    summary: str
    model: str
