"""Data models for content enrichment."""

from pydantic import BaseModel, ConfigDict, Field


class OpenGraphData(BaseModel):
    """Secondary metadata read from a page's OpenGraph tags."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    image: str = Field(default="", description="Absolute og:image URL")
    description: str = Field(default="", description="og:description text")

    @property
    def is_empty(self) -> bool:
        """Check whether neither tag was found."""
        return not self.image and not self.description
