"""Data models for ranked source items."""

from pydantic import BaseModel, ConfigDict, Field


class Item(BaseModel):
    """A ranked item as returned by the source.

    Missing fields in the upstream payload (job posts have no
    ``descendants``, Ask HN posts have no ``url``) default to empty values.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int = Field(description="Source-assigned item id")
    title: str = Field(default="", description="Item title")
    url: str = Field(default="", description="External URL, empty for text posts")
    score: int = Field(default=0, description="Popularity score")
    by: str = Field(default="", description="Author username")
    time: int = Field(default=0, description="Creation time (unix seconds)")
    descendants: int = Field(default=0, description="Discussion comment count")

    @property
    def has_url(self) -> bool:
        """Check whether the item links to an external page."""
        return bool(self.url)
