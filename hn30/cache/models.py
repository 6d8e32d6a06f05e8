"""Data models for cached items."""

from pydantic import BaseModel, ConfigDict, Field

from hn30.source import Item


class EnrichedItem(BaseModel):
    """A source item plus enrichment fields.

    Composition rather than inheritance: ``item`` holds the plain source
    fields, the rest is attached by enrichment and summarization.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    item: Item
    og_image: str = Field(default="", description="Secondary image URL")
    og_description: str = Field(default="", description="Secondary description")
    summary: str = Field(default="", description="Generated summary, lazily attached")
    summary_model: str = Field(default="", description="Model that wrote the summary")
    article_text: str = Field(
        default="", description="Extracted article text, never exposed"
    )

    @property
    def id(self) -> int:
        """Item id."""
        return self.item.id

    @property
    def url(self) -> str:
        """Item URL used for enrichment."""
        return self.item.url

    def with_stats(self, score: int, descendants: int) -> "EnrichedItem":
        """Copy with refreshed score and discussion count.

        Args:
            score: New popularity score.
            descendants: New discussion count.

        Returns:
            New EnrichedItem; enrichment fields are carried over unchanged.
        """
        item = self.item.model_copy(update={"score": score, "descendants": descendants})
        return self.model_copy(update={"item": item})

    def to_api_dict(self) -> dict[str, str | int]:
        """Flatten to the public JSON shape.

        Returns:
            Dictionary with item fields at the top level; ``article_text``
            is never included and ``summary``/``model`` only when set.
        """
        data: dict[str, str | int] = {
            "id": self.item.id,
            "title": self.item.title,
            "url": self.item.url,
            "score": self.item.score,
            "by": self.item.by,
            "time": self.item.time,
            "descendants": self.item.descendants,
            "ogImage": self.og_image,
            "ogDescription": self.og_description,
        }
        if self.summary:
            data["summary"] = self.summary
        if self.summary_model:
            data["model"] = self.summary_model
        return data
