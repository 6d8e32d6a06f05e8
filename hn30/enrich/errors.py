"""Error types for content enrichment."""


class EnrichmentError(Exception):
    """Transport or parse failure while enriching a URL.

    "No metadata found" is not an error; it yields empty OpenGraphData.

    Attributes:
        url: URL that was being enriched.
    """

    def __init__(self, message: str, url: str) -> None:
        super().__init__(message)
        self.url = url


class ArticleExtractionError(EnrichmentError):
    """Article body could not be fetched or extracted."""
