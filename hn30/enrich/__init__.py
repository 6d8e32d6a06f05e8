"""Content enrichment: OpenGraph metadata and article text."""

from hn30.enrich.article import ArticleTextExtractor
from hn30.enrich.errors import ArticleExtractionError, EnrichmentError
from hn30.enrich.models import OpenGraphData
from hn30.enrich.opengraph import OpenGraphEnricher


__all__ = [
    "ArticleExtractionError",
    "ArticleTextExtractor",
    "EnrichmentError",
    "OpenGraphData",
    "OpenGraphEnricher",
]
