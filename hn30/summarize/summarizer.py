"""On-demand article summaries stored back into the snapshot cache."""

from typing import Protocol

import structlog

from hn30.cache import EnrichedItem, SnapshotCache
from hn30.enrich import ArticleExtractionError
from hn30.summarize.errors import StoryNotFoundError, SummarizationError
from hn30.summarize.models import SummaryResult
from hn30.summarize.prompts import build_summary_prompt


logger = structlog.get_logger()


class TextExtractor(Protocol):
    """Reduces a URL to its readable article text."""

    def extract(self, url: str) -> str: ...


class ModelClient(Protocol):
    """Generates text from a prompt."""

    model: str

    def generate_content(self, prompt: str) -> str: ...


class Summarizer:
    """Returns a cached summary or generates and caches a new one."""

    def __init__(
        self,
        cache: SnapshotCache,
        extractor: TextExtractor,
        client: ModelClient | None,
    ) -> None:
        """Initialize the summarizer.

        Args:
            cache: Snapshot cache holding the current items.
            extractor: Article text extractor.
            client: Model client, or None when summaries are not configured.
        """
        self._cache = cache
        self._extractor = extractor
        self._client = client
        self._log = logger.bind(component="summarize")

    def summarize(self, item_id: int) -> SummaryResult:
        """Summarize a cached item.

        Args:
            item_id: Id of an item in the current snapshot.

        Returns:
            The summary and the model that wrote it.

        Raises:
            StoryNotFoundError: If the id is not cached.
            SummarizationError: If extraction or generation fails.
        """
        entry = self._cache.get(item_id)
        if entry is None:
            raise StoryNotFoundError(item_id)

        if entry.summary:
            self._log.info("summary_cache_hit", story_id=item_id)
            return SummaryResult(summary=entry.summary, model=entry.summary_model)

        if self._client is None:
            msg = "Summaries are not configured"
            raise SummarizationError(msg)

        self._log.info("summary_generation_started", story_id=item_id)

        try:
            article_text = self._extractor.extract(entry.url)
        except ArticleExtractionError as e:
            self._log.warning("article_extraction_failed", story_id=item_id, error=str(e))
            msg = "Failed to extract article content"
            raise SummarizationError(msg) from e

        summary = self._client.generate_content(build_summary_prompt(article_text))

        model = self._client.model

        def attach(current: EnrichedItem | None) -> EnrichedItem | None:
            # A refresh may have replaced the entry meanwhile.
            if current is None or current.url != entry.url:
                return None
            return current.model_copy(
                update={
                    "summary": summary,
                    "summary_model": model,
                    "article_text": article_text,
                }
            )

        self._cache.update(item_id, attach)
        self._log.info("summary_generated", story_id=item_id, model=self._client.model)

        return SummaryResult(summary=summary, model=self._client.model)
