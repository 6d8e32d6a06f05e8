"""Unit tests for the summarizer."""

import pytest

from hn30.cache import EnrichedItem, SnapshotCache
from hn30.enrich import ArticleExtractionError
from hn30.summarize import (
    StoryNotFoundError,
    SummarizationError,
    Summarizer,
    build_summary_prompt,
)
from tests.helpers.fakes import make_item


class FakeExtractor:
    """Returns fixed text or fails."""

    def __init__(self, text: str = "Article body.", fail: bool = False) -> None:
        self.text = text
        self.fail = fail
        self.calls: list[str] = []

    def extract(self, url: str) -> str:
        self.calls.append(url)
        if self.fail:
            raise ArticleExtractionError("No readable content", url=url)
        return self.text


class FakeModel:
    """Echoes a canned summary and records prompts."""

    model = "fake-model"

    def __init__(self, on_generate=None) -> None:
        self.prompts: list[str] = []
        self.on_generate = on_generate

    def generate_content(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.on_generate is not None:
            self.on_generate()
        return "Short summary."


@pytest.fixture
def cache() -> SnapshotCache:
    cache = SnapshotCache()
    cache.replace_ranking([1])
    cache.upsert(1, EnrichedItem(item=make_item(1), og_image="img"))
    return cache


class TestSummarizer:
    """Tests for Summarizer."""

    def test_unknown_id(self, cache: SnapshotCache) -> None:
        """Test that an uncached id raises StoryNotFoundError."""
        summarizer = Summarizer(cache, FakeExtractor(), FakeModel())

        with pytest.raises(StoryNotFoundError) as exc_info:
            summarizer.summarize(99)

        assert exc_info.value.item_id == 99

    def test_generates_and_caches(self, cache: SnapshotCache) -> None:
        """Test that a new summary is stored alongside the entry."""
        extractor = FakeExtractor()
        model = FakeModel()
        summarizer = Summarizer(cache, extractor, model)

        result = summarizer.summarize(1)

        assert result.summary == "Short summary."
        assert result.model == "fake-model"
        assert extractor.calls == ["https://example.com/1"]
        assert model.prompts == [build_summary_prompt("Article body.")]
        entry = cache.get(1)
        assert entry is not None
        assert entry.summary == "Short summary."
        assert entry.summary_model == "fake-model"
        assert entry.article_text == "Article body."
        assert entry.og_image == "img"

    def test_second_call_uses_cached_summary(self, cache: SnapshotCache) -> None:
        """Test that a stored summary is returned without regenerating."""
        model = FakeModel()
        summarizer = Summarizer(cache, FakeExtractor(), model)

        summarizer.summarize(1)
        result = summarizer.summarize(1)

        assert result.summary == "Short summary."
        assert len(model.prompts) == 1

    def test_not_configured(self, cache: SnapshotCache) -> None:
        """Test that a missing model client is a summarization error."""
        summarizer = Summarizer(cache, FakeExtractor(), None)

        with pytest.raises(SummarizationError, match="not configured"):
            summarizer.summarize(1)

    def test_extraction_failure(self, cache: SnapshotCache) -> None:
        """Test that unreadable articles fail without calling the model."""
        model = FakeModel()
        summarizer = Summarizer(cache, FakeExtractor(fail=True), model)

        with pytest.raises(SummarizationError, match="extract article content"):
            summarizer.summarize(1)

        assert model.prompts == []

    def test_entry_replaced_during_generation(self, cache: SnapshotCache) -> None:
        """Test that a summary is not attached to an item whose URL changed."""

        def swap_url() -> None:
            cache.upsert(
                1, EnrichedItem(item=make_item(1, url="https://other.example/"))
            )

        summarizer = Summarizer(cache, FakeExtractor(), FakeModel(swap_url))

        result = summarizer.summarize(1)

        entry = cache.get(1)
        assert result.summary == "Short summary."
        assert entry is not None
        assert entry.summary == ""
