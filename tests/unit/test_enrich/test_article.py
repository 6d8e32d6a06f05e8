"""Unit tests for article text extraction."""

import httpx
import pytest

from hn30.enrich import ArticleExtractionError, ArticleTextExtractor
from hn30.fetch import HttpFetcher


ARTICLE = """<html><head><title>Essay</title></head><body>
<div id="nav"><a href="/">Home</a> <a href="/about">About</a></div>
<div id="content" class="article">
<h1>On foxes</h1>
<p>The quick brown fox jumps over the lazy dog, and then it keeps running
across the meadow, past the old barn and into the forest beyond the river.</p>
<p>Foxes are small to medium-sized omnivorous mammals belonging to several
genera of the family Canidae, with a flattened skull and upright ears.</p>
<p>Twelve species belong to the monophyletic group of the genus Vulpes, which
are commonly called true foxes, and they live on every continent but one.</p>
</div>
<div id="footer">Copyright</div>
</body></html>
"""


def _extractor(response: httpx.Response) -> ArticleTextExtractor:
    def handler(request: httpx.Request) -> httpx.Response:
        return response

    return ArticleTextExtractor(HttpFetcher(transport=httpx.MockTransport(handler)))


class TestReadableText:
    """Tests for HTML to text reduction."""

    def test_extracts_paragraph_text(self) -> None:
        """Test that the main content paragraphs come through as text."""
        text = ArticleTextExtractor.readable_text(ARTICLE)

        assert "quick brown fox" in text
        assert "true foxes" in text
        assert "<p>" not in text

    def test_blank_document(self) -> None:
        """Test that whitespace-only input yields no text."""
        assert ArticleTextExtractor.readable_text("   \n ") == ""


class TestExtract:
    """Tests for fetching and extracting an article."""

    def test_success(self) -> None:
        """Test a readable article page."""
        extractor = _extractor(
            httpx.Response(
                200, headers={"content-type": "text/html"}, content=ARTICLE.encode()
            )
        )

        text = extractor.extract("https://example.com/foxes")

        assert "omnivorous mammals" in text

    def test_non_ok_status(self) -> None:
        """Test that an error status is not summarized."""
        extractor = _extractor(httpx.Response(403, content=ARTICLE.encode()))

        with pytest.raises(ArticleExtractionError, match="status 403"):
            extractor.extract("https://example.com/paywalled")

    def test_empty_page(self) -> None:
        """Test that a page with no content is an error."""
        extractor = _extractor(httpx.Response(200, content=b"  "))

        with pytest.raises(ArticleExtractionError, match="No readable content"):
            extractor.extract("https://example.com/empty")
