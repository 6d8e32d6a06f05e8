"""Readable article text extraction for summaries."""

import lxml.html
import structlog
from lxml.etree import ParserError
from readability import Document
from readability.readability import Unparseable

from hn30.enrich.errors import ArticleExtractionError
from hn30.fetch import HttpFetcher


logger = structlog.get_logger()

_ARTICLE_ACCEPT = (
    "text/html,application/xhtml+xml,application/xml;q=0.9,"
    "image/avif,image/webp,image/apng,*/*;q=0.8"
)


class ArticleTextExtractor:
    """Fetches a page and reduces it to its main readable text."""

    def __init__(self, fetcher: HttpFetcher) -> None:
        self._fetcher = fetcher
        self._timeout = fetcher.config.article_timeout_seconds
        self._log = logger.bind(component="article")

    def extract(self, url: str) -> str:
        """Extract the readable text of an article.

        Args:
            url: Article URL.

        Returns:
            Plain text of the main content.

        Raises:
            ArticleExtractionError: If the page cannot be fetched or has no text.
        """
        result = self._fetcher.get(
            url,
            timeout=self._timeout,
            extra_headers={
                "Accept": _ARTICLE_ACCEPT,
                "Accept-Language": "en-US,en;q=0.9",
            },
        )
        if result.status_code != 200 or result.error is not None:
            msg = f"Failed to fetch URL: status {result.status_code}"
            raise ArticleExtractionError(msg, url=url)

        text = self.readable_text(result.text)
        if not text:
            msg = "No readable content"
            raise ArticleExtractionError(msg, url=url)

        self._log.info("article_extracted", url=url, chars=len(text))
        return text

    @staticmethod
    def readable_text(html: str) -> str:
        """Reduce an HTML document to the text of its main content.

        Args:
            html: Full HTML document.

        Returns:
            Whitespace-normalized text, empty if nothing readable was found.
        """
        if not html.strip():
            return ""
        try:
            summary_html = Document(html).summary(html_partial=True)
            fragment = lxml.html.fromstring(summary_html)
        except (Unparseable, ParserError):
            return ""
        lines = (line.strip() for line in fragment.text_content().splitlines())
        return "\n".join(line for line in lines if line)
