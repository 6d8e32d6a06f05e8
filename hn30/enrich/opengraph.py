"""OpenGraph metadata extraction."""

import time
from urllib.parse import urljoin, urlparse

import structlog
from bs4 import BeautifulSoup

from hn30.enrich.errors import EnrichmentError
from hn30.enrich.models import OpenGraphData
from hn30.fetch import FetchErrorClass, HttpFetcher


logger = structlog.get_logger()


class OpenGraphEnricher:
    """Reads og:image and og:description from an item's linked page.

    Error responses (4xx/5xx) are still parsed since many sites serve
    OpenGraph tags on soft error pages. Non-HTML content types yield
    empty metadata without an error.
    """

    def __init__(self, fetcher: HttpFetcher) -> None:
        """Initialize the enricher.

        Args:
            fetcher: HTTP fetcher used for page requests.
        """
        self._fetcher = fetcher
        self._timeout = fetcher.config.enrichment_timeout_seconds
        self._log = logger.bind(component="enrich")

    def enrich(self, url: str) -> OpenGraphData:
        """Fetch a page and extract its OpenGraph metadata.

        Args:
            url: Absolute http(s) URL of the page.

        Returns:
            Extracted metadata, possibly empty.

        Raises:
            EnrichmentError: On invalid URL, transport failure or oversized page.
        """
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            msg = "Invalid URL scheme"
            raise EnrichmentError(msg, url=url)

        start_ns = time.perf_counter_ns()
        log = self._log.bind(url=url, domain=parsed.netloc)

        result = self._fetcher.get(
            url,
            timeout=self._timeout,
            extra_headers={"Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8"},
        )

        if result.error is not None and result.error.error_class not in (
            FetchErrorClass.HTTP_4XX,
            FetchErrorClass.HTTP_5XX,
        ):
            raise EnrichmentError(result.error.message, url=url)

        if result.error is not None:
            log.warning("og_error_status", status_code=result.status_code)

        content_type = result.content_type
        if content_type and "html" not in content_type.lower():
            log.info("og_content_type_skip", content_type=content_type)
            return OpenGraphData()

        data = self.parse(result.body_bytes, base_url=result.final_url)

        log.info(
            "og_extracted",
            has_image=bool(data.image),
            has_description=bool(data.description),
            duration_ms=round((time.perf_counter_ns() - start_ns) / 1_000_000, 2),
        )
        return data

    @staticmethod
    def parse(html: bytes | str, base_url: str) -> OpenGraphData:
        """Extract OpenGraph tags from an HTML document.

        Args:
            html: Raw HTML.
            base_url: URL the document was served from, for relative images.

        Returns:
            Extracted metadata.
        """
        soup = BeautifulSoup(html, "lxml")

        image = _meta_content(soup, "og:image")
        description = _meta_content(soup, "og:description")

        if image:
            image = urljoin(base_url, image)

        return OpenGraphData(image=image, description=description)


def _meta_content(soup: BeautifulSoup, prop: str) -> str:
    tag = soup.find("meta", attrs={"property": prop})
    if tag is None:
        return ""
    content = tag.get("content")
    if isinstance(content, list):
        content = " ".join(content)
    return (content or "").strip()
