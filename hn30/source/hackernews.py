"""Hacker News Firebase API client."""

import json

import structlog
from pydantic import ValidationError

from hn30.fetch import FetchResult, HttpFetcher
from hn30.source.constants import HN_API_BASE_URL, HN_ITEM_PAGE_URL
from hn30.source.errors import SourceError
from hn30.source.models import Item


logger = structlog.get_logger()


def item_page_url(item_id: int) -> str:
    """Build the discussion page URL for an item.

    Args:
        item_id: Source item id.

    Returns:
        Canonical news.ycombinator.com URL for the item.
    """
    return HN_ITEM_PAGE_URL.format(item_id=item_id)


class HackerNewsClient:
    """Reads the ranked story list and item details.

    All failures (transport, non-2xx, malformed JSON) raise SourceError.
    """

    def __init__(
        self,
        fetcher: HttpFetcher,
        base_url: str = HN_API_BASE_URL,
    ) -> None:
        """Initialize the client.

        Args:
            fetcher: HTTP fetcher used for all requests.
            base_url: Firebase API root.
        """
        self._fetcher = fetcher
        self._base_url = base_url.rstrip("/")
        self._timeout = fetcher.config.source_timeout_seconds
        self._log = logger.bind(component="source")

    def top_story_ids(self) -> list[int]:
        """Fetch the current ranking.

        Returns:
            Story ids in ranking order.

        Raises:
            SourceError: If the list cannot be fetched or decoded.
        """
        url = f"{self._base_url}/topstories.json"
        payload = self._get_json(url)

        if not isinstance(payload, list) or not all(
            isinstance(i, int) for i in payload
        ):
            msg = "Ranking payload is not a list of integers"
            raise SourceError(msg)

        self._log.info("top_story_ids_fetched", total_ids=len(payload))
        return payload

    def item(self, item_id: int) -> Item:
        """Fetch a single item.

        Args:
            item_id: Item id to fetch.

        Returns:
            The parsed Item.

        Raises:
            SourceError: If the item cannot be fetched or decoded.
        """
        url = f"{self._base_url}/item/{item_id}.json"
        payload = self._get_json(url, item_id=item_id)

        if payload is None:
            msg = f"Item {item_id} does not exist"
            raise SourceError(msg, item_id=item_id)

        try:
            item = Item.model_validate(payload)
        except ValidationError as e:
            msg = f"Item {item_id} has an invalid shape: {e.error_count()} errors"
            raise SourceError(msg, item_id=item_id) from e

        self._log.debug(
            "story_details_fetched",
            story_id=item.id,
            score=item.score,
            descendants=item.descendants,
        )
        return item

    def _get_json(self, url: str, item_id: int | None = None) -> object:
        result: FetchResult = self._fetcher.get(
            url,
            timeout=self._timeout,
            extra_headers={"Accept": "application/json"},
        )
        if not result.is_success:
            message = (
                result.error.message
                if result.error
                else f"Unexpected status {result.status_code}"
            )
            raise SourceError(
                message, item_id=item_id, status_code=result.status_code or None
            )

        try:
            return json.loads(result.body_bytes)
        except json.JSONDecodeError as e:
            msg = f"Malformed JSON from {url}"
            raise SourceError(msg, item_id=item_id) from e
