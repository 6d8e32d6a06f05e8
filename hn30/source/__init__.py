"""Ranking source (Hacker News Firebase API)."""

from hn30.source.constants import HN_API_BASE_URL, HN_ITEM_PAGE_URL
from hn30.source.errors import SourceError
from hn30.source.hackernews import HackerNewsClient, item_page_url
from hn30.source.models import Item


__all__ = [
    "HN_API_BASE_URL",
    "HN_ITEM_PAGE_URL",
    "HackerNewsClient",
    "Item",
    "SourceError",
    "item_page_url",
]
