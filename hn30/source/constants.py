"""Constants for the Hacker News source."""

HN_API_BASE_URL = "https://hacker-news.firebaseio.com/v0"
HN_ITEM_PAGE_URL = "https://news.ycombinator.com/item?id={item_id}"
