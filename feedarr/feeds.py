"""
RSS feed retrieval
"""

import logging

import feedparser
import requests

from .errors import FetchError
from .models import FeedItem

logger = logging.getLogger(__name__)


def _entry_attributes(entry) -> dict:
    """Keep the scalar extension fields feedparser exposes on an entry"""
    skip = {"title", "link", "id", "summary", "description", "links"}
    return {
        key: value
        for key, value in entry.items()
        if key not in skip and isinstance(value, (str, int, float))
    }


class RssFetcher:
    """Downloads indexer feeds and converts entries into FeedItems"""

    def __init__(self, timeout: float = 30, user_agent: str = "feedarr"):
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": user_agent})

    def fetch(self, url: str, credentials: tuple | None = None) -> list[FeedItem]:
        """
        Fetch and parse a feed

        Args:
            url: Feed URL
            credentials: Optional (username, password) for basic auth

        Returns:
            List of FeedItem

        Raises:
            FetchError on transport errors or an unreadable feed
        """
        try:
            response = self.session.get(url, auth=credentials, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise FetchError(url, f"request failed: {e}") from e

        feed = feedparser.parse(response.content)
        if feed.bozo and not feed.entries:
            raise FetchError(url, f"unreadable feed: {feed.get('bozo_exception')}")

        if feed.bozo:
            logger.warning(f"Feed {url} is malformed, using {len(feed.entries)} parsed entries")

        items = [
            FeedItem(
                title=entry.get("title", ""),
                link=entry.get("link", ""),
                guid=entry.get("id", ""),
                description=entry.get("summary", ""),
                attributes=_entry_attributes(entry),
            )
            for entry in feed.entries
        ]
        logger.debug(f"Fetched {len(items)} item(s) from {url}")
        return items
