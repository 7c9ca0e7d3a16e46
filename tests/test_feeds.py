"""Tests for RSS feed retrieval"""

from unittest.mock import MagicMock

import pytest
import requests

from feedarr.errors import FetchError
from feedarr.feeds import RssFetcher

RSS = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Indexer</title>
    <item>
      <title>My.Series.Name.S01E02.720p.HDTV.x264-GRP</title>
      <link>http://indexer/nzb/1</link>
      <guid>http://indexer/details/1</guid>
      <description>Video Fmt: x264</description>
    </item>
    <item>
      <title>Other.Show.S02E05.HDTV.XviD</title>
      <link>http://indexer/nzb/2</link>
    </item>
  </channel>
</rss>
"""


@pytest.fixture
def fetcher():
    fetcher = RssFetcher(timeout=5)
    fetcher.session = MagicMock()
    return fetcher


def respond(fetcher, content):
    resp = MagicMock()
    resp.content = content
    resp.raise_for_status.return_value = None
    fetcher.session.get.return_value = resp


def test_fetch_parses_items(fetcher):
    respond(fetcher, RSS)

    items = fetcher.fetch("http://indexer/rss", ("user", "pass"))

    fetcher.session.get.assert_called_once_with(
        "http://indexer/rss", auth=("user", "pass"), timeout=5
    )
    assert [i.title for i in items] == [
        "My.Series.Name.S01E02.720p.HDTV.x264-GRP",
        "Other.Show.S02E05.HDTV.XviD",
    ]
    assert items[0].link == "http://indexer/nzb/1"
    assert items[0].guid == "http://indexer/details/1"
    assert items[0].description == "Video Fmt: x264"
    assert items[1].description == ""


def test_transport_error_raises_fetch_error(fetcher):
    fetcher.session.get.side_effect = requests.exceptions.Timeout("timed out")

    with pytest.raises(FetchError) as excinfo:
        fetcher.fetch("http://indexer/rss")

    assert excinfo.value.url == "http://indexer/rss"


def test_unreadable_feed_raises_fetch_error(fetcher):
    respond(fetcher, b"<html><body>Service Unavailable")

    with pytest.raises(FetchError):
        fetcher.fetch("http://indexer/rss")
