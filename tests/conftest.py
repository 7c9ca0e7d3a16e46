"""Shared test fixtures for Feedarr."""

from typing import Dict, List

import pytest

from feedarr.history import HistoryLedger, HistoryStore
from feedarr.indexers import Indexer
from feedarr.models import (
    Episode,
    FeedItem,
    ReleaseDescriptor,
    Season,
    Series,
)
from feedarr.parser import normalize_title
from feedarr.quality import QualityPolicy, make_profile


class FakeLibrary:
    """In-memory library used in place of Sonarr."""

    def __init__(self, series: List[Series], episodes: List[Episode]):
        self.series = {s.id: s for s in series}
        self.episodes = episodes
        self.season_numbers: Dict[tuple, set] = {}

    def find_by_clean_title(self, text):
        wanted = normalize_title(text)
        for series in self.series.values():
            if series.clean_title == wanted:
                return series
        return None

    def is_monitored(self, series_id):
        return self.series[series_id].monitored

    def quality_wanted(self, series_id, quality):
        return QualityPolicy().accepts(self.series[series_id].quality_profile, quality)

    def is_ignored(self, series_id, season_number):
        for season in self.series[series_id].seasons:
            if season.season_number == season_number:
                return not season.monitored
        return False

    def episode_numbers_of_season(self, series_id, season_number):
        if (series_id, season_number) in self.season_numbers:
            return self.season_numbers[(series_id, season_number)]
        return {
            ep.episode_number
            for ep in self.episodes
            if ep.series_id == series_id and ep.season_number == season_number
        }

    def episodes_for_descriptor(self, descriptor: ReleaseDescriptor):
        season = [
            ep
            for ep in self.episodes
            if ep.series_id == descriptor.matched_series_id
            and ep.season_number == descriptor.season_number
        ]
        if descriptor.is_full_season:
            return season
        return [ep for ep in season if ep.episode_number in descriptor.episode_numbers]

    def episodes_without_files(self, monitored_only=True):
        return [ep for ep in self.episodes if not ep.has_file]


class FakeFetcher:
    """Returns canned feed items per URL, or raises a canned error."""

    def __init__(self, feeds: dict):
        self.feeds = feeds
        self.calls = []

    def fetch(self, url, credentials=None):
        self.calls.append((url, credentials))
        result = self.feeds[url]
        if isinstance(result, Exception):
            raise result
        return result


class FakeDownloadClient:
    """Records submissions and answers with a fixed result."""

    def __init__(self, accept=True):
        self.accept = accept
        self.submitted = []

    def submit(self, download_url, display_title):
        self.submitted.append((download_url, display_title))
        if isinstance(self.accept, Exception):
            raise self.accept
        return self.accept


def make_series(
    series_id=1,
    title="My Series Name",
    monitored=True,
    allowed=("SDTV", "HDTV", "WEBDL"),
    cutoff="WEBDL",
    seasons=None,
) -> Series:
    return Series(
        id=series_id,
        title=title,
        clean_title=normalize_title(title),
        monitored=monitored,
        quality_profile=make_profile("Test", allowed, cutoff=cutoff),
        path=f"/tv/{title}",
        seasons=seasons if seasons is not None else [Season(1, True), Season(2, True)],
    )


def make_episode(episode_id, series_id=1, season=1, number=1, has_file=False) -> Episode:
    return Episode(
        id=episode_id,
        series_id=series_id,
        season_number=season,
        episode_number=number,
        has_file=has_file,
        title=f"Episode {number}",
        air_date="2011-01-01T00:00:00Z",
    )


@pytest.fixture
def series() -> Series:
    return make_series()


@pytest.fixture
def episodes() -> List[Episode]:
    return [make_episode(100 + n, number=n) for n in range(1, 6)]


@pytest.fixture
def library(series, episodes) -> FakeLibrary:
    return FakeLibrary([series], episodes)


@pytest.fixture
def ledger() -> HistoryLedger:
    return HistoryLedger(HistoryStore())


@pytest.fixture
def indexer() -> Indexer:
    return Indexer(name="TestIndexer", urls=["http://indexer/rss"])


def feed_item(title: str, link: str = "http://indexer/nzb/1") -> FeedItem:
    return FeedItem(title=title, link=link, guid=link)


