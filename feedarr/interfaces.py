"""
Capabilities the sweeps consume from their collaborators
"""

from typing import Iterable, Optional, Protocol, Sequence

from .models import (
    Episode,
    FeedItem,
    HistoryEntry,
    Quality,
    QualityTier,
    ReleaseDescriptor,
    SearchCommand,
    Series,
)


class FeedFetcher(Protocol):
    def fetch(self, url: str, credentials: Optional[tuple] = None) -> list[FeedItem]:
        """Return the items of a feed, raising FetchError on failure"""
        ...


class ReleaseParser(Protocol):
    def __call__(self, title: str) -> Optional[ReleaseDescriptor]: ...


class SeriesLookup(Protocol):
    def find_by_clean_title(self, text: str) -> Optional[Series]: ...

    def is_monitored(self, series_id: int) -> bool: ...

    def quality_wanted(self, series_id: int, quality: Quality) -> bool: ...


class SeasonState(Protocol):
    def is_ignored(self, series_id: int, season_number: int) -> bool: ...

    def episode_numbers_of_season(self, series_id: int, season_number: int) -> set[int]: ...


class EpisodeSource(Protocol):
    def episodes_for_descriptor(self, descriptor: ReleaseDescriptor) -> list[Episode]: ...

    def episodes_without_files(self, monitored_only: bool = True) -> list[Episode]: ...


class Library(SeriesLookup, SeasonState, EpisodeSource, Protocol):
    """Read-only view over series, seasons and episodes"""


class DownloadClient(Protocol):
    def submit(self, download_url: str, display_title: str) -> bool: ...


class HistoryStorage(Protocol):
    def exists(self, episode_id: int, quality: QualityTier, is_proper: bool) -> bool: ...

    def add(self, entry: HistoryEntry) -> None: ...

    def add_many(self, entries: Iterable[HistoryEntry]) -> None: ...

    def entries_for(self, episode_id: int) -> Sequence[HistoryEntry]: ...

    def all(self) -> Iterable[HistoryEntry]: ...


class SearchDispatcher(Protocol):
    def dispatch(self, command: SearchCommand) -> None: ...
