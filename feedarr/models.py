"""
Data models for Feedarr
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import List, Union


class QualityTier(IntEnum):
    """Release quality tiers, ordered from worst to best"""

    UNKNOWN = 0
    SDTV = 1
    DVD = 2
    HDTV = 4
    WEBDL = 5
    BLURAY720P = 6
    BLURAY1080P = 7

    @property
    def label(self) -> str:
        return _TIER_LABELS[self]

    @classmethod
    def from_name(cls, name: str) -> "QualityTier":
        """Look up a tier by enum name or display label (case-insensitive)"""
        key = name.strip().lower()
        for tier in cls:
            if key in (tier.name.lower(), tier.label.lower()):
                return tier
        raise ValueError(f"Unknown quality tier: {name}")


_TIER_LABELS = {
    QualityTier.UNKNOWN: "Unknown",
    QualityTier.SDTV: "SDTV",
    QualityTier.DVD: "DVD",
    QualityTier.HDTV: "HDTV",
    QualityTier.WEBDL: "WEBDL",
    QualityTier.BLURAY720P: "Bluray720p",
    QualityTier.BLURAY1080P: "Bluray1080p",
}


@dataclass(frozen=True, order=True)
class Quality:
    """Detected quality of a release; proper is a modifier, not a tier"""

    tier: QualityTier
    is_proper: bool = False

    def __str__(self) -> str:
        if self.is_proper:
            return f"{self.tier.label} [Proper]"
        return self.tier.label


@dataclass(frozen=True)
class QualityProfile:
    """Quality policy configured for a series"""

    name: str
    allowed: frozenset
    cutoff: QualityTier
    minimum: QualityTier = QualityTier.UNKNOWN
    allow_propers_below_minimum: bool = False


@dataclass(frozen=True)
class ReleaseDescriptor:
    """Structured view of a release title"""

    raw_title: str
    clean_title: str
    season_number: int
    episode_numbers: tuple = ()
    quality: Quality = Quality(QualityTier.UNKNOWN)
    is_full_season: bool = False
    matched_series_id: int | None = None
    episode_title: str = ""

    def __post_init__(self):
        numbers = tuple(sorted(set(self.episode_numbers)))
        if not numbers and not self.is_full_season:
            raise ValueError(f"Release has no episode numbers: {self.raw_title}")
        object.__setattr__(self, "episode_numbers", numbers)

    def __str__(self) -> str:
        if self.is_full_season:
            return f"{self.clean_title} - Season {self.season_number} [{self.quality}]"
        episodes = "-".join(
            f"S{self.season_number:02d}E{num:02d}" for num in self.episode_numbers
        )
        return f"{self.clean_title} - {episodes} [{self.quality}]"


@dataclass
class Season:
    """Represents a season of a series"""

    season_number: int
    monitored: bool


@dataclass
class Series:
    """Represents a series known to the library"""

    id: int
    title: str
    clean_title: str
    monitored: bool
    quality_profile: QualityProfile
    path: str = ""
    seasons: List[Season] = field(default_factory=list)


@dataclass
class Episode:
    """Represents an episode known to the library"""

    id: int
    series_id: int
    season_number: int
    episode_number: int
    has_file: bool
    monitored: bool = True
    title: str = ""
    air_date: str | None = None


@dataclass(frozen=True)
class HistoryEntry:
    """One accepted release for one episode"""

    episode_id: int
    quality: QualityTier
    is_proper: bool
    acquired_at: datetime
    release_title: str = ""
    indexer: str = ""

    @property
    def rank(self) -> tuple:
        return (int(self.quality), self.is_proper)


@dataclass
class SeasonGapGroup:
    """Missing episodes of one series season"""

    series_id: int
    season_number: int
    episodes: List[Episode] = field(default_factory=list)

    @property
    def missing_episode_numbers(self) -> set[int]:
        return {ep.episode_number for ep in self.episodes}


@dataclass
class FeedItem:
    """A single entry of an indexer feed"""

    title: str
    link: str = ""
    guid: str = ""
    description: str = ""
    attributes: dict = field(default_factory=dict)


@dataclass(frozen=True)
class EpisodeSearch:
    """Search command for a single episode"""

    episode_id: int
    series_id: int
    season_number: int
    episode_number: int


@dataclass(frozen=True)
class SeasonSearch:
    """Search command for a whole season"""

    series_id: int
    season_number: int


SearchCommand = Union[EpisodeSearch, SeasonSearch]


@dataclass
class SweepResult:
    """Outcome of one ingestion or backlog sweep"""

    failures: list = field(default_factory=list)
    dispatched: int = 0
    filtered: int = 0

    def merge(self, other: "SweepResult") -> None:
        self.failures.extend(other.failures)
        self.dispatched += other.dispatched
        self.filtered += other.filtered
