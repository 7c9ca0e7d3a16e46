"""
Read-only library view backed by Sonarr
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Dict, List

from .models import Episode, Quality, ReleaseDescriptor, Series
from .parser import normalize_title
from .quality import QualityPolicy
from .sonarr import SonarrClient

logger = logging.getLogger(__name__)


def _has_aired(air_date: str | None, now: datetime) -> bool:
    if not air_date:
        return False
    try:
        aired = datetime.fromisoformat(air_date.replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Unparseable air date: {air_date}")
        return False
    if aired.tzinfo is None:
        aired = aired.replace(tzinfo=timezone.utc)
    return aired <= now


class SonarrLibrary:
    """
    Series, season and episode lookups over Sonarr

    Series are loaded once and episodes once per series; call refresh() to
    drop the cache before a new sweep.
    """

    def __init__(
        self,
        client: SonarrClient,
        policy: QualityPolicy | None = None,
        logger: logging.Logger | None = None,
    ):
        self.client = client
        self.logger = logger or logging.getLogger(__name__)
        self.policy = policy or QualityPolicy(self.logger)
        self._lock = threading.Lock()
        self._series_by_id: Dict[int, Series] | None = None
        self._series_by_title: Dict[str, Series] = {}
        self._episodes: Dict[int, List[Episode]] = {}

    def refresh(self) -> None:
        with self._lock:
            self._series_by_id = None
            self._series_by_title = {}
            self._episodes = {}

    def _load_series(self) -> Dict[int, Series]:
        with self._lock:
            if self._series_by_id is None:
                series_list = self.client.get_all_series()
                self._series_by_id = {s.id: s for s in series_list}
                self._series_by_title = {s.clean_title: s for s in series_list}
                self.logger.debug(f"Loaded {len(series_list)} series from Sonarr")
            return self._series_by_id

    def _series_episodes(self, series_id: int) -> List[Episode]:
        with self._lock:
            cached = self._episodes.get(series_id)
        if cached is not None:
            return cached

        episodes = self.client.get_series_episodes(series_id)
        with self._lock:
            self._episodes[series_id] = episodes
        return episodes

    def all_series(self) -> List[Series]:
        return list(self._load_series().values())

    def get_series(self, series_id: int) -> Series | None:
        return self._load_series().get(series_id)

    def find_by_clean_title(self, text: str) -> Series | None:
        self._load_series()
        return self._series_by_title.get(normalize_title(text))

    def is_monitored(self, series_id: int) -> bool:
        series = self.get_series(series_id)
        return bool(series and series.monitored)

    def quality_wanted(self, series_id: int, quality: Quality) -> bool:
        series = self.get_series(series_id)
        if series is None:
            return False
        return self.policy.accepts(series.quality_profile, quality)

    def is_ignored(self, series_id: int, season_number: int) -> bool:
        """A season is ignored when Sonarr has it unmonitored"""
        series = self.get_series(series_id)
        if series is None:
            return True
        for season in series.seasons:
            if season.season_number == season_number:
                return not season.monitored
        return False

    def episode_numbers_of_season(self, series_id: int, season_number: int) -> set[int]:
        return {
            ep.episode_number
            for ep in self._series_episodes(series_id)
            if ep.season_number == season_number
        }

    def episodes_for_descriptor(self, descriptor: ReleaseDescriptor) -> List[Episode]:
        if descriptor.matched_series_id is None:
            return []

        season = [
            ep
            for ep in self._series_episodes(descriptor.matched_series_id)
            if ep.season_number == descriptor.season_number
        ]
        if descriptor.is_full_season:
            return season

        wanted = set(descriptor.episode_numbers)
        return [ep for ep in season if ep.episode_number in wanted]

    def episodes_without_files(self, monitored_only: bool = True) -> List[Episode]:
        """Aired episodes that have no file yet"""
        now = datetime.now(timezone.utc)
        missing = []

        for series in self.all_series():
            if monitored_only and not series.monitored:
                continue

            for ep in self._series_episodes(series.id):
                if ep.has_file or not _has_aired(ep.air_date, now):
                    continue
                if monitored_only and (
                    not ep.monitored or self.is_ignored(series.id, ep.season_number)
                ):
                    continue
                missing.append(ep)

        return missing
