"""
Sonarr API Client
"""

import logging
from typing import List

from .base_client import BaseArrClient
from .models import Episode, QualityProfile, QualityTier, Season, Series
from .parser import normalize_title
from .quality import make_profile

logger = logging.getLogger(__name__)

# Sonarr quality names mapped onto Feedarr tiers
SONARR_QUALITY_TIERS = {
    "unknown": QualityTier.UNKNOWN,
    "sdtv": QualityTier.SDTV,
    "dvd": QualityTier.DVD,
    "bluray-480p": QualityTier.DVD,
    "hdtv-720p": QualityTier.HDTV,
    "hdtv-1080p": QualityTier.HDTV,
    "hdtv-2160p": QualityTier.HDTV,
    "rawhd": QualityTier.HDTV,
    "webdl-480p": QualityTier.SDTV,
    "webrip-480p": QualityTier.SDTV,
    "webdl-720p": QualityTier.WEBDL,
    "webrip-720p": QualityTier.WEBDL,
    "webdl-1080p": QualityTier.WEBDL,
    "webrip-1080p": QualityTier.WEBDL,
    "webdl-2160p": QualityTier.WEBDL,
    "webrip-2160p": QualityTier.WEBDL,
    "bluray-720p": QualityTier.BLURAY720P,
    "bluray-1080p": QualityTier.BLURAY1080P,
    "bluray-1080p remux": QualityTier.BLURAY1080P,
    "bluray-2160p": QualityTier.BLURAY1080P,
    "bluray-2160p remux": QualityTier.BLURAY1080P,
}


def _flatten_profile_items(items: list) -> List[tuple[int | None, str, bool]]:
    """(id, quality name, allowed) for every quality, expanding groups"""
    flat = []
    for item in items:
        if item.get("items"):
            group_allowed = item.get("allowed", False)
            for child in _flatten_profile_items(item["items"]):
                flat.append((item.get("id"), child[1], group_allowed))
        elif "quality" in item:
            quality = item["quality"]
            flat.append((quality.get("id"), quality.get("name", ""), item.get("allowed", False)))
    return flat


def profile_from_sonarr(data: dict) -> QualityProfile:
    """Convert a Sonarr v3 quality profile into a QualityProfile"""
    flat = _flatten_profile_items(data.get("items", []))

    allowed = set()
    cutoff = None
    for item_id, name, is_allowed in flat:
        tier = SONARR_QUALITY_TIERS.get(name.lower())
        if tier is None:
            logger.debug(f"Ignoring unmapped Sonarr quality '{name}'")
            continue
        if is_allowed:
            allowed.add(tier)
        if item_id is not None and item_id == data.get("cutoff"):
            cutoff = tier if cutoff is None else max(cutoff, tier)

    if not allowed:
        allowed = {QualityTier.UNKNOWN}

    return make_profile(
        data.get("name", "Sonarr"),
        allowed,
        cutoff=cutoff,
        allow_propers_below_minimum=False,
    )


class SonarrClient(BaseArrClient):
    """Client to interact with Sonarr API"""

    def get_quality_profiles(self) -> dict[int, QualityProfile]:
        """Fetch quality profiles keyed by Sonarr profile ID"""
        data = self._get("qualityprofile")
        return {item["id"]: profile_from_sonarr(item) for item in data}

    def get_all_series(self, profiles: dict[int, QualityProfile] | None = None) -> List[Series]:
        """Fetch all series"""
        if profiles is None:
            profiles = self.get_quality_profiles()

        fallback = make_profile("Any", list(QualityTier))
        data = self._get("series")
        series_list = []

        for item in data:
            seasons = [
                Season(season_number=s["seasonNumber"], monitored=s.get("monitored", True))
                for s in item.get("seasons", [])
            ]

            series = Series(
                id=item["id"],
                title=item["title"],
                clean_title=normalize_title(item["title"]),
                monitored=item.get("monitored", False),
                quality_profile=profiles.get(item.get("qualityProfileId"), fallback),
                path=item.get("path", ""),
                seasons=seasons,
            )
            series_list.append(series)

        return series_list

    def get_series_episodes(
        self, series_id: int, season_number: int | None = None
    ) -> List[Episode]:
        """Fetch episodes for a series"""
        params = {"seriesId": series_id}
        if season_number is not None:
            params["seasonNumber"] = season_number

        data = self._get("episode", params=params)
        episodes = []

        for item in data:
            episode = Episode(
                id=item["id"],
                series_id=item["seriesId"],
                episode_number=item["episodeNumber"],
                season_number=item["seasonNumber"],
                title=item.get("title", "TBA"),
                has_file=item.get("hasFile", False),
                monitored=item.get("monitored", False),
                air_date=item.get("airDateUtc") or item.get("airDate"),
            )
            episodes.append(episode)

        return episodes

    def search_episodes(self, episode_ids: List[int]):
        """Trigger an episode search in Sonarr"""
        logger.info(f"Triggering episode search for episode IDs {episode_ids}")
        data = {"name": "EpisodeSearch", "episodeIds": episode_ids}
        return self._post("command", data)

    def search_season(self, series_id: int, season_number: int):
        """Trigger a season search in Sonarr"""
        logger.info(f"Triggering season search for series {series_id} season {season_number}")
        data = {"name": "SeasonSearch", "seriesId": series_id, "seasonNumber": season_number}
        return self._post("command", data)
