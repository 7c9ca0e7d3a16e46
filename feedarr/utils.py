"""
Miscellaneous utilities
"""

import logging
import re

from .models import ReleaseDescriptor, Series


def setup_logging(log_level: str = "INFO"):
    """Configure logging system"""
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def format_episode_info(series_title: str, season: int, episode: int, title: str = "") -> str:
    """Format episode information for display"""
    info = f"{series_title} - S{season:02d}E{episode:02d}"
    return f"{info} - {title}" if title else info


def series_folder_name(series: Series) -> str:
    """Last component of the series path, falling back to its title"""
    parts = [p for p in re.split(r"[\\/]", series.path or "") if p]
    return parts[-1] if parts else series.title


def format_release_title(series: Series, descriptor: ReleaseDescriptor) -> str:
    """
    Build the title a release is submitted under

    Format:
        My Series - 1x2-1x4 - Episode Title [HDTV] [Proper]
        My Series - Season 1 [Bluray720p] [Proper]
    """
    name = series_folder_name(series)
    quality = descriptor.quality

    if descriptor.is_full_season:
        title = f"{name} - Season {descriptor.season_number} [{quality.tier.label}]"
    else:
        episodes = "-".join(
            f"{descriptor.season_number}x{num}" for num in descriptor.episode_numbers
        )
        title = f"{name} - {episodes} - {descriptor.episode_title} [{quality.tier.label}]"

    if quality.is_proper:
        title += " [Proper]"

    return title
