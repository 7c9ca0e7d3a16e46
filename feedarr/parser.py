"""
Release title parsing
Turns free-text release names into ReleaseDescriptor values
"""

import logging
import re

from .models import Quality, QualityTier, ReleaseDescriptor

logger = logging.getLogger(__name__)

# Series.Name.S01E02E03.Episode.Title.720p.HDTV or Series Name - S01E02-E03
MULTI_EPISODE_RE = re.compile(
    r"^(?P<title>.+?)[\s._-]+S(?P<season>\d{1,2})"
    r"(?P<episodes>(?:[\s._-]*E\d{1,3})+)(?P<rest>.*)$",
    re.IGNORECASE,
)
# Series Name - 1x02-1x03 or Series.Name.1x02
CROSS_EPISODE_RE = re.compile(
    r"^(?P<title>.+?)[\s._-]+(?P<season>\d{1,2})x(?P<episodes>\d{1,3}"
    r"(?:-(?:\d{1,2}x)?\d{1,3})*)(?P<rest>.*)$",
    re.IGNORECASE,
)
# Series Name Season 1 or Series.Name.S01.720p.BluRay
SEASON_RE = re.compile(
    r"^(?P<title>.+?)[\s._-]+(?:Season[\s._-]*|S)(?P<season>\d{1,2})"
    r"(?P<rest>(?:[\s._-].*)?)$",
    re.IGNORECASE,
)

EPISODE_NUMBER_RE = re.compile(r"(?:E|x)(\d{1,3})", re.IGNORECASE)
PROPER_RE = re.compile(r"\b(proper|repack)\b", re.IGNORECASE)
NORMALIZE_RE = re.compile(r"^the\s|[^a-z0-9]")
SEPARATORS_RE = re.compile(r"[._]+")
RELEASE_TAG_RE = re.compile(
    r"\b(720p|1080p|480p|hdtv|pdtv|sdtv|dsr|web[-.]?dl|webrip|bluray|bdrip|brrip|"
    r"dvdrip|dvd|xvid|x264|h264|proper|repack|internal)\b",
    re.IGNORECASE,
)


def normalize_title(title: str) -> str:
    """Normalize a series title for case and format insensitive matching"""
    cleaned = SEPARATORS_RE.sub(" ", title).strip().lower()
    return NORMALIZE_RE.sub("", cleaned)


def parse_quality(name: str) -> Quality:
    """Detect quality tier and proper flag from a release name"""
    text = SEPARATORS_RE.sub(" ", name).lower()
    is_proper = bool(PROPER_RE.search(text))

    if "bluray" in text or "blu ray" in text or "bdrip" in text or "brrip" in text:
        if "1080p" in text:
            return Quality(QualityTier.BLURAY1080P, is_proper)
        return Quality(QualityTier.BLURAY720P, is_proper)

    if re.search(r"web ?-?dl|webrip", text):
        return Quality(QualityTier.WEBDL, is_proper)

    if "720p" in text or "1080p" in text:
        return Quality(QualityTier.HDTV, is_proper)

    if "dvd" in text:
        return Quality(QualityTier.DVD, is_proper)

    if "hdtv" in text or "pdtv" in text or "sdtv" in text or "dsr" in text or "xvid" in text:
        if "hdtv" in text and "x264" in text:
            return Quality(QualityTier.HDTV, is_proper)
        return Quality(QualityTier.SDTV, is_proper)

    return Quality(QualityTier.UNKNOWN, is_proper)


def _clean_series_title(raw: str) -> str:
    return SEPARATORS_RE.sub(" ", raw).strip(" -")


def _episode_title(rest: str) -> str:
    """Text between the episode marker and the first release tag"""
    text = SEPARATORS_RE.sub(" ", rest).strip(" -")
    match = RELEASE_TAG_RE.search(text)
    if match:
        text = text[: match.start()]
    return text.strip(" -")


def parse_episode_info(title: str) -> ReleaseDescriptor | None:
    """
    Parse a release title into a ReleaseDescriptor

    Supported forms:
        Series.Name.S01E02.720p.HDTV.x264
        Series Name - S01E02E03 - Episode Title
        Series Name - 1x02-1x03
        Series Name Season 1 / Series.Name.S01.BluRay

    Returns:
        ReleaseDescriptor, or None if the title is not a TV release
    """
    if not title or not title.strip():
        return None

    for pattern in (MULTI_EPISODE_RE, CROSS_EPISODE_RE):
        match = pattern.match(title.strip())
        if not match:
            continue

        if pattern is CROSS_EPISODE_RE:
            episodes = _cross_episode_numbers(match.group("episodes"))
        else:
            episodes = [int(num) for num in EPISODE_NUMBER_RE.findall(match.group("episodes"))]

        if not episodes:
            continue

        series_title = _clean_series_title(match.group("title"))
        return ReleaseDescriptor(
            raw_title=title,
            clean_title=series_title,
            season_number=int(match.group("season")),
            episode_numbers=tuple(episodes),
            quality=parse_quality(title),
            episode_title=_episode_title(match.group("rest")),
        )

    match = SEASON_RE.match(title.strip())
    if match:
        return ReleaseDescriptor(
            raw_title=title,
            clean_title=_clean_series_title(match.group("title")),
            season_number=int(match.group("season")),
            quality=parse_quality(title),
            is_full_season=True,
        )

    logger.debug(f"Unable to parse release title: {title}")
    return None


def _cross_episode_numbers(text: str) -> list[int]:
    """Episode numbers from '02-1x03' style fragments"""
    numbers = []
    for part in text.split("-"):
        if not part:
            continue
        if "x" in part.lower():
            part = part.lower().split("x", 1)[1]
        if part.isdigit():
            numbers.append(int(part))
    return numbers
