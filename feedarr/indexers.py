"""
Indexer definitions
Each indexer is a value carrying its feed URLs, credentials and the hooks used
to parse items and build download links
"""

import logging
import re
from dataclasses import dataclass, replace
from typing import Callable, List, Optional

from .errors import ConfigError
from .interfaces import ReleaseParser
from .models import FeedItem, QualityTier, ReleaseDescriptor
from .parser import parse_episode_info, parse_quality

logger = logging.getLogger(__name__)

ItemParser = Callable[[FeedItem, ReleaseDescriptor], Optional[ReleaseDescriptor]]
DownloadUrlBuilder = Callable[[FeedItem], str]


def default_custom_parser(
    item: FeedItem, descriptor: ReleaseDescriptor
) -> Optional[ReleaseDescriptor]:
    return descriptor


def default_download_url(item: FeedItem) -> str:
    return item.link


@dataclass
class Indexer:
    """A release feed source"""

    name: str
    urls: List[str]
    credentials: tuple | None = None
    custom_parser: ItemParser = default_custom_parser
    download_url: DownloadUrlBuilder = default_download_url
    title_parser: ReleaseParser = parse_episode_info

    def parse(self, item: FeedItem) -> Optional[ReleaseDescriptor]:
        """Parse an item title, then let the indexer refine the result"""
        descriptor = self.title_parser(item.title)
        if descriptor is None:
            return None
        return self.custom_parser(item, descriptor)


def _newzbin_parser(item: FeedItem, descriptor: ReleaseDescriptor) -> ReleaseDescriptor:
    # Newzbin reports carry the video format in the description
    if descriptor.quality.tier != QualityTier.UNKNOWN or not item.description:
        return descriptor

    quality = parse_quality(item.description)
    if quality.tier == QualityTier.UNKNOWN:
        return descriptor

    return replace(
        descriptor,
        quality=replace(quality, is_proper=descriptor.quality.is_proper or quality.is_proper),
    )


def _newzbin_download_url(item: FeedItem) -> str:
    return item.link.rstrip("/") + "/nzb"


def _nzbmatrix_download_url(username: str, api_key: str) -> DownloadUrlBuilder:
    def build(item: FeedItem) -> str:
        match = re.search(r"id=(\d+)", item.link)
        if not match:
            return item.link
        return (
            "http://api.nzbmatrix.com/v1.1/download.php"
            f"?id={match.group(1)}&username={username}&apikey={api_key}"
        )

    return build


def _nzbsorg_download_url(item: FeedItem) -> str:
    return item.link.replace("action=view", "action=getnzb")


def _newznab_urls(url: str, api_key: str, categories: str) -> List[str]:
    base = url.rstrip("/")
    return [f"{base}/api?t=tvsearch&cat={categories}&apikey={api_key}"]


def build_indexer(settings: dict) -> Indexer:
    """
    Create an Indexer from a configuration mapping

    Args:
        settings: Mapping with at least 'name' and either 'urls' or 'url'.
            Optional keys: kind (newznab, newzbin, nzbmatrix, nzbsorg, rss),
            username, password, api_key, categories

    Returns:
        Indexer instance
    """
    name = settings.get("name")
    if not name:
        raise ConfigError("Indexer entry is missing a name")

    kind = settings.get("kind", "rss").lower()
    username = settings.get("username")
    password = settings.get("password")
    api_key = settings.get("api_key", "")
    urls = list(settings.get("urls") or [])
    if settings.get("url") and not urls:
        urls = [settings["url"]]

    if kind == "newznab":
        if not urls or not api_key:
            raise ConfigError(f"Newznab indexer '{name}' needs url and api_key")
        urls = _newznab_urls(urls[0], api_key, settings.get("categories", "5030,5040"))

    if not urls:
        raise ConfigError(f"Indexer '{name}' has no feed URLs")

    credentials = (username, password) if username and password else None
    indexer = Indexer(name=name, urls=urls, credentials=credentials)

    if kind == "newzbin":
        indexer.custom_parser = _newzbin_parser
        indexer.download_url = _newzbin_download_url
    elif kind == "nzbmatrix":
        if not username or not api_key:
            raise ConfigError(f"NzbMatrix indexer '{name}' needs username and api_key")
        indexer.download_url = _nzbmatrix_download_url(username, api_key)
    elif kind == "nzbsorg":
        indexer.download_url = _nzbsorg_download_url
    elif kind not in ("rss", "newznab"):
        raise ConfigError(f"Unknown indexer kind '{kind}' for '{name}'")

    logger.debug(f"Configured indexer {name} ({kind}) with {len(urls)} feed(s)")
    return indexer


def build_indexers(entries: list) -> List[Indexer]:
    return [build_indexer(entry) for entry in entries or [] if entry.get("enabled", True)]
