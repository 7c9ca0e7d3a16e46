"""
Acquisition history
Append-only store of accepted releases and the dedup rules built on top of it
"""

import json
import logging
import os
import tempfile
import threading
from datetime import datetime
from pathlib import Path
from typing import Iterable, Iterator, List

from .errors import ConfigError
from .interfaces import HistoryStorage
from .models import HistoryEntry, QualityTier
from .quality import satisfies

logger = logging.getLogger(__name__)


class HistoryStore:
    """
    Thread-safe append-only history storage

    Entries live in memory and, when a path is given, are mirrored to a JSON
    file. The file is rewritten first; an append only lands in memory once
    it has been saved.
    """

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path) if path else None
        self._entries: List[HistoryEntry] = []
        self._lock = threading.Lock()

        if self.path and self.path.exists():
            self._entries = self._load(self.path)
            logger.debug(f"Loaded {len(self._entries)} history entries from {self.path}")

    @staticmethod
    def _load(path: Path) -> List[HistoryEntry]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f) or []

            return [
                HistoryEntry(
                    episode_id=item["episode_id"],
                    quality=QualityTier[item["quality"]],
                    is_proper=item.get("is_proper", False),
                    acquired_at=datetime.fromisoformat(item["acquired_at"]),
                    release_title=item.get("release_title", ""),
                    indexer=item.get("indexer", ""),
                )
                for item in data
            ]
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise ConfigError(f"Unreadable history file {path}: {e}") from e

    def _save(self, entries: List[HistoryEntry]) -> None:
        data = [
            {
                "episode_id": e.episode_id,
                "quality": e.quality.name,
                "is_proper": e.is_proper,
                "acquired_at": e.acquired_at.isoformat(),
                "release_title": e.release_title,
                "indexer": e.indexer,
            }
            for e in entries
        ]

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_name, self.path)
        except Exception:
            os.unlink(tmp_name)
            raise

    def add(self, entry: HistoryEntry) -> None:
        self.add_many([entry])

    def add_many(self, entries: Iterable[HistoryEntry]) -> None:
        """Append entries together; nothing is kept if the file can't be written"""
        with self._lock:
            updated = self._entries + list(entries)
            if self.path:
                self._save(updated)
            self._entries = updated

    def exists(self, episode_id: int, quality: QualityTier, is_proper: bool) -> bool:
        """Exact match on episode, quality and proper status"""
        return any(
            e.quality == quality and e.is_proper == is_proper
            for e in self.entries_for(episode_id)
        )

    def entries_for(self, episode_id: int) -> List[HistoryEntry]:
        with self._lock:
            return [e for e in self._entries if e.episode_id == episode_id]

    def all(self) -> Iterator[HistoryEntry]:
        with self._lock:
            snapshot = list(self._entries)
        return iter(snapshot)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class HistoryLedger:
    """Dedup decisions over a history storage"""

    def __init__(self, storage: HistoryStorage, logger: logging.Logger | None = None):
        self.storage = storage
        self.logger = logger or logging.getLogger(__name__)

    def is_satisfied(
        self, episode_id: int, candidate_quality: QualityTier, candidate_is_proper: bool
    ) -> bool:
        """
        Check whether an episode already holds an equal-or-better acquisition

        Quality and proper status are compared together: a higher tier always
        satisfies, an equal tier satisfies unless the candidate is a proper and
        the held entry is not.
        """
        return any(
            satisfies(entry, candidate_quality, candidate_is_proper)
            for entry in self.storage.entries_for(episode_id)
        )

    def current(self, episode_id: int) -> HistoryEntry | None:
        """Best entry held for an episode, newest first on ties"""
        entries = self.storage.entries_for(episode_id)
        if not entries:
            return None
        return max(entries, key=lambda e: (e.rank, e.acquired_at))

    def entries(self, episode_id: int) -> List[HistoryEntry]:
        return list(self.storage.entries_for(episode_id))

    def record(
        self,
        episode_id: int,
        quality: QualityTier,
        is_proper: bool,
        release_title: str = "",
        indexer: str = "",
    ) -> HistoryEntry:
        """Append an entry; duplicates are kept, never overwritten"""
        entry = HistoryEntry(
            episode_id=episode_id,
            quality=quality,
            is_proper=is_proper,
            acquired_at=datetime.now(),
            release_title=release_title,
            indexer=indexer,
        )
        self.storage.add(entry)
        self.logger.debug(
            f"Recorded history for episode {episode_id}: {quality.label}"
            + (" [Proper]" if is_proper else "")
        )
        return entry

    def record_many(
        self,
        episode_ids: Iterable[int],
        quality: QualityTier,
        is_proper: bool,
        release_title: str = "",
        indexer: str = "",
    ) -> List[HistoryEntry]:
        """Record one release for all of its episodes in a single write"""
        acquired_at = datetime.now()
        entries = [
            HistoryEntry(
                episode_id=episode_id,
                quality=quality,
                is_proper=is_proper,
                acquired_at=acquired_at,
                release_title=release_title,
                indexer=indexer,
            )
            for episode_id in episode_ids
        ]
        self.storage.add_many(entries)
        self.logger.debug(
            f"Recorded history for episodes {[e.episode_id for e in entries]}: {quality.label}"
            + (" [Proper]" if is_proper else "")
        )
        return entries
