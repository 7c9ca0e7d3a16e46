"""
Feed ingestion pipeline
Fetches indexer feeds and runs every item through
parse -> match -> policy gates -> dedup -> dispatch
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from typing import Iterable, List

from .errors import (
    FeedarrError,
    FetchError,
    HistoryWriteError,
    ItemProcessingError,
    SubmissionError,
)
from .history import HistoryLedger
from .indexers import Indexer
from .interfaces import DownloadClient, FeedFetcher, Library
from .models import Episode, FeedItem, ReleaseDescriptor, Series, SweepResult
from .quality import QualityPolicy
from .utils import format_release_title

logger = logging.getLogger(__name__)


class FeedIngestionPipeline:
    """
    Processes indexer feeds and submits wanted releases

    A failing feed or item never stops the sweep: errors are logged and
    collected, gate rejections are silent (debug only).
    """

    def __init__(
        self,
        fetcher: FeedFetcher,
        library: Library,
        download_client: DownloadClient,
        ledger: HistoryLedger,
        policy: QualityPolicy | None = None,
        max_workers: int = 4,
        logger: logging.Logger | None = None,
    ):
        self.fetcher = fetcher
        self.library = library
        self.download_client = download_client
        self.ledger = ledger
        self.logger = logger or logging.getLogger(__name__)
        self.policy = policy or QualityPolicy(self.logger)
        self.max_workers = max(1, max_workers)

    def run(self, indexers: Iterable[Indexer]) -> SweepResult:
        """Ingest several indexers on a bounded worker pool"""
        indexers = list(indexers)
        result = SweepResult()
        if not indexers:
            return result

        workers = min(self.max_workers, len(indexers))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {executor.submit(self._ingest, idx): idx for idx in indexers}
            for future in as_completed(futures):
                result.merge(future.result())

        self.logger.info(
            f"RSS sweep finished: {result.dispatched} dispatched, "
            f"{result.filtered} filtered, {len(result.failures)} failure(s)"
        )
        return result

    def ingest(self, indexer: Indexer) -> List[FeedarrError]:
        """Fetch and process every feed of an indexer, returning collected failures"""
        return self._ingest(indexer).failures

    def _ingest(self, indexer: Indexer) -> SweepResult:
        self.logger.debug(f"Fetching feeds from {indexer.name}")
        result = SweepResult()

        for url in indexer.urls:
            try:
                self.logger.debug(f"Downloading RSS {url}")
                items = self.fetcher.fetch(url, indexer.credentials)
            except FetchError as e:
                result.failures.append(e)
                self.logger.error(f"An error occurred while processing feed {url}: {e}")
                continue
            except Exception as e:
                result.failures.append(FetchError(url, str(e)))
                self.logger.exception(f"An error occurred while processing feed {url}")
                continue

            for item in items:
                try:
                    if self.process_item(indexer, item):
                        result.dispatched += 1
                    else:
                        result.filtered += 1
                except SubmissionError as e:
                    result.failures.append(e)
                    self.logger.error(f"Submission failed for {item.title}: {e}")
                except HistoryWriteError as e:
                    # The download client already has it
                    result.dispatched += 1
                    result.failures.append(e)
                    self.logger.error(f"Submitted {item.title} but history was not saved: {e}")
                except Exception as e:
                    result.failures.append(ItemProcessingError(item.title, e))
                    self.logger.exception(
                        f"An error occurred while processing feed item {item.title}"
                    )

        self.logger.info(f"Finished processing feeds from {indexer.name}")
        return result

    def process_item(self, indexer: Indexer, item: FeedItem) -> bool:
        """
        Run one feed item through the gates

        Returns:
            True if the release was submitted, False if a gate filtered it

        Raises:
            SubmissionError if the download client rejected the release
            HistoryWriteError if the release was submitted but not recorded
        """
        self.logger.debug(f"Processing RSS feed item {item.title}")

        descriptor = indexer.parse(item)
        if descriptor is None:
            self.logger.debug(f"Unable to parse {item.title}. skipping.")
            return False

        series = self.library.find_by_clean_title(descriptor.clean_title)
        if series is None:
            self.logger.debug(
                f"Unable to map {descriptor.clean_title} to any series in the library"
            )
            return False
        descriptor = replace(descriptor, matched_series_id=series.id)

        if not self.library.is_monitored(series.id):
            self.logger.debug(f"{series.title} is present but not monitored. skipping.")
            return False

        if not self.library.quality_wanted(series.id, descriptor.quality):
            self.logger.debug(
                f"Post doesn't meet the quality requirements [{descriptor.quality}]. skipping."
            )
            return False

        if self.library.is_ignored(series.id, descriptor.season_number):
            self.logger.debug(
                f"Season {descriptor.season_number} is currently set to ignore. skipping."
            )
            return False

        episodes = self.library.episodes_for_descriptor(descriptor)
        if not self._is_needed(series, descriptor, episodes):
            self.logger.debug(f"{descriptor} is not needed. skipping.")
            return False

        if self._in_history(episodes, descriptor):
            self.logger.debug(f"Episode in history: {item.title}")
            return False

        self._submit(indexer, item, series, descriptor, episodes)
        return True

    def _is_needed(
        self, series: Series, descriptor: ReleaseDescriptor, episodes: List[Episode]
    ) -> bool:
        for episode in episodes:
            if not episode.has_file:
                return True

            current = self.ledger.current(episode.id)
            if current is not None and self.policy.is_upgrade(
                series.quality_profile, current, descriptor.quality
            ):
                return True

        return False

    def _in_history(self, episodes: List[Episode], descriptor: ReleaseDescriptor) -> bool:
        # A release is one file: any satisfied episode vetoes it
        return any(
            self.ledger.is_satisfied(
                episode.id, descriptor.quality.tier, descriptor.quality.is_proper
            )
            for episode in episodes
        )

    def _submit(
        self,
        indexer: Indexer,
        item: FeedItem,
        series: Series,
        descriptor: ReleaseDescriptor,
        episodes: List[Episode],
    ) -> None:
        title = format_release_title(series, descriptor)
        url = indexer.download_url(item)

        try:
            accepted = self.download_client.submit(url, title)
        except SubmissionError:
            raise
        except Exception as e:
            raise SubmissionError(title, str(e)) from e

        if not accepted:
            raise SubmissionError(title)

        self.logger.info(f"Submitted {title} from {indexer.name}")
        try:
            self.ledger.record_many(
                [episode.id for episode in episodes],
                descriptor.quality.tier,
                descriptor.quality.is_proper,
                release_title=item.title,
                indexer=indexer.name,
            )
        except Exception as e:
            raise HistoryWriteError(title, e) from e
