"""Tests for the feed ingestion pipeline"""

import pytest
from conftest import (
    FakeDownloadClient,
    FakeFetcher,
    FakeLibrary,
    feed_item,
    make_episode,
    make_series,
)

from feedarr.errors import FetchError, HistoryWriteError, ItemProcessingError, SubmissionError
from feedarr.history import HistoryLedger, HistoryStore
from feedarr.indexers import Indexer
from feedarr.models import QualityTier, Season
from feedarr.parser import parse_episode_info
from feedarr.pipeline import FeedIngestionPipeline

FEED_URL = "http://indexer/rss"
HDTV_RELEASE = "My.Series.Name.S01E02.720p.HDTV.x264-GRP"


def make_pipeline(library, ledger, items, client=None):
    fetcher = FakeFetcher({FEED_URL: items})
    client = client or FakeDownloadClient()
    return FeedIngestionPipeline(fetcher, library, client, ledger), client


def test_wanted_release_is_submitted_and_recorded(library, ledger, indexer):
    pipeline, client = make_pipeline(library, ledger, [feed_item(HDTV_RELEASE)])

    failures = pipeline.ingest(indexer)

    assert failures == []
    assert client.submitted == [("http://indexer/nzb/1", "My Series Name - 1x2 -  [HDTV]")]
    entry = ledger.current(102)
    assert entry.quality == QualityTier.HDTV
    assert entry.release_title == HDTV_RELEASE
    assert entry.indexer == "TestIndexer"


def test_unparseable_title_is_filtered(library, ledger, indexer):
    pipeline, client = make_pipeline(library, ledger, [feed_item("Some random text")])

    result = pipeline.run([indexer])

    assert result.failures == []
    assert result.filtered == 1
    assert client.submitted == []


def test_unknown_series_is_filtered(library, ledger, indexer):
    pipeline, client = make_pipeline(
        library, ledger, [feed_item("Other.Show.S01E02.720p.HDTV.x264")]
    )

    assert pipeline.ingest(indexer) == []
    assert client.submitted == []


def test_unmonitored_series_is_skipped_without_failure(ledger, indexer, episodes):
    library = FakeLibrary([make_series(monitored=False)], episodes)
    pipeline, client = make_pipeline(library, ledger, [feed_item(HDTV_RELEASE)])

    assert pipeline.ingest(indexer) == []
    assert client.submitted == []
    assert len(ledger.storage) == 0


def test_unwanted_quality_is_filtered(library, ledger, indexer):
    pipeline, client = make_pipeline(
        library, ledger, [feed_item("My.Series.Name.S01E02.1080p.BluRay.x264")]
    )

    assert pipeline.ingest(indexer) == []
    assert client.submitted == []


def test_ignored_season_is_filtered(ledger, indexer):
    series = make_series(seasons=[Season(1, False)])
    library = FakeLibrary([series], [make_episode(102, number=2)])
    pipeline, client = make_pipeline(library, ledger, [feed_item(HDTV_RELEASE)])

    assert pipeline.ingest(indexer) == []
    assert client.submitted == []


def test_episode_with_file_and_no_history_is_not_needed(ledger, indexer, series):
    library = FakeLibrary([series], [make_episode(102, number=2, has_file=True)])
    pipeline, client = make_pipeline(library, ledger, [feed_item(HDTV_RELEASE)])

    assert pipeline.ingest(indexer) == []
    assert client.submitted == []


def test_upgrade_over_history_is_submitted(ledger, indexer, series):
    library = FakeLibrary([series], [make_episode(102, number=2, has_file=True)])
    ledger.record(102, QualityTier.SDTV, False)
    pipeline, client = make_pipeline(library, ledger, [feed_item(HDTV_RELEASE)])

    assert pipeline.ingest(indexer) == []
    assert len(client.submitted) == 1


def test_proper_of_held_quality_is_submitted(ledger, indexer, series):
    library = FakeLibrary([series], [make_episode(102, number=2, has_file=True)])
    ledger.record(102, QualityTier.HDTV, False)
    pipeline, client = make_pipeline(
        library, ledger, [feed_item("My.Series.Name.S01E02.PROPER.720p.HDTV.x264")]
    )

    assert pipeline.ingest(indexer) == []
    assert client.submitted[0][1] == "My Series Name - 1x2 -  [HDTV] [Proper]"
    assert ledger.current(102).is_proper


def test_multi_episode_release_vetoed_by_any_episode_in_history(library, ledger, indexer):
    ledger.record(103, QualityTier.HDTV, False)
    pipeline, client = make_pipeline(
        library, ledger, [feed_item("My.Series.Name.S01E02E03.720p.HDTV.x264")]
    )

    assert pipeline.ingest(indexer) == []
    assert client.submitted == []


def test_multi_episode_release_records_every_episode(library, ledger, indexer):
    pipeline, client = make_pipeline(
        library, ledger, [feed_item("My Series Name - 1x02-1x03 - Pilot HDTV x264")]
    )

    assert pipeline.ingest(indexer) == []
    assert client.submitted[0][1] == "My Series Name - 1x2-1x3 - Pilot [HDTV]"
    assert ledger.current(102) is not None
    assert ledger.current(103) is not None


def test_season_pack_is_submitted_and_recorded_for_every_episode(library, ledger, indexer):
    pipeline, client = make_pipeline(
        library, ledger, [feed_item("My.Series.Name.S01.720p.HDTV.x264")]
    )

    assert pipeline.ingest(indexer) == []
    assert client.submitted == [("http://indexer/nzb/1", "My Series Name - Season 1 [HDTV]")]
    for episode_id in range(101, 106):
        entry = ledger.current(episode_id)
        assert entry.quality == QualityTier.HDTV
        assert entry.release_title == "My.Series.Name.S01.720p.HDTV.x264"


def test_season_pack_vetoed_by_one_episode_in_history(library, ledger, indexer):
    ledger.record(103, QualityTier.HDTV, False)
    pipeline, client = make_pipeline(
        library, ledger, [feed_item("My.Series.Name.S01.720p.HDTV.x264")]
    )

    result = pipeline.run([indexer])

    assert result.failures == []
    assert result.filtered == 1
    assert client.submitted == []
    assert ledger.current(101) is None


def test_history_write_failure_keeps_no_partial_entries(tmp_path, monkeypatch, library, indexer):
    store = HistoryStore(tmp_path / "history.json")

    def failing_save(entries):
        raise OSError("disk full")

    monkeypatch.setattr(store, "_save", failing_save)
    pipeline, client = make_pipeline(
        library, HistoryLedger(store), [feed_item("My.Series.Name.S01E02E03.720p.HDTV.x264")]
    )

    result = pipeline.run([indexer])

    assert result.dispatched == 1
    assert len(client.submitted) == 1
    assert len(result.failures) == 1
    assert isinstance(result.failures[0], HistoryWriteError)
    assert isinstance(result.failures[0].cause, OSError)
    assert len(store) == 0


def test_item_failure_does_not_stop_the_feed(library, ledger, series):
    calls = []

    def flaky_parser(title):
        calls.append(title)
        if len(calls) == 1:
            raise RuntimeError("parser exploded")
        return parse_episode_info(title)

    indexer = Indexer(name="Flaky", urls=[FEED_URL], title_parser=flaky_parser)
    items = [feed_item("Broken.Item"), feed_item(HDTV_RELEASE)]
    pipeline, client = make_pipeline(library, ledger, items)

    result = pipeline.run([indexer])

    assert result.dispatched == 1
    assert len(result.failures) == 1
    assert isinstance(result.failures[0], ItemProcessingError)
    assert result.failures[0].title == "Broken.Item"
    assert len(client.submitted) == 1


@pytest.mark.parametrize("outcome", [False, RuntimeError("connection refused")])
def test_rejected_submission_is_a_failure_without_history(library, ledger, indexer, outcome):
    pipeline, client = make_pipeline(
        library, ledger, [feed_item(HDTV_RELEASE)], client=FakeDownloadClient(outcome)
    )

    failures = pipeline.ingest(indexer)

    assert len(failures) == 1
    assert isinstance(failures[0], SubmissionError)
    assert ledger.current(102) is None


def test_failing_feed_is_isolated(library, ledger):
    fetcher = FakeFetcher(
        {
            "http://bad/rss": FetchError("http://bad/rss", "timed out"),
            "http://broken/rss": ValueError("garbage"),
            FEED_URL: [feed_item(HDTV_RELEASE)],
        }
    )
    client = FakeDownloadClient()
    pipeline = FeedIngestionPipeline(fetcher, library, client, ledger, max_workers=2)
    indexers = [
        Indexer(name="Bad", urls=["http://bad/rss", "http://broken/rss"]),
        Indexer(name="Good", urls=[FEED_URL]),
    ]

    result = pipeline.run(indexers)

    assert result.dispatched == 1
    assert len(result.failures) == 2
    assert all(isinstance(f, FetchError) for f in result.failures)
    assert {f.url for f in result.failures} == {"http://bad/rss", "http://broken/rss"}


def test_credentials_are_passed_to_fetcher(library, ledger):
    pipeline, _ = make_pipeline(library, ledger, [])
    indexer = Indexer(name="Private", urls=[FEED_URL], credentials=("user", "secret"))

    pipeline.ingest(indexer)

    assert pipeline.fetcher.calls == [(FEED_URL, ("user", "secret"))]


def test_run_without_indexers_is_empty(library, ledger):
    pipeline, _ = make_pipeline(library, ledger, [])

    result = pipeline.run([])

    assert result.dispatched == 0
    assert result.failures == []
