"""Tests for the command line interface"""

from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner
from conftest import make_series

from feedarr.cli import cli
from feedarr.config import Config
from feedarr.history import HistoryLedger, HistoryStore
from feedarr.indexers import Indexer
from feedarr.models import EpisodeSearch, QualityTier, SeasonSearch, SweepResult


@pytest.fixture
def context():
    library = MagicMock()
    library.get_series.return_value = make_series()
    backlog = MagicMock()
    backlog.plan.return_value = [SeasonSearch(1, 1), EpisodeSearch(202, 1, 2, 3)]
    backlog.dispatch_all.return_value = SweepResult(dispatched=2)
    pipeline = MagicMock()
    pipeline.run.return_value = SweepResult(dispatched=1, filtered=4)

    return {
        "config": Config(sonarr_url="http://sonarr", sonarr_api_key="key"),
        "sonarr": MagicMock(),
        "sabnzbd": MagicMock(),
        "library": library,
        "ledger": HistoryLedger(HistoryStore()),
        "indexers": [
            Indexer(name="NZBGeek", urls=["http://geek/rss"]),
            Indexer(name="nzbs.org", urls=["http://nzbs/rss"]),
        ],
        "pipeline": pipeline,
        "backlog": backlog,
    }


def invoke(context, args):
    runner = CliRunner()
    with patch("feedarr.cli.load_config_from_args", return_value=context["config"]), patch(
        "feedarr.cli.validate_sonarr_connection", return_value=context["sonarr"]
    ), patch("feedarr.cli.setup_context", return_value=context):
        return runner.invoke(cli, args, obj={})


def test_rss_runs_all_indexers(context):
    result = invoke(context, ["rss"])

    assert result.exit_code == 0
    indexers = context["pipeline"].run.call_args.args[0]
    assert [i.name for i in indexers] == ["NZBGeek", "nzbs.org"]
    assert "Submitted: 1" in result.output
    context["library"].refresh.assert_called_once()


def test_rss_single_indexer(context):
    result = invoke(context, ["rss", "--indexer", "NZBS.ORG"])

    assert result.exit_code == 0
    indexers = context["pipeline"].run.call_args.args[0]
    assert [i.name for i in indexers] == ["nzbs.org"]


def test_rss_requires_sabnzbd(context):
    context["pipeline"] = None

    result = invoke(context, ["rss"])

    assert result.exit_code == 1
    assert "SABnzbd is not configured" in result.output


def test_backlog_dispatches_plan(context):
    result = invoke(context, ["backlog"])

    assert result.exit_code == 0
    context["backlog"].dispatch_all.assert_called_once_with(
        [SeasonSearch(1, 1), EpisodeSearch(202, 1, 2, 3)]
    )
    assert "Dispatched: 2" in result.output


def test_backlog_dry_run(context):
    result = invoke(context, ["backlog", "--dry-run"])

    assert result.exit_code == 0
    context["backlog"].dispatch_all.assert_not_called()
    assert "DRY RUN" in result.output
    assert "My Series Name - Season 1" in result.output
    assert "My Series Name - S02E03" in result.output


def test_backlog_error_exits(context):
    context["backlog"].plan.side_effect = RuntimeError("Sonarr unavailable")

    result = invoke(context, ["backlog"])

    assert result.exit_code == 1
    assert "Sonarr unavailable" in result.output


def test_history_empty(context):
    result = invoke(context, ["history"])

    assert result.exit_code == 0
    assert "No history recorded" in result.output


def test_history_lists_entries(context):
    context["ledger"].record(101, QualityTier.HDTV, True, indexer="NZBGeek")
    context["ledger"].record(102, QualityTier.SDTV, False, indexer="NZBGeek")

    result = invoke(context, ["history", "--episode", "101"])

    assert result.exit_code == 0
    assert "HDTV" in result.output
    assert "SDTV" not in result.output


def test_test_command_reports_connections(context):
    context["sonarr"].get_all_series.return_value = [make_series(), make_series(2, monitored=False)]
    context["sabnzbd"].test_connection.return_value = True
    context["sabnzbd"].get_categories.return_value = ["tv", "movies"]

    result = invoke(context, ["test"])

    assert result.exit_code == 0
    assert "Number of series: 2" in result.output
    assert "Monitored series: 1" in result.output
    assert "SABnzbd connection successful" in result.output
    assert "Indexers configured: 2" in result.output


def test_corrupt_history_file_is_a_configuration_error(context, tmp_path):
    path = tmp_path / "history.json"
    path.write_text("{not json", encoding="utf-8")
    config = Config(sonarr_url="http://sonarr", sonarr_api_key="key", history_file=str(path))

    with patch("feedarr.cli.load_config_from_args", return_value=config), patch(
        "feedarr.cli.validate_sonarr_connection", return_value=context["sonarr"]
    ):
        result = CliRunner().invoke(cli, ["history"], obj={})

    assert result.exit_code == 1
    assert "Configuration error" in result.output
    assert "Unreadable history file" in result.output
