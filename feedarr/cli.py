"""
Command Line Interface (CLI) with Click
"""

import logging
import sys

import click
from rich.console import Console

from feedarr.cli_config import (
    load_config_from_args,
    setup_context,
    validate_sonarr_connection,
)
from feedarr.commands import (
    backlog_command,
    history_command,
    rss_command,
    test_command,
)
from feedarr.config import VALID_SCHEDULE_UNITS, Config
from feedarr.errors import FeedarrError
from feedarr.jobs import build_scheduler, run_forever
from feedarr.utils import setup_logging

logger = logging.getLogger(__name__)
console = Console()


@click.group()
@click.option(
    "--config", "-c", type=click.Path(exists=True), help="YAML configuration file"
)
@click.option("--sonarr-url", envvar="SONARR_URL", help="Sonarr URL")
@click.option("--sonarr-api-key", envvar="SONARR_API_KEY", help="Sonarr API key")
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
)
@click.pass_context
def cli(ctx, config, sonarr_url, sonarr_api_key, log_level):
    """Feedarr - RSS release grabber and backlog searcher for Sonarr libraries"""

    # Setup logging
    setup_logging(log_level)

    # Load and validate configuration
    cfg = load_config_from_args(config, sonarr_url, sonarr_api_key, log_level)

    # Validate Sonarr connection
    sonarr_client = validate_sonarr_connection(cfg)

    # Setup context
    ctx.ensure_object(dict)
    try:
        ctx.obj.update(setup_context(cfg, sonarr_client))
    except FeedarrError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)


def _require_pipeline(ctx):
    pipeline = ctx.obj["pipeline"]
    if pipeline is None:
        console.print(
            "[red]Error:[/red] SABnzbd is not configured (sabnzbd_url / sabnzbd_api_key)"
        )
        sys.exit(1)
    return pipeline


@cli.command()
@click.option("--indexer", "-i", help="Limit to a single indexer (by name)")
@click.pass_context
def rss(ctx, indexer):
    """Fetch indexer feeds and submit wanted releases"""
    pipeline = _require_pipeline(ctx)

    try:
        rss_command(pipeline, ctx.obj["library"], ctx.obj["indexers"], indexer)
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        logger.exception("Error during RSS sweep")
        sys.exit(1)


@cli.command()
@click.option("--dry-run", "-d", is_flag=True, help="Only show the planned searches")
@click.pass_context
def backlog(ctx, dry_run):
    """Search for missing episodes, by season where possible"""
    try:
        backlog_command(ctx.obj["backlog"], ctx.obj["library"], dry_run=dry_run)
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        logger.exception("Error during backlog sweep")
        sys.exit(1)


@cli.command()
@click.option("--episode", "-e", type=int, help="Only show history for an episode ID")
@click.option("--limit", "-l", type=int, help="Show at most this many entries")
@click.pass_context
def history(ctx, episode, limit):
    """Show recorded acquisitions"""
    history_command(ctx.obj["ledger"], episode_id=episode, limit=limit)


@cli.command()
@click.pass_context
def test(ctx):
    """Test connection to Sonarr and SABnzbd"""
    test_command(
        ctx.obj["config"], ctx.obj["sonarr"], ctx.obj["sabnzbd"], ctx.obj["indexers"]
    )


@cli.command("schedule-mode")
@click.option("--rss-interval", type=int, help="Override RSS interval from config")
@click.option(
    "--rss-unit",
    type=click.Choice(VALID_SCHEDULE_UNITS),
    help="Override RSS interval unit from config",
)
@click.option("--backlog-interval", type=int, help="Override backlog interval from config")
@click.option(
    "--backlog-unit",
    type=click.Choice(VALID_SCHEDULE_UNITS),
    help="Override backlog interval unit from config",
)
@click.option("--no-backlog", is_flag=True, help="Only run the RSS sweep")
@click.pass_context
def schedule_mode(ctx, rss_interval, rss_unit, backlog_interval, backlog_unit, no_backlog):
    """Run RSS and backlog sweeps on a schedule"""

    config: Config = ctx.obj["config"]
    pipeline = ctx.obj["pipeline"]
    library = ctx.obj["library"]

    rss_interval = rss_interval if rss_interval is not None else config.rss_interval
    rss_unit = rss_unit or config.rss_unit
    backlog_interval = (
        backlog_interval if backlog_interval is not None else config.backlog_interval
    )
    backlog_unit = backlog_unit or config.backlog_unit

    def run_rss():
        rss_command(pipeline, library, ctx.obj["indexers"])

    def run_backlog():
        backlog_command(ctx.obj["backlog"], library)

    if pipeline is None:
        console.print("[yellow]SABnzbd not configured, RSS sweep disabled[/yellow]")

    scheduler = build_scheduler(
        run_rss if pipeline is not None else None,
        None if no_backlog else run_backlog,
        rss_interval,
        rss_unit,
        backlog_interval,
        backlog_unit,
    )

    if not scheduler.jobs:
        console.print("[red]Error:[/red] Nothing to schedule")
        sys.exit(1)

    console.print("[bold cyan]Feedarr - Schedule Mode[/bold cyan]")
    if pipeline is not None:
        console.print(f"RSS sweep every {rss_interval} {rss_unit}")
    if not no_backlog:
        console.print(f"Backlog sweep every {backlog_interval} {backlog_unit}")
    console.print("Press Ctrl+C to stop\n")

    try:
        run_forever(scheduler)
    except KeyboardInterrupt:
        console.print("\n\n[yellow]Schedule mode stopped by user[/yellow]")
        sys.exit(0)


def main():
    """Main entry point"""
    cli(obj={})


if __name__ == "__main__":
    main()
