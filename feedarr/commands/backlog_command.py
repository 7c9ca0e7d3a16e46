"""
Backlog mode handler - Search for missing episodes by season or episode
"""

import logging

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from feedarr.backlog import BacklogSweep
from feedarr.library import SonarrLibrary
from feedarr.models import EpisodeSearch, SeasonSearch, SweepResult
from feedarr.utils import format_episode_info

from .rss_command import print_failures

logger = logging.getLogger(__name__)
console = Console()


def _describe(command, library: SonarrLibrary) -> tuple[str, str]:
    series = library.get_series(command.series_id)
    series_title = series.title if series else str(command.series_id)

    if isinstance(command, SeasonSearch):
        return "Season", f"{series_title} - Season {command.season_number}"
    if isinstance(command, EpisodeSearch):
        return "Episode", format_episode_info(
            series_title, command.season_number, command.episode_number
        )
    return type(command).__name__, series_title


def backlog_command(
    backlog: BacklogSweep,
    library: SonarrLibrary,
    dry_run: bool = False,
) -> SweepResult:
    """
    Run one backlog sweep

    Args:
        backlog: Backlog sweep
        library: Library whose cache is refreshed before the sweep
        dry_run: If True, only show the planned searches

    Returns:
        SweepResult of the sweep
    """
    library.refresh()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Analysing missing episodes...", total=None)
        commands = backlog.plan()
        progress.update(task, completed=True)

    if not commands:
        console.print("[green]No missing episodes[/green]")
        return SweepResult()

    table = Table(title=f"Backlog searches ({len(commands)})")
    table.add_column("Search", style="cyan")
    table.add_column("Target", style="yellow")
    for command in commands:
        table.add_row(*_describe(command, library))
    console.print(table)

    if dry_run:
        console.print("\n[yellow]DRY RUN mode - No searches dispatched[/yellow]")
        return SweepResult(filtered=len(commands))

    result = backlog.dispatch_all(commands)

    console.print("\n[bold]Backlog Summary:[/bold]")
    console.print(f"  [green]Dispatched: {result.dispatched}[/green]")
    console.print(f"  [red]Failed: {len(result.failures)}[/red]")
    print_failures(result)

    return result
