"""
RSS mode handler - Run one feed ingestion sweep over the configured indexers
"""

import logging

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from feedarr.indexers import Indexer
from feedarr.library import SonarrLibrary
from feedarr.models import SweepResult
from feedarr.pipeline import FeedIngestionPipeline

logger = logging.getLogger(__name__)
console = Console()


def print_failures(result: SweepResult, title: str = "Failures") -> None:
    """Display collected sweep failures as a table"""
    if not result.failures:
        return

    table = Table(title=f"{title} ({len(result.failures)})")
    table.add_column("Type", style="red")
    table.add_column("Detail", style="yellow")

    for failure in result.failures:
        table.add_row(type(failure).__name__, str(failure))

    console.print(table)


def rss_command(
    pipeline: FeedIngestionPipeline,
    library: SonarrLibrary,
    indexers: list[Indexer],
    limit: str | None = None,
) -> SweepResult:
    """
    Run one RSS sweep

    Args:
        pipeline: Feed ingestion pipeline
        library: Library whose cache is refreshed before the sweep
        indexers: Configured indexers
        limit: Optional indexer name to restrict the sweep to

    Returns:
        SweepResult of the sweep
    """
    if limit:
        indexers = [i for i in indexers if i.name.lower() == limit.lower()]

    if not indexers:
        console.print("[yellow]No indexers configured[/yellow]")
        return SweepResult()

    library.refresh()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task(f"Processing {len(indexers)} indexer(s)...", total=None)
        result = pipeline.run(indexers)
        progress.update(task, completed=True)

    console.print("\n[bold]RSS Summary:[/bold]")
    console.print(f"  [green]Submitted: {result.dispatched}[/green]")
    console.print(f"  [dim]Filtered: {result.filtered}[/dim]")
    console.print(f"  [red]Failed: {len(result.failures)}[/red]")
    print_failures(result)

    return result
