"""
History command - Display recorded acquisitions
"""

from rich.console import Console
from rich.table import Table

from feedarr.history import HistoryLedger

console = Console()


def history_command(
    ledger: HistoryLedger,
    episode_id: int | None = None,
    limit: int | None = None,
) -> None:
    """Execute the history command logic"""
    if episode_id is not None:
        entries = ledger.entries(episode_id)
    else:
        entries = list(ledger.storage.all())

    entries.sort(key=lambda e: e.acquired_at, reverse=True)
    if limit:
        entries = entries[:limit]

    if not entries:
        console.print("[yellow]No history recorded[/yellow]")
        return

    table = Table(title=f"History ({len(entries)})")
    table.add_column("Date", style="dim")
    table.add_column("Episode ID", style="cyan")
    table.add_column("Quality", style="green")
    table.add_column("Proper", style="magenta")
    table.add_column("Indexer", style="blue")
    table.add_column("Release", style="white")

    for entry in entries:
        table.add_row(
            entry.acquired_at.strftime("%Y-%m-%d %H:%M:%S"),
            str(entry.episode_id),
            entry.quality.label,
            "yes" if entry.is_proper else "",
            entry.indexer,
            entry.release_title,
        )

    console.print(table)
