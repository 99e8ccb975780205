"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from download_registry.models.record import DownloadRecord, DownloadState
from download_registry.utils.formatting import format_size, format_timestamp

STATE_COLORS = {
    DownloadState.INVALID: "dim",
    DownloadState.PENDING: "yellow",
    DownloadState.DOWNLOADING: "cyan",
    DownloadState.PAUSED: "magenta",
    DownloadState.FAILED: "red",
    DownloadState.FINISHED: "green",
}


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "ConfigurationError": [
            "• Check the values in your configuration file (dlreg --show-config).",
            "• Run `dlreg init --force` to write a fresh configuration.",
        ],
        "RegistryUnavailableError": [
            "• Make sure the base directory exists and is writable.",
            "• Another program may hold the database file open.",
            "• Use --base-dir or --db to point at a different file.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -v for debug logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config_data: dict[str, Any], console: Console):
    """Displays the current configuration."""
    content = "\n".join(f"{key} = {value}" for key, value in config_data.items())
    console.print(
        Panel(
            content or "[dim](defaults)[/dim]",
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def format_state(state: DownloadState) -> str:
    color = STATE_COLORS.get(state, "white")
    return f"[{color}]{state.name.lower()}[/{color}]"


def print_records_table(
    records: list[DownloadRecord], console: Console, title: str = "Downloads"
):
    """Displays download records, one row per URL."""
    if not records:
        console.print("[dim]No downloads in the registry.[/dim]")
        return

    table = Table(title=title)
    table.add_column("Updated", style="dim", no_wrap=True)
    table.add_column("State")
    table.add_column("Size", justify="right", style="green")
    table.add_column("URL", style="cyan", overflow="fold")
    table.add_column("Path", overflow="fold")
    for record in records:
        table.add_row(
            format_timestamp(record.timestamp) or "-",
            format_state(record.state),
            format_size(record.size),
            record.url,
            record.path,
        )
    console.print(table)


def print_stats_table(stats_data: dict[str, Any], console: Console):
    """Displays download registry statistics."""
    console.print(
        "\n[bold]Total Downloads in Registry:[/] "
        f"[green]{stats_data['total']}[/green]\n"
    )

    table = Table(title="Downloads by State")
    table.add_column("State")
    table.add_column("Count", justify="right", style="green")
    for state, count in stats_data["by_state"].items():
        table.add_row(format_state(state), str(count))
    console.print(table)
