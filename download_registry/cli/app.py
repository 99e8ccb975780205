"""
Defines the command-line interface for the application using Typer.
Lets a user inspect and edit a download registry file from the shell.
"""

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from download_registry import __version__
from download_registry.exceptions import RegistryUnavailableError
from download_registry.models.config import DEFAULT_DATABASE_NAME, RegistryConfig
from download_registry.models.record import DownloadRecord, DownloadState
from download_registry.storage.config_manager import ConfigManager
from download_registry.storage.registry import DownloadRegistry

from .formatters import print_config, print_records_table, print_stats_table

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("download_registry")

app = typer.Typer(
    name="dlreg",
    help=(
        "Inspect and edit a persisted registry of download tasks. Use 'dlreg"
        " <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "download-registry"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


def parse_state(value: str) -> DownloadState:
    """Accepts a state name (any case) or its integer code."""
    text = value.strip()
    if text.lstrip("-").isdigit():
        try:
            return DownloadState(int(text))
        except ValueError:
            pass
    else:
        try:
            return DownloadState[text.upper()]
        except KeyError:
            pass
    choices = ", ".join(s.name.lower() for s in DownloadState)
    raise typer.BadParameter(f"Unknown state '{value}'. Choose one of: {choices}.")


def _load_config(ctx: typer.Context) -> RegistryConfig:
    settings = ctx.ensure_object(dict)
    config_manager = ConfigManager(settings.get("config_file", CONFIG_FILE))
    return config_manager.load_config(settings.get("cli_options"))


@contextmanager
def _open_registry(ctx: typer.Context) -> Iterator[DownloadRegistry]:
    config = _load_config(ctx)
    registry = DownloadRegistry(config.database_name, config.base_dir)
    if not registry.is_open:
        raise RegistryUnavailableError(
            f"Could not open the download registry at '{registry.db_path}'."
        )
    try:
        yield registry
    finally:
        registry.close()


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Show debug logging.",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
    config_file: Path = typer.Option(
        CONFIG_FILE, "--config", help="Path of the INI configuration file."
    ),
    database_name: str | None = typer.Option(
        None, "--db", help="Database file name, overriding the configuration."
    ),
    base_dir: Path | None = typer.Option(
        None,
        "--base-dir",
        help="Directory holding the database file, overriding the configuration.",
    ),
):
    """Download Registry CLI"""
    if version:
        console.print(f"[bold]dlreg[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "DEBUG" if verbose >= 1 else "INFO"
    logging.getLogger("download_registry").setLevel(log_level)

    ctx.obj = {
        "config_file": config_file,
        "cli_options": {"database_name": database_name, "base_dir": base_dir},
    }

    if show_config:
        config_manager = ConfigManager(config_file)
        config_data = config_manager.get_config_as_dict()
        print_config(config_file, config_data, console)
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    ctx: typer.Context,
    database_name: str = typer.Option(
        DEFAULT_DATABASE_NAME, "--database-name", help="Database file name."
    ),
    base_dir: Path | None = typer.Option(
        None, "--base-dir", help="Directory for the database (default: home)."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing configuration."
    ),
):
    """Write a configuration file."""
    config_file = ctx.ensure_object(dict).get("config_file", CONFIG_FILE)
    if (
        config_file.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    config_manager = ConfigManager(config_file)
    config_manager.save_new_config(
        {"database_name": database_name, "base_dir": base_dir}
    )
    console.print(
        f"[bold green]✓ Configuration saved to '{config_file}'[/bold green]"
    )


@app.command(name="list")
def list_command(
    ctx: typer.Context,
    pending: bool = typer.Option(
        False, "--pending", help="Show only downloads that have not finished."
    ),
    include_finished: bool = typer.Option(
        False,
        "--include-finished",
        help="With --pending, keep finished downloads in the list.",
    ),
    sort: bool = typer.Option(
        True, "--sort/--no-sort", help="Order by last update, most recent first."
    ),
):
    """List the downloads stored in the registry."""
    with _open_registry(ctx) as registry:
        if pending:
            records = registry.list_pending(
                include_finished=include_finished, sort=sort
            )
            title = "Pending Downloads"
        else:
            records = registry.list_pending(include_finished=True, sort=sort)
            title = "Downloads"
    print_records_table(records, console, title=title)


@app.command()
def add(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="Source URL of the download."),
    path: str = typer.Option("", "--path", "-p", help="Destination path."),
    size: int = typer.Option(0, "--size", "-s", help="Size in bytes."),
    state: str = typer.Option(
        DownloadState.PENDING.name.lower(), "--state", help="Initial state."
    ),
):
    """Store a download, replacing any entry with the same URL."""
    record = DownloadRecord(url=url, path=path, size=size, state=parse_state(state))
    with _open_registry(ctx) as registry:
        stored = registry.update(record)
    if not stored:
        console.print(f"[red]✗ Failed to store '{url}'.[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]✓ Stored '{url}'.[/green]")


@app.command(name="set-state")
def set_state(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="Source URL of a stored download."),
    state: str = typer.Argument(..., help="New state, by name or number."),
):
    """Change the state of a stored download."""
    new_state = parse_state(state)
    with _open_registry(ctx) as registry:
        known = registry.get(url) is not None
        updated = known and registry.update_state(url, new_state)
    if not known:
        console.print(f"[yellow]⚠️  No download stored for '{url}'.[/yellow]")
        raise typer.Exit(code=1)
    if not updated:
        console.print(f"[red]✗ Failed to update '{url}'.[/red]")
        raise typer.Exit(code=1)
    console.print(
        f"[green]✓ '{url}' is now {new_state.name.lower()}.[/green]"
    )


@app.command()
def stats(ctx: typer.Context):
    """Show statistics from the download registry."""
    with _open_registry(ctx) as registry:
        stats_data = registry.get_stats()
    if stats_data:
        print_stats_table(stats_data, console)
    else:
        console.print("[yellow]Could not retrieve stats.[/yellow]")
        raise typer.Exit(code=1)


@app.command()
def vacuum(ctx: typer.Context):
    """Optimize the download registry database."""
    console.print("[cyan]Optimizing registry database...[/cyan]")
    with _open_registry(ctx) as registry:
        optimized = registry.vacuum()
    if optimized:
        console.print("[green]✓ Database optimized.[/green]")
    else:
        console.print("[red]✗ Optimization failed.[/red]")
        raise typer.Exit(code=1)
