"""
Entry point for the dlreg command.

Application errors are rendered as a panel with suggestions instead of a
traceback; the full traceback is still logged at debug level.
"""

import logging
import sys

from rich.console import Console

from download_registry.cli.app import app
from download_registry.cli.formatters import format_error_with_suggestions
from download_registry.exceptions import DownloadRegistryError

log = logging.getLogger("download_registry")


def run(argv: list[str] | None = None) -> int:
    """Runs the CLI and returns the process exit code."""
    console = Console(stderr=True)
    try:
        app(args=argv)
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else int(e.code is not None)
    except KeyboardInterrupt:
        console.print("\n[yellow]⚠️  Interrupted.[/yellow]")
        return 130
    except DownloadRegistryError as e:
        console.print(format_error_with_suggestions(e))
        log.debug("Full traceback:", exc_info=True)
        return 1
    except Exception as e:
        console.print(format_error_with_suggestions(e, {"type": "Unexpected"}))
        log.debug("Full traceback:", exc_info=True)
        return 1
    return 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
