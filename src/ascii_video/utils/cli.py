"""Shared CLI error handling and logging setup."""

import functools
import logging
from collections.abc import Callable

import typer
from rich.console import Console
from rich.logging import RichHandler

EXIT_USER_ERROR = 50
EXIT_PIPELINE_ERROR = 60
EXIT_TOOL_ERROR = 70
EXIT_INTERRUPT = 130

stderr_console = Console(stderr=True)


def setup_logging(console: Console, verbose: bool = False) -> None:
    """Configure logging with a Rich handler writing to the given console."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_time=True)],
    )


def cli_error_handler(func: Callable) -> Callable:
    """Map exceptions escaping a CLI command to an error message and exit code.

    Pipeline and external tool errors get their own exit codes inside the
    command; whatever is left is a usage problem (bad path, bad option value).
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (typer.Exit, SystemExit):
            raise
        except KeyboardInterrupt:
            stderr_console.print("\n[bold yellow]Interrupted by user[/bold yellow]")
            raise typer.Exit(code=EXIT_INTERRUPT)
        except (FileNotFoundError, ValueError) as e:
            stderr_console.print(f"[bold red]Error:[/bold red] {e}")
            raise typer.Exit(code=EXIT_USER_ERROR)
        except Exception as e:
            logging.getLogger(func.__module__).debug("Unhandled error", exc_info=True)
            stderr_console.print(f"[bold red]Unexpected error:[/bold red] {e}")
            raise typer.Exit(code=EXIT_USER_ERROR)

    return wrapper
