"""Console output for the CLI, built on rich.

Results go to :data:`console` (stdout); diagnostics go to
:data:`error_console` (stderr) so piped output stays clean.
"""

from __future__ import annotations

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

# Set once by the CLI group before any subcommand runs.
_verbose_enabled = False
_debug_enabled = False

THEME = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "field": "bold",
        "operator": "magenta",
        "logical": "bold blue",
        "value": "green",
    }
)

console = Console(theme=THEME)
error_console = Console(theme=THEME, stderr=True)


def set_verbosity(*, verbose: bool = False, debug: bool = False) -> None:
    """Record the verbosity flags and apply them to package logging."""
    global _verbose_enabled, _debug_enabled
    _debug_enabled = debug
    _verbose_enabled = verbose or debug
    configure_logging()


def configure_logging() -> None:
    """Route ``filter_builder`` log records to stderr through rich.

    WARNING by default, INFO when verbose, DEBUG when debugging. Safe to call
    more than once; only one handler is ever attached.
    """
    level = logging.WARNING
    if _debug_enabled:
        level = logging.DEBUG
    elif _verbose_enabled:
        level = logging.INFO

    package_logger = logging.getLogger("filter_builder")
    package_logger.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in package_logger.handlers):
        package_logger.addHandler(RichHandler(console=error_console, show_path=_debug_enabled))


def set_color(enabled: bool) -> None:
    for target in (console, error_console):
        target.no_color = not enabled


def info(message: str) -> None:
    console.print(f"[info]{escape(message)}[/info]")


def success(message: str) -> None:
    console.print(f"[success]{escape(message)}[/success]")


def warning(message: str) -> None:
    error_console.print(f"[warning]Warning:[/warning] {escape(message)}")


def error(message: str, hint: str | None = None) -> None:
    """Report an error on stderr, optionally followed by a hint line.

    Args:
        message: What went wrong. Printed literally, never as markup.
        hint: How the user might fix it.
    """
    error_console.print(f"[error]Error:[/error] {escape(message)}")
    if hint:
        error_console.print(f"  [info]Hint:[/info] {escape(hint)}")


def verbose(message: str) -> None:
    """Print to stdout, but only under --verbose."""
    if _verbose_enabled:
        console.print(f"[info]{escape(message)}[/info]")


def debug(message: str) -> None:
    if _debug_enabled:
        error_console.print(f"[warning]\\[DEBUG][/warning] {escape(message)}")


def create_table(title: str | None = None, **kwargs: Any) -> Table:
    """Return a rich Table; *kwargs* are passed through unchanged."""
    return Table(title=title, **kwargs)
