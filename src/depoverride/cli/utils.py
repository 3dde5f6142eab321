"""
CLI Utilities - Shared helpers for console output and logging setup.

Progress and results go to stdout; warnings and errors go to stderr.
"""

import logging
import sys
from typing import List

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..core.matcher import MutationIntent
from ..core.resolver import RunSummary

console = Console()


def echo_success(message: str) -> None:
    """
    Print a success message with a green checkmark.

    Args:
        message (str): The message to display.
    """
    click.echo(click.style(f"✅ {message}", fg="green"))


def echo_error(message: str) -> None:
    """
    Print an error message with a red cross to stderr.

    Args:
        message (str): The error message to display.
    """
    click.echo(click.style(f"❌ {message}", fg="red"), err=True)


def echo_warning(message: str) -> None:
    """
    Print a warning message with a yellow alert symbol to stderr.

    Args:
        message (str): The warning message to display.
    """
    click.echo(click.style(f"⚠️  {message}", fg="yellow"), err=True)


class _BelowLevel(logging.Filter):
    """Pass only records below a level."""

    def __init__(self, level: int):
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self.level


def setup_logging(verbose: bool = False) -> None:
    """
    Route log records to the standard streams.

    Records below WARNING go to stdout, WARNING and above to stderr.

    Args:
        verbose: Enable debug records and show logger names.
    """
    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.addFilter(_BelowLevel(logging.WARNING))

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.WARNING)

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s" if verbose else "%(message)s",
        handlers=[stdout_handler, stderr_handler],
        force=True,
    )


def _intent_cells(intent: MutationIntent) -> List[str]:
    # Paths and NuGet messages often contain [brackets] rich would read as tags
    return [escape(v) for v in (intent.project_path, intent.package_id, intent.old_version, intent.new_version)]


def print_summary(summary: RunSummary) -> None:
    """Print a table of the dependency changes and skipped targets of a run."""
    if summary.applied or summary.failed:
        title = "Planned Overrides" if summary.dry_run else "Applied Overrides"
        table = Table(title=title)
        table.add_column("Project", style="cyan")
        table.add_column("Package")
        table.add_column("Old", style="dim")
        table.add_column("New", style="green")
        table.add_column("Status")

        for intent in summary.applied:
            status = "planned" if summary.dry_run else "[green]added[/green]"
            table.add_row(*_intent_cells(intent), status)
        for intent in summary.failed:
            table.add_row(*_intent_cells(intent), "[red]failed[/red]")

        console.print(table)

    if summary.skipped:
        table = Table(title="Skipped Targets")
        table.add_column("Target", style="cyan")
        table.add_column("Reason", style="yellow")
        for target in summary.skipped:
            reason = target.error or target.status.value
            if target.problems:
                reason = "; ".join(p.text for p in target.problems)
            table.add_row(escape(str(target.path)), escape(reason))
        console.print(table)
