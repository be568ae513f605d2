"""Shared Rich console and output helpers.

All operator-facing output goes through the single ``console`` defined here
so tests and the CLI see one consistent stream.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table

console = Console()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{escape(message)}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]")


def print_progress(message: str) -> None:
    """Print a dim progress line."""
    console.print(f"[dim]{escape(message)}[/dim]")


def print_summary_table(rows: dict[str, str], title: str) -> None:
    """Print a borderless property/value table, e.g. the new-workstation summary.

    Values are escaped, so server names and addresses print verbatim.
    """
    table = Table(title=title, title_justify="left", show_header=False, box=None, padding=(0, 2))
    table.add_column("Property", style="bold cyan", no_wrap=True)
    table.add_column("Value", no_wrap=True)

    for label, value in rows.items():
        table.add_row(label, escape(value))

    console.print(table)
    console.print()
