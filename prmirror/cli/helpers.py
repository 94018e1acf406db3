# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Shared console helpers for the CLI
"""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

console = Console()


def print_step(message: str) -> None:
    """Print one line of progress narration verbatim."""
    console.print(message, markup=False, highlight=False)


def print_warning(message: str) -> None:
    console.print(message, style='yellow', markup=False, highlight=False)


def print_success(message: str) -> None:
    """Print a standardized success message."""
    console.print(f'\n  [green]✓[/green] {escape(message)}\n', highlight=False)


def print_error(message: str) -> None:
    """Print a standardized error message."""
    console.print(f'\n  [red]✗[/red] {escape(message)}\n', highlight=False)


def build_config_table(config: dict) -> Table:
    table = Table(show_header=True)
    table.add_column('Setting', style='cyan')
    table.add_column('Value', style='green')
    for key, value in config.items():
        table.add_row(key, '' if value is None else str(value))
    return table
