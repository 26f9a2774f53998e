"""
Display module for rendering command results in the terminal.

Reports are Markdown; they are rendered with rich inside a panel whose border
reflects success or failure.
"""

import logging
from typing import Iterable

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from src.sonar.core.messages import CommandResult

# Configure logging
logger = logging.getLogger(__name__)

# Initialize console with soft-wrapping and highlighting
console = Console(soft_wrap=True, highlight=True)


def print_result(result: CommandResult, title: str = "") -> None:
    """Display a command result as rendered Markdown."""
    border_style = "green" if result.success else "red"
    if not result.success and not title:
        title = "[bold red]Error[/bold red]"

    console.print(
        Panel(
            renderable=Markdown(result.display_text()),
            title=title or None,
            border_style=border_style,
            padding=(0, 1),
            expand=True,
        ),
        soft_wrap=False,
    )


def print_commands(commands: Iterable[tuple]) -> None:
    """Display (name, description) pairs as a table."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("Command", style="cyan", no_wrap=True)
    table.add_column("Description")
    for name, description in commands:
        table.add_row(name, description)
    console.print(table)


def print_manual(name: str, text: str) -> None:
    """Display the manual of one command."""
    console.print(Panel(Text(text.strip()), title=f"[bold cyan]{name}[/bold cyan]", border_style="cyan", expand=True))
