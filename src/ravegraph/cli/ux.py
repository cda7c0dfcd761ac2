"""
CLI output helpers built on rich.

Data goes to stdout; status and error lines go to stderr so piped JSON stays
clean.

Environment handling:
- Respects NO_COLOR and FORCE_COLOR environment variables
- Rich drops styling automatically when stdout is not a TTY
"""

from __future__ import annotations

import json
import os
from collections.abc import Sequence
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

from ravegraph.domain.models import to_wire

# Nord color palette (https://www.nordtheme.com/)
RAVEGRAPH_THEME = Theme(
    {
        "info": "#88C0D0",
        "success": "#A3BE8C",
        "warning": "#EBCB8B",
        "error": "#BF616A bold",
        "highlight": "#B48EAD",
        "muted": "#D8DEE9",
    }
)

_console_options: dict[str, Any] = {
    "theme": RAVEGRAPH_THEME,
    "force_terminal": os.environ.get("FORCE_COLOR") is not None,
    "no_color": os.environ.get("NO_COLOR") is not None,
}

console = Console(**_console_options)
err_console = Console(stderr=True, **_console_options)


def success(message: str) -> None:
    err_console.print(f"[success]✓ {message}[/success]")


def error(message: str) -> None:
    err_console.print(f"[error]✗ {message}[/error]")


def warning(message: str) -> None:
    err_console.print(f"[warning]⚠ {message}[/warning]")


def info(message: str) -> None:
    err_console.print(f"[info]ℹ {message}[/info]")


def header(title: str) -> None:
    """Print a section header."""
    console.print()
    console.print(Panel(f"[bold]{title}[/bold]", border_style="cyan"))


def print_table(
    title: str,
    columns: list[str],
    rows: Sequence[Sequence[Any]],
    show_header: bool = True,
) -> None:
    """Print a formatted table; ``None`` cells render as a dash."""
    table = Table(title=title, show_header=show_header, header_style="bold cyan")

    for col in columns:
        table.add_column(col)

    for row in rows:
        table.add_row(*("-" if cell is None else str(cell) for cell in row))

    console.print(table)


def print_counts(title: str, counts: dict[Any, int]) -> None:
    if not counts:
        console.print(f"[muted]{title}: none[/muted]")
        return
    rendered = ", ".join(f"{key}={value}" for key, value in sorted(counts.items()))
    console.print(f"[bold]{title}:[/bold] {rendered}")


def print_json(value: Any) -> None:
    print(json.dumps(to_wire(value), indent=2))
