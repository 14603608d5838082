"""
Console output helpers built on rich.

Respects NO_COLOR and FORCE_COLOR; rich falls back to plain text when
stdout is not a terminal.
"""

from __future__ import annotations

import os

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

from computeforge.orchestration.results import ApplyStatus, OutcomeStatus

# Nord palette
FORGE_THEME = Theme(
    {
        "info": "#88C0D0",
        "success": "#A3BE8C",
        "warning": "#EBCB8B",
        "error": "#BF616A bold",
        "muted": "#D8DEE9",
    }
)

console = Console(
    theme=FORGE_THEME,
    force_terminal=os.environ.get("FORCE_COLOR") is not None,
    no_color=os.environ.get("NO_COLOR") is not None,
)

STATUS_STYLES = {
    ApplyStatus.created: "success",
    ApplyStatus.already_exists: "info",
    ApplyStatus.failed: "error",
    OutcomeStatus.success: "success",
    OutcomeStatus.partial_failure: "warning",
    OutcomeStatus.failure: "error",
}


def success(message: str) -> None:
    console.print(f"[success]✓ {escape(message)}[/success]")


def error(message: str) -> None:
    console.print(f"[error]✗ {escape(message)}[/error]")


def warning(message: str) -> None:
    console.print(f"[warning]⚠ {escape(message)}[/warning]")


def info(message: str) -> None:
    console.print(f"[info]ℹ {escape(message)}[/info]")


def header(title: str) -> None:
    console.print()
    console.print(Panel(f"[bold]{title}[/bold]", border_style="cyan"))


def styled(status: ApplyStatus | OutcomeStatus) -> str:
    style = STATUS_STYLES[status]
    return f"[{style}]{status.value}[/{style}]"


def print_table(
    title: str,
    columns: list[str],
    rows: list[list[str]],
    show_header: bool = True,
) -> None:
    table = Table(title=title, show_header=show_header)

    for col in columns:
        table.add_column(col)

    for row in rows:
        table.add_row(*row)

    console.print(table)


def print_key_value(items: dict[str, str], title: str | None = None) -> None:
    if title:
        console.print(f"\n[bold]{title}[/bold]")

    for key, value in items.items():
        console.print(f"  [cyan]{key}:[/cyan] {escape(value)}")
