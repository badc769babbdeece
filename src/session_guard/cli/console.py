"""Console output for the session-guard CLI."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table

console = Console()

# Notification level -> rich style
NOTICE_STYLES = {
    "error": "red",
    "warning": "yellow",
    "info": "cyan",
    "muted": "dim",
}


def notice(msg: str, level: str = "info") -> None:
    """Print a one-line message styled for its level."""
    style = NOTICE_STYLES.get(level, "")
    text = escape(msg)
    console.print(f"[{style}]{text}[/{style}]" if style else text, highlight=False)


def error(msg: str) -> None:
    notice(msg, "error")


def dim(msg: str) -> None:
    notice(msg, "muted")


def settings_table(title: str, rows: list[tuple[str, str]]) -> Table:
    """Two-column name/value table."""
    table = Table(title=title)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", justify="right")
    for name, value in rows:
        table.add_row(name, value)
    return table
