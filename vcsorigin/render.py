"""
Rendering functions for vcsorigin output.

This module handles all pretty-printing and table formatting.
Commands return data, this module makes it human-readable.
"""

from rich.table import Table
from rich.console import Console
from rich import box
from typing import Iterable, List, Optional

from .domain import Change, Reference

console = Console()


def render_table(headers: List[str], rows: List[List[str]], title: Optional[str] = None) -> None:
    """
    Render a generic table with the given headers and rows.

    Args:
        headers: List of column headers
        rows: List of rows, where each row is a list of values
        title: Optional table title
    """
    if not rows:
        console.print("[yellow]No data to display.[/yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )

    for header in headers:
        table.add_column(header)

    for row in rows:
        table.add_row(*[str(val) for val in row])

    console.print(table)


def render_changes_table(changes: Iterable[Change], title: Optional[str] = None) -> None:
    """Render changes oldest first, one row per revision."""
    changes = list(changes)
    if not changes:
        console.print("[yellow]No changes.[/yellow]")
        return

    table = Table(title=title, box=box.ROUNDED, show_header=True, header_style="bold magenta")
    table.add_column("Revision", style="cyan", no_wrap=True)
    table.add_column("Date")
    table.add_column("Author")
    table.add_column("Message")
    table.add_column("Files", justify="right")

    for change in changes:
        files = str(len(change.changed_paths)) if change.changed_paths is not None else "-"
        table.add_row(
            change.revision.as_string()[:12],
            change.timestamp.strftime("%Y-%m-%d %H:%M"),
            str(change.author),
            change.first_line,
            files,
        )

    console.print(table)


def render_reference(reference: Reference) -> None:
    """Render a resolved reference and its labels."""
    rows = [["revision", reference.revision.as_string() if reference.revision else "-"]]
    rows.extend([name, value] for name, value in sorted(reference.labels.items()))
    render_table(["Field", "Value"], rows, title=reference.name)
