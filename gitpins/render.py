"""
Rendering functions for gitpins output.

This module handles all pretty-printing and table formatting.
Core functions return data, this module makes it human-readable.
"""

from rich.table import Table
from rich.console import Console
from rich import box
from typing import List, Optional, Sequence, Tuple

from .diff import PropertyChange

console = Console()


def render_properties(properties: Sequence[Tuple[str, str]], title: Optional[str] = None) -> None:
    """
    Render (label, value) pairs as a two column table.

    Args:
        properties: Ordered property list, e.g. from `pin.properties()`
        title: Optional table title
    """
    if not properties:
        console.print("[yellow]No data to display.[/yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    for label, value in properties:
        table.add_row(label, str(value))

    console.print(table)


def render_diff(changes: List[PropertyChange], title: Optional[str] = None) -> None:
    """
    Render the changed properties of an update.

    Args:
        changes: Output of `diff.diff`
        title: Optional table title
    """
    if not changes:
        console.print("[green]No changes.[/green]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Property", style="cyan")
    table.add_column("Old", style="red")
    table.add_column("New", style="green")

    for change in changes:
        table.add_row(change.label, change.old, change.new)

    console.print(table)


def render_tags(tags: Sequence[Tuple[str, str]]) -> None:
    """Render remote refs as a table of ref and revision."""
    if not tags:
        console.print("[yellow]No tags found.[/yellow]")
        return

    table = Table(
        title="Tags",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Ref", style="cyan")
    table.add_column("Revision", style="dim")

    for ref, revision in tags:
        table.add_row(ref, revision)

    console.print(table)
