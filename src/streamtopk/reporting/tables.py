"""Rich-powered table, bar chart and JSON rendering for top-K results.

The counter returns plain unordered data; everything here decides order and
presentation.
"""
from __future__ import annotations

import json
from collections.abc import Hashable, Mapping
from typing import Any

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..counter import TopKCounter

_console = Console()

Row = tuple[Hashable, int]


def ranked(counts: Mapping[Hashable, int], limit: int = 0) -> list[Row]:
    """Sort a counts mapping by count (highest first), ties by element text.

    ``limit == 0`` keeps every row.

    Raises:
        ValueError: ``limit`` is negative.
    """
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")
    rows = sorted(counts.items(), key=lambda item: (-item[1], str(item[0])))
    return rows[:limit] if limit else rows


def build_top_table(
    rows: list[Row],
    title: str = "Top elements",
    value_col: str = "Element",
    count_col: str = "Count",
) -> Table:
    """Build a Rich table from ranked (element, count) rows."""
    table = Table(title=title, box=box.SIMPLE_HEAVY)
    table.add_column("#", style="dim", width=4)
    table.add_column(value_col, overflow="fold", max_width=70)
    table.add_column(count_col, justify="right", style="cyan")

    for rank, (element, count) in enumerate(rows, start=1):
        table.add_row(str(rank), escape(str(element)), str(count))
    return table


def print_top_table(
    rows: list[Row],
    title: str = "Top elements",
    value_col: str = "Element",
    count_col: str = "Count",
    console: Console | None = None,
) -> None:
    """Render ranked rows as a Rich table."""
    out = console or _console
    if not rows:
        out.print("[yellow]No elements tracked.[/yellow]")
        return
    out.print(build_top_table(rows, title=title, value_col=value_col, count_col=count_col))


def print_bar_chart(
    rows: list[Row],
    title: str = "Distribution",
    width: int = 40,
    console: Console | None = None,
) -> None:
    """Print an ASCII bar chart using Rich markup.

    Each bar is scaled relative to the maximum count.

    Args:
        rows:   Ranked (element, count) pairs, highest first.
        title:  Printed as a heading above the chart.
        width:  Maximum bar width in characters.
    """
    out = console or _console
    if not rows:
        out.print("[yellow]No data for chart.[/yellow]")
        return

    max_val = max(v for _, v in rows) or 1
    labels = [str(k) for k, _ in rows]
    max_label = max(len(label) for label in labels)

    out.print(f"\n[bold]{title}[/bold]")
    for label, (_, value) in zip(labels, rows):
        bar_len = int(value / max_val * width)
        bar = "█" * bar_len
        pct = value / max_val * 100
        out.print(
            f"  {escape(label.ljust(max_label))}  [green]{bar:<{width}}[/green]"
            f"  [cyan]{value:>6}[/cyan] [dim]({pct:.1f}%)[/dim]",
            highlight=False,
        )
    out.print()


def to_json(counter: TopKCounter, limit: int = 0, **extra: Any) -> str:
    """Serialize a counter's current state as a JSON document.

    Extra keyword arguments are merged into the top-level object.
    """
    counts = counter.counts()
    doc: dict[str, Any] = {
        "capacity": counter.capacity,
        "tracked": len(counts),
        "top": [{"element": element, "count": count} for element, count in ranked(counts, limit)],
    }
    doc.update(extra)
    return json.dumps(doc, default=str)
