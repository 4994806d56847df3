"""streamtopk CLI entry point.

Commands:
    streamtopk count <file|->   Count a finished stream and report the top K
    streamtopk watch <file>     Follow a growing file with a live top-K table
"""
from __future__ import annotations

import logging
import time
from pathlib import Path

import click
from rich.console import Console, Group
from rich.live import Live
from rich.markup import escape
from rich.text import Text

from .config import settings
from .counter import InvalidArgument, TopKCounter
from .feeds.auto_detect import FORMATS, make_feed
from .feeds.base import ElementFeed
from .logging_setup import configure_logging, level_for_verbosity
from .reporting.tables import build_top_table, print_bar_chart, print_top_table, ranked, to_json

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)

# ── Helpers ─────────────────────────────────────────────────────────────────


def _make_counter(k: int) -> TopKCounter:
    try:
        return TopKCounter(k)
    except InvalidArgument as exc:
        raise click.BadParameter(str(exc), param_hint="'--k'") from exc


def _make_feed(fmt: str, field: str, strip: bool, keep_blank: bool) -> ElementFeed:
    try:
        return make_feed(fmt, field=field, strip=strip, keep_blank=keep_blank)
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc


def _read_appended(path: Path, offset: int) -> tuple[list[str], int]:
    """Return complete lines written after ``offset`` and the offset past them.

    Lines are split on ``\\n`` only, like the file iteration ``count`` uses,
    so both commands see the same elements. A trailing partial line is left
    for the next poll.
    """
    with path.open("rb") as fh:
        fh.seek(offset)
        data = fh.read()
    end = data.rfind(b"\n")
    if end < 0:
        return [], offset
    lines = [part.decode("utf-8", errors="replace") for part in data[:end].split(b"\n")]
    return lines, offset + end + 1


def _summary(source: str, total: int, counter: TopKCounter) -> str:
    state = "saturated" if counter.saturated else "filling"
    return (
        f"[bold]Source:[/bold] {escape(source)}  [bold]Elements:[/bold] {total}  "
        f"[bold]Tracked:[/bold] {len(counter)}/{counter.capacity} ({state})"
    )


# ── CLI root ─────────────────────────────────────────────────────────────────


@click.group()
@click.version_option(version="1.0.0", prog_name="streamtopk")
@click.option("--verbose", "-v", count=True, help="Increase log verbosity (-v info, -vv debug).")
def main(verbose: int) -> None:
    """streamtopk: approximate top-K counting over unbounded streams."""
    configure_logging(level_for_verbosity(verbose, default=settings.log_level))


# ── count ────────────────────────────────────────────────────────────────────


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, allow_dash=True))
@click.option("--k", "-k", "k", default=settings.default_k, type=int,
              help="Counter capacity (distinct elements tracked).", show_default=True)
@click.option(
    "--format", "-f", "fmt", default=settings.default_format,
    type=click.Choice(FORMATS, case_sensitive=False),
    help="Input format (default: auto-detect).",
    show_default=True,
)
@click.option("--field", default=settings.default_field, help="JSON field to count (dotted for nested).")
@click.option("--top", "-t", default=settings.top_n, type=click.IntRange(min=0),
              help="Show top N elements (0 = all tracked).", show_default=True)
@click.option("--chart", "-c", is_flag=True, help="Show ASCII bar chart.")
@click.option(
    "--output", "-o", "output_fmt", default="table",
    type=click.Choice(["table", "json"], case_sensitive=False),
    help="Output format.",
    show_default=True,
)
@click.option("--strip/--no-strip", default=False, help="Strip surrounding whitespace from text lines.")
@click.option("--keep-blank", is_flag=True, help="Count empty text lines as the element \"\".")
def count(
    file: str,
    k: int,
    fmt: str,
    field: str,
    top: int,
    chart: bool,
    output_fmt: str,
    strip: bool,
    keep_blank: bool,
) -> None:
    """Count elements of FILE (or stdin with '-') and report the top K.

    \b
    Examples:
      streamtopk count access.log --k 50
      cat words.txt | streamtopk count - --top 20 --chart
      streamtopk count app.json --field user.id --output json
    """
    counter = _make_counter(k)
    feed = _make_feed(fmt, field, strip, keep_blank)

    total = 0
    for element in feed.elements(file):
        counter.add(element)
        total += 1
    logger.info("Read %d elements from %s using the %s feed", total, file, feed.name)

    source = "stdin" if file == "-" else Path(file).name

    if output_fmt == "json":
        click.echo(to_json(counter, limit=top, source=source, elements=total))
        return

    console.print(_summary(source, total, counter))
    rows = ranked(counter.counts(), top)
    label = field or "Element"

    if chart:
        print_bar_chart(rows, title=f"Top {len(rows)} of {source}", width=settings.chart_width, console=console)
    else:
        print_top_table(rows, title=f"Top {len(rows)} of {source}", value_col=label, console=console)


# ── watch ────────────────────────────────────────────────────────────────────


@main.command()
@click.argument("file", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--k", "-k", "k", default=settings.default_k, type=int,
              help="Counter capacity (distinct elements tracked).", show_default=True)
@click.option(
    "--format", "-f", "fmt", default=settings.default_format,
    type=click.Choice(FORMATS, case_sensitive=False),
)
@click.option("--field", default=settings.default_field, help="JSON field to count (dotted for nested).")
@click.option("--top", "-t", default=settings.top_n, type=click.IntRange(min=0), help="Rows in the live table.", show_default=True)
@click.option("--interval", default=settings.watch_interval, type=click.FloatRange(min=0, min_open=True),
              help="Poll interval in seconds.", show_default=True)
@click.option("--from-start", is_flag=True, help="Count existing content before following.")
@click.option("--strip/--no-strip", default=False, help="Strip surrounding whitespace from text lines.")
@click.option("--keep-blank", is_flag=True, help="Count empty text lines as the element \"\".")
def watch(
    file: Path,
    k: int,
    fmt: str,
    field: str,
    top: int,
    interval: float,
    from_start: bool,
    strip: bool,
    keep_blank: bool,
) -> None:
    """Follow a growing FILE and keep a live top-K table on screen.

    \b
    Examples:
      streamtopk watch /var/log/nginx/access.log --k 200
      streamtopk watch app.json --field path --from-start
    """
    counter = _make_counter(k)
    feed = _make_feed(fmt, field, strip, keep_blank)

    if not file.exists():
        # Wait for file to appear (useful for docker log paths)
        err_console.print(f"[yellow]Waiting for {file} to appear…[/yellow]")
        while not file.exists():
            time.sleep(interval)

    stat = file.stat()
    inode: int | None = stat.st_ino
    offset = 0 if from_start else stat.st_size
    total = 0
    missing = False

    def _render() -> Group:
        rows = ranked(counter.counts(), top)
        return Group(
            Text.from_markup(_summary(file.name, total, counter)),
            build_top_table(rows, title=f"Top {len(rows)} of {file.name}", value_col=field or "Element"),
        )

    err_console.print(f"[dim]Watching {file} (Ctrl+C to stop)[/dim]")
    try:
        with Live(_render(), console=console, auto_refresh=False) as live:
            while True:
                try:
                    stat = file.stat()
                    if stat.st_ino != inode or stat.st_size < offset:
                        logger.info("%s was truncated or rotated; restarting from the top", file)
                        inode = stat.st_ino
                        offset = 0
                    if stat.st_size > offset:
                        lines, offset = _read_appended(file, offset)
                        for line in lines:
                            element = feed.element_from_line(line)
                            if element is not None:
                                counter.add(element)
                                total += 1
                    missing = False
                except FileNotFoundError:
                    # Rotated away; the replacement is read from offset 0
                    if not missing:
                        logger.info("%s disappeared; waiting for it to come back", file)
                    missing = True
                    inode = None
                live.update(_render(), refresh=True)
                time.sleep(interval)
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped.[/dim]")


if __name__ == "__main__":
    main()
