"""CLI interface for the metric index finder"""

import logging
from datetime import date, datetime, timezone
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from data import get_index_info, init_database, load_file
from finder import QueryError
from finder.factory import create_finder
import config

app = typer.Typer(help="Metric index finder")
console = Console()


def _timestamp(value: Optional[datetime]) -> int:
    if value is None:
        return 0
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


@app.command()
def find(
    pattern: str = typer.Argument(..., help="Glob pattern, e.g. servers.*.cpu.user"),
    from_: Optional[datetime] = typer.Option(None, "--from", "-f", help="Range start (UTC)"),
    until: Optional[datetime] = typer.Option(None, "--until", "-u", help="Range end (UTC)"),
    series: bool = typer.Option(False, "--series", "-s", help="Leaf series only"),
    backend: Optional[str] = typer.Option(None, "--backend", "-b", help="clickhouse or duckdb"),
):
    """Find metric paths matching a pattern."""

    try:
        query = create_finder(backend).query(pattern)
        query.execute(_timestamp(from_), _timestamp(until))
    except (KeyError, QueryError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    rows = query.series() if series else query.list()
    for row in rows:
        console.print(query.abs(row).decode("utf-8"), highlight=False)

    console.print(
        f"[dim]{len(rows)} paths, direction={query.direction.value}, "
        f"daily={query.built.use_daily}[/dim]"
    )


@app.command()
def sql(
    pattern: str = typer.Argument(..., help="Glob pattern"),
    from_: Optional[datetime] = typer.Option(None, "--from", "-f", help="Range start (UTC)"),
    until: Optional[datetime] = typer.Option(None, "--until", "-u", help="Range end (UTC)"),
):
    """Show the SQL a pattern translates to, without running it."""

    query = create_finder("clickhouse").query(pattern)
    built = query.build(_timestamp(from_), _timestamp(until))

    console.print(f"[blue]direction:[/blue] {query.direction.value}")
    console.print(f"[blue]level:[/blue] {built.level} + {built.level_offset}")
    console.print(built.sql, highlight=False)


@app.command()
def load(
    file: str = typer.Argument(..., help="File with one metric path per line"),
    day: Optional[List[str]] = typer.Option(None, "--day", "-d", help="Day seen, YYYY-MM-DD (repeatable)"),
):
    """Load metric paths into the local DuckDB index."""

    console.print(f"[blue]Loading {file}...[/blue]")

    try:
        days = [date.fromisoformat(d) for d in day or []]
        count = load_file(file, config.DUCKDB_PATH, config.INDEX_TABLE, days)
        console.print(f"[green]✓ Loaded {count:,} index rows[/green]")
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    info()


@app.command()
def info():
    """Show local index partitions."""

    try:
        data = get_index_info(config.DUCKDB_PATH, config.INDEX_TABLE)
        if data.empty:
            console.print("[yellow]Index is empty.[/yellow]")
            return

        table = Table(title="Index Partitions")
        table.add_column("Partition")
        table.add_column("Rows", justify="right")
        table.add_column("Paths", justify="right")
        table.add_column("Start")
        table.add_column("End")

        for _, row in data.iterrows():
            table.add_row(
                str(row['partition']),
                f"{row['row_count']:,}",
                f"{row['path_count']:,}",
                str(row['start_date'])[:10],
                str(row['end_date'])[:10],
            )

        console.print(table)

    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")


@app.command()
def init():
    """Initialize the local DuckDB index."""
    init_database(config.DUCKDB_PATH, config.INDEX_TABLE)
    console.print("[green]✓ Index initialized[/green]")


if __name__ == "__main__":
    logging.basicConfig(level=config.LOG_LEVEL)
    app()
