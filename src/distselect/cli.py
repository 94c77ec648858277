"""Typer-based CLI entry point."""

from __future__ import annotations

import logging
import math
import numbers
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__
from .core import DistSelectError, SelectionResult
from .distfit import DistributionSelector
from .distributions import get_candidate, list_candidates

app = typer.Typer(help="distselect best-fit distribution search CLI.")
console = Console()

DATA_FILE_ARGUMENT = typer.Argument(
    ...,
    exists=True,
    readable=True,
    help="CSV file holding the sample in one of its columns.",
)

COLUMN_OPTION = typer.Option(
    None,
    "--column",
    "-c",
    help="Column holding the sample (defaults to the first numeric column).",
    show_default=False,
)

KDE_CUTOFF_OPTION = typer.Option(
    0.0,
    "--kde-cutoff",
    help="Fall back to a KDE when the best KS p-value is below this value.",
    show_default=True,
)

INCLUDE_KDE_OPTION = typer.Option(
    False,
    "--include-kde/--no-include-kde",
    help="Let a KDE compete as a regular candidate instead of a fallback.",
    show_default=True,
)

DISTRIBUTIONS_OPTION = typer.Option(
    None,
    "--distribution",
    "-d",
    help="Restrict the search to specific candidates (repeat for multiples).",
    show_default=False,
)

VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Enable verbose output.")
VERSION_OPTION = typer.Option(False, "--version", help="Show version and exit.")


@app.callback(invoke_without_command=True)
def cli_callback(  # noqa: B008
    ctx: typer.Context,
    verbose: bool = VERBOSE_OPTION,
    version: bool = VERSION_OPTION,
) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )
    if verbose or version:
        console.print(f"[bold green]distselect {__version__}[/bold green]")
    if ctx.invoked_subcommand is None and not ctx.resilient_parsing:
        raise typer.Exit()


@app.command()
def registry() -> None:
    """List registered candidate distributions."""
    table = Table(title="Registered Candidates")
    table.add_column("Name")
    table.add_column("Parameters")
    table.add_column("Description", overflow="fold")
    for name in list_candidates():
        candidate = get_candidate(name)
        params = ", ".join(candidate.create().parameters)
        table.add_row(candidate.name, params, candidate.notes or "")
    console.print(table)


@app.command()
def select(  # noqa: B008
    data_file: Path = DATA_FILE_ARGUMENT,
    column: str | None = COLUMN_OPTION,
    kde_cutoff: float = KDE_CUTOFF_OPTION,
    include_kde: bool = INCLUDE_KDE_OPTION,
    distributions: list[str] | None = DISTRIBUTIONS_OPTION,
) -> None:
    """Select the best-fitting distribution for a sample stored in a CSV file."""
    import pandas as pd

    data = pd.read_csv(data_file)
    try:
        if column is None:
            numeric = data.select_dtypes("number")
            if numeric.columns.empty:
                raise ValueError(f"No numeric column found in {data_file}.")
            column = str(numeric.columns[0])
        sample = pd.to_numeric(data[column], errors="coerce").dropna().to_numpy(dtype=float)
        selector = DistributionSelector(distributions or None, kde_cutoff=kde_cutoff)
        result = selector.select(sample, include_kde=include_kde)
    except (DistSelectError, KeyError, ValueError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    _print_result(result, column)


def _print_result(result: SelectionResult, column: str) -> None:
    if result.scores:
        table = Table(title=f"KS Scores ({column})", expand=True)
        table.add_column("Distribution", no_wrap=True)
        table.add_column("p-value", justify="right", no_wrap=True)
        table.add_column("Status", overflow="fold")
        for entry in result.scores:
            if entry.index == result.selected_index:
                status = "selected"
            elif entry.disqualified:
                status = entry.reason or "disqualified"
            else:
                status = ""
            table.add_row(entry.name, _format_metric(entry.score), status)
        console.print(table)

    if result.distribution is None:
        console.print("[yellow]No distribution could be determined for this sample.[/yellow]")
        return
    params = ", ".join(
        f"{name}={_format_metric(value)}" for name, value in result.distribution.parameters.items()
    )
    console.print(
        f"[green]Selected[/green] {result.distribution.name} ({result.outcome}) {params}"
    )


def _format_metric(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, numbers.Real):
        val = float(value)
        if math.isnan(val) or math.isinf(val):
            return "-"
        return f"{val:.4f}"
    return str(value)


def main_entry() -> None:
    app()


def main() -> None:  # pragma: no cover - console entry
    main_entry()
