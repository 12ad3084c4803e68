"""
CLI entry point for expense analytics.

Usage:
    expense-analytics report <name> --data DIR    Run one report
    expense-analytics all --data DIR              Run every report
    expense-analytics insights --data DIR         Print narrative findings
    expense-analytics validate --data DIR         Load and check the dataset
    expense-analytics demo DIR                    Write the sample dataset
"""

import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from .analyses import REPORTS
from .config import AnalyticsConfig, FILE_FORMATS
from .exceptions import AnalyticsError
from .formatter import FORMATS, render, write_report
from .insights import summarize
from .loader import load_store, write_tables
from .logging import LogConfig, setup_logging
from .pipelines import PipelineStatus, ReportPipeline
from .pipelines.reports import ENGINES
from .sample import DEFAULT_SEED, sample_tables
from .store import RecordStore


console = Console()


def get_config(config_path: Optional[str] = None) -> AnalyticsConfig:
    """Load or create configuration."""
    if config_path:
        return AnalyticsConfig.from_file(Path(config_path))
    return AnalyticsConfig.default()


def _load(config: AnalyticsConfig, data: Optional[str]) -> RecordStore:
    if data:
        config.data.base_path = Path(data)
    try:
        return load_store(config.data)
    except (AnalyticsError, FileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


def _emit(output) -> None:
    if isinstance(output, Table):
        console.print(output)
    else:
        print(output, end="" if output.endswith("\n") else "\n")


data_option = click.option(
    "--data", "-d", type=click.Path(file_okay=False), help="Directory holding the source tables"
)


@click.group()
@click.option("--config", "-c", help="Path to config file")
@click.option("--log-level", default=None, help="Logging level (DEBUG, INFO, WARNING, ...)")
@click.pass_context
def main(ctx, config, log_level):
    """Expense Analytics CLI - window-function reports over transactions."""
    ctx.ensure_object(dict)
    cfg = get_config(config)
    if log_level:
        cfg.log_level = log_level
    setup_logging(LogConfig(level=cfg.log_level))
    ctx.obj["config"] = cfg


@main.command()
@click.argument("name", type=click.Choice(list(REPORTS)))
@data_option
@click.option("--format", "-f", "fmt", type=click.Choice(FORMATS), default="table")
@click.option("--limit", "-l", type=int, default=None, help="Row limit")
@click.option("--top-n", type=int, default=None, help="Ranking cut-off (row_num <= N)")
@click.option("--engine", "-e", type=click.Choice(ENGINES), default="python")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Also write to a .csv/.json/.parquet file")
@click.pass_context
def report(ctx, name, data, fmt, limit, top_n, engine, output):
    """Run a single report."""
    config = ctx.obj["config"]
    if top_n is not None:
        config.reports.top_n = top_n
    store = _load(config, data)

    pipeline = ReportPipeline(
        store,
        config=config.reports,
        reports=[name],
        engine=engine,
        duckdb_config=config.duckdb,
    )
    result = pipeline.run_reports()[name]

    if result.status != PipelineStatus.SUCCESS:
        console.print(f"[red]Error ({result.error_code}): {result.error}[/red]")
        sys.exit(1)

    _emit(render(result.report, fmt, limit))

    if output:
        path = write_report(result.report, output)
        console.print(f"[dim]Written: {path}[/dim]", highlight=False)


@main.command(name="all")
@data_option
@click.option("--engine", "-e", type=click.Choice(ENGINES), default="python")
@click.option("--output-dir", "-o", type=click.Path(file_okay=False), help="Write each report as Parquet here")
@click.option("--show/--no-show", default=False, help="Print every report table")
@click.pass_context
def run_all(ctx, data, engine, output_dir, show):
    """Run every report and show a status summary."""
    config = ctx.obj["config"]
    store = _load(config, data)

    results = ReportPipeline(
        store,
        config=config.reports,
        engine=engine,
        duckdb_config=config.duckdb,
    ).run_reports()

    summary = Table(title="Reports", show_header=True, header_style="bold")
    summary.add_column("Report")
    summary.add_column("Status")
    summary.add_column("Rows", justify="right")
    summary.add_column("Seconds", justify="right")
    summary.add_column("Error")

    failed = 0
    for name, result in results.items():
        ok = result.status == PipelineStatus.SUCCESS
        failed += not ok
        status = "[green]success[/green]" if ok else "[red]failed[/red]"
        summary.add_row(
            name,
            status,
            str(result.rows),
            f"{result.duration_seconds or 0:.3f}",
            result.error or "",
        )

        if ok and show:
            console.print(render(result.report, "table"))
        if ok and output_dir:
            write_report(result.report, Path(output_dir) / f"{name}.parquet")

    console.print(summary)
    if failed:
        sys.exit(1)


@main.command()
@data_option
@click.pass_context
def insights(ctx, data):
    """Print narrative findings for the dataset."""
    config = ctx.obj["config"]
    store = _load(config, data)

    found = summarize(store)
    if not found:
        console.print("[yellow]No insights: dataset is empty[/yellow]")
        return

    for insight in found:
        console.print(f"[bold]{insight.topic}[/bold]  {insight.text}", highlight=False)


@main.command()
@data_option
@click.pass_context
def validate(ctx, data):
    """Load the dataset and check referential integrity."""
    config = ctx.obj["config"]
    store = _load(config, data)

    console.print("[bold green]Dataset is valid[/bold green]")
    console.print(f"  Departments: {len(store.departments)}")
    console.print(f"  Expense categories: {len(store.expense_categories)}")
    console.print(f"  Transactions: {len(store)}")


@main.command()
@click.argument("directory", type=click.Path(file_okay=False))
@click.option("--format", "-f", "file_format", type=click.Choice(FILE_FORMATS), default="csv")
@click.option("--seed", type=int, default=DEFAULT_SEED)
@click.pass_context
def demo(ctx, directory, file_format, seed):
    """Write the sample dataset to DIRECTORY."""
    config = ctx.obj["config"]
    config.data.base_path = Path(directory)
    config.data.file_format = file_format

    for path in write_tables(sample_tables(seed), config.data):
        console.print(f"  Created: {path}")

    console.print("[bold green]Sample dataset written![/bold green]")


if __name__ == "__main__":
    main()
