"""Analyze command: bring stale repository analyses up to date."""

from pathlib import Path
from typing import Optional

import click
import typer
from rich.table import Table

from ..logging_config import setup_logging
from ..orchestrator import AnalysisOrchestrator, RunOptions, RunSummary
from . import app
from ._common import console, handle_errors, load_records, resolve_config


@app.command()
def analyze(
    repo: Optional[str] = typer.Option(
        None,
        "--repo",
        help="Analyze only this repository (owner/name)",
        metavar="OWNER/NAME",
    ),
    ci: bool = typer.Option(
        False,
        "--ci",
        help="Batch mode: time budget, periodic commit/push of results, working-copy cleanup",
    ),
    keep_working_copies: bool = typer.Option(
        False,
        "--keep-working-copies",
        help="Never delete working copies after analysis",
    ),
    remote_info_source: Optional[str] = typer.Option(
        None,
        "--remote-info-source",
        help="How to look up remote tips: git (ls-remote) or github (REST API)",
        click_type=click.Choice(["git", "github"], case_sensitive=False),
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
):
    """
    Analyze every repository whose stored result is missing or stale.

    A result is stale when the rule checks changed or the remote default
    branch moved. Failed repositories are marked and retried on later runs
    after everything else.

    [bold cyan]Examples:[/bold cyan]

      techpref analyze

      techpref analyze --repo facebook/react -v

      techpref analyze --ci
    """
    logger = setup_logging(verbose=verbose)

    with handle_errors(logger, "Analysis", verbose=verbose):
        settings = resolve_config(
            config=config,
            verbose=verbose,
            remote_info_source=remote_info_source.lower() if remote_info_source else None,
        )
        records = load_records(settings)

        with AnalysisOrchestrator.from_config(settings, records) as orchestrator:
            summary = orchestrator.run(
                RunOptions(repo_filter=repo, ci=ci, keep_working_copies=keep_working_copies)
            )
        _print_summary(summary)


def _print_summary(summary: RunSummary) -> None:
    table = Table(title="Analysis run", show_header=False, title_style="bold cyan")
    table.add_column("Outcome")
    table.add_column("Repositories", justify="right")
    table.add_row("Analyzed", f"[green]{summary.analyzed}[/green]")
    table.add_row("Failed", f"[red]{summary.failed}[/red]" if summary.failed else "0")
    table.add_row("Up to date", str(summary.up_to_date))
    table.add_row("Skipped (remote unreachable)", str(summary.skipped))
    console.print(table)

    for name in summary.failed_repos:
        console.print(f"  [red]✗[/red] {name}")
    if summary.budget_exhausted:
        console.print("[yellow]Time budget exhausted; remaining repositories carry over to the next run[/yellow]")
