"""Status command: how fresh the result store is."""

import json
from pathlib import Path
from typing import Optional

import typer

from ..logging_config import setup_logging
from ..rules import analyzed_version
from ..store import ResultStore
from . import app
from ._common import console, handle_errors, load_records, resolve_config


@app.command()
def status(
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
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
    """Show totals: known, analyzed at the current rule version, stale, failing."""
    logger = setup_logging(quiet=json_output)

    with handle_errors(logger, "Status"):
        settings = resolve_config(config=config)
        records = load_records(settings)
        store = ResultStore(settings.data_dir)
        version = analyzed_version()

        analyses = store.load_all_analyses(records)
        current = sum(1 for a in analyses.values() if a.analyzed_version == version)
        counts = {
            "analyzedVersion": version,
            "known": len(records),
            "current": current,
            "stale": len(analyses) - current,
            "missing": len(records) - len(analyses),
            "failing": len(store.load_all_failing(records)),
        }

        if json_output:
            print(json.dumps(counts, indent=2))
            return

        console.print(f"[bold cyan]TechPref status[/bold cyan] (rules version [green]{version}[/green])")
        console.print(f"  Known repositories:   {counts['known']}")
        console.print(f"  Analyzed (current):   [green]{counts['current']}[/green]")
        console.print(f"  Analyzed (stale):     [yellow]{counts['stale']}[/yellow]")
        console.print(f"  Never analyzed:       {counts['missing']}")
        console.print(f"  Failing:              [red]{counts['failing']}[/red]")
