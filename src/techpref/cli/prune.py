"""Prune command: drop analyses produced by other rule versions."""

from pathlib import Path
from typing import Optional

import typer

from ..logging_config import setup_logging
from ..rules import analyzed_version
from ..store import ResultStore
from . import app
from ._common import console, handle_errors, resolve_config


@app.command()
def prune(
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="List what would be removed without deleting anything",
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
    """Delete analysis documents whose analyzedVersion differs from the current one."""
    logger = setup_logging()

    with handle_errors(logger, "Prune"):
        settings = resolve_config(config=config)
        version = analyzed_version()
        removed = ResultStore(settings.data_dir).prune(version, dry_run=dry_run)

        verb = "Would remove" if dry_run else "Removed"
        for name in removed:
            console.print(f"  {name}")
        console.print(f"{verb} [yellow]{len(removed)}[/yellow] analyses not at version [green]{version}[/green]")
