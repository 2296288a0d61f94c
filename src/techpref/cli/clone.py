"""Clone command: bulk clone or update working copies."""

from pathlib import Path
from typing import Optional

import typer
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn, TimeElapsedColumn

from ..bulk import select_oldest_analyzed, sync_all
from ..config import ScanConfig
from ..logging_config import setup_logging
from ..models import RepositoryRecord
from ..revision import RevisionSync, create_remote_info_provider
from ..store import ResultStore
from . import app
from ._common import console, handle_errors, load_records, resolve_config


@app.command()
def clone(
    oldest_analyzed: Optional[int] = typer.Option(
        None,
        "--oldest-analyzed",
        help="Only sync the N stalest repositories that have new commits",
        min=1,
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
    Clone missing working copies and update existing ones to the remote tip.

    With --oldest-analyzed N, repositories never analyzed come first, then
    those analyzed longest ago; only the first N with new commits are synced.
    """
    logger = setup_logging(verbose=verbose)

    with handle_errors(logger, "Clone", verbose=verbose):
        settings = resolve_config(config=config, verbose=verbose)
        records = load_records(settings)
        revision_sync = RevisionSync(
            settings.repos_dir,
            remote_provider=create_remote_info_provider(settings),
            timeout=settings.git_timeout_seconds,
        )
        try:
            _sync(settings, records, revision_sync, oldest_analyzed)
        finally:
            revision_sync.close()


def _sync(
    settings: ScanConfig,
    records: list[RepositoryRecord],
    revision_sync: RevisionSync,
    oldest_analyzed: Optional[int],
) -> None:
    if oldest_analyzed is not None:
        records = select_oldest_analyzed(
            records, ResultStore(settings.data_dir), revision_sync, oldest_analyzed
        )

    if not records:
        console.print("[green]Nothing to sync[/green]")
        return

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(complete_style="cyan", finished_style="green"),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=False,
    ) as progress:
        task = progress.add_task("Syncing repositories", total=len(records))

        def on_done(record, ok):
            progress.update(task, advance=1, description=record.full_name)

        summary = sync_all(
            records, revision_sync, concurrency=settings.sync_concurrency, on_done=on_done
        )

    failed_style = "red" if summary.failed else "default"
    console.print(
        f"[green]{summary.succeeded} synced[/green], "
        f"[{failed_style}]{summary.failed} failed[/{failed_style}]"
    )
