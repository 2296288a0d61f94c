"""Shared CLI helpers."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from ..catalog import load_catalog
from ..config import ScanConfig, load_config
from ..exceptions import TechprefError
from ..models import RepositoryRecord

console = Console()


def resolve_config(
    config: Optional[Path] = None,
    verbose: bool = False,
    **overrides,
) -> ScanConfig:
    """Build configuration from CLI options."""
    if verbose:
        overrides["verbose"] = True
    return load_config(config_file=config, **overrides)


def load_records(config: ScanConfig) -> list[RepositoryRecord]:
    """Repositories from the catalog; exits with status 1 when there is none."""
    document = load_catalog(config.catalog_path)
    if document is None:
        console.print(
            f"[red]Error:[/red] No repository catalog at {config.catalog_path}. "
            "Run 'techpref import-repos FILE' first."
        )
        raise typer.Exit(1)
    return document.repositories


@contextmanager
def handle_errors(logger: logging.Logger, action: str, verbose: bool = False) -> Iterator[None]:
    """Map failures to exit codes: 1 for errors, 130 for an interrupt."""
    try:
        yield

    except typer.Exit:
        raise

    except TechprefError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    except KeyboardInterrupt:
        logger.info(f"{action} interrupted by user")
        console.print(f"\n[yellow]{action} interrupted[/yellow]")
        raise typer.Exit(130)

    except Exception as e:
        logger.exception(f"Unexpected error during {action.lower()}")
        console.print(f"[red]Unexpected error:[/red] {e}")
        if verbose:
            console.print_exception()
        raise typer.Exit(1)
