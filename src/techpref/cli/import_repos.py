"""Import command: merge a discovery document into the repository catalog."""

from pathlib import Path
from typing import Optional

import typer

from ..catalog import import_repositories, parse_discovery_document
from ..exceptions import CatalogError
from ..file_ops import read_json
from ..logging_config import setup_logging
from . import app
from ._common import console, handle_errors, resolve_config


@app.command("import-repos")
def import_repos(
    file: Path = typer.Argument(
        ...,
        help="Discovery output: {\"repositories\": [...]} or a GitHub search result list",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
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
    """Merge repositories into the catalog; known repositories are never dropped."""
    logger = setup_logging()

    with handle_errors(logger, "Import"):
        settings = resolve_config(config=config)
        try:
            fresh = parse_discovery_document(read_json(file))
        except (OSError, ValueError) as e:
            raise CatalogError(file, str(e))

        document = import_repositories(settings.catalog_path, fresh)
        console.print(
            f"[green]Imported {len(fresh)} repositories[/green]; "
            f"catalog holds {len(document.repositories)}"
        )
