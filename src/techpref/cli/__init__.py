"""CLI entry point: registers all subcommands."""

import typer

from .. import __version__
from ._common import console

app = typer.Typer(
    name="techpref",
    help="TechPref - Incremental coding-convention analysis over a repository corpus",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold cyan]TechPref[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
):
    """
    Keep per-repository convention analyses fresh, re-analyzing only what went stale.
    """


# Import subcommands to register them
from .analyze import analyze as _analyze  # noqa: F401, E402
from .clone import clone as _clone  # noqa: F401, E402
from .import_repos import import_repos as _import_repos  # noqa: F401, E402
from .prune import prune as _prune  # noqa: F401, E402
from .rules import rules as _rules  # noqa: F401, E402
from .status import status as _status  # noqa: F401, E402
