"""Rules command: list registered rule checks."""

import json

import typer
from rich.table import Table

from ..rules import ALL_RULE_CHECKS, analyzed_version
from . import app
from ._common import console


@app.command()
def rules(
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """List every rule check and the current analyzedVersion."""
    version = analyzed_version()

    if json_output:
        payload = {
            "analyzedVersion": version,
            "checks": [check.to_dict() for check in ALL_RULE_CHECKS],
        }
        print(json.dumps(payload, indent=2))
        return

    table = Table(title=f"Rule checks (version {version})", title_style="bold cyan")
    table.add_column("Rule")
    table.add_column("Variant")
    table.add_column("Backend")
    for check in ALL_RULE_CHECKS:
        table.add_row(check.rule_id, check.variant, check.backend)
    console.print(table)
