"""
CLI: ``kvspine config``: configuration inspection.
"""

from __future__ import annotations

import typer

from kvspine.cli.utils import console

app = typer.Typer(no_args_is_help=True)

_SECRET_FIELDS = {"password"}


@app.command("show")
def show_config(
    format: str = typer.Option("table", "--format", "-f", help="Output format: table, json, env"),
) -> None:
    """Show current connection settings."""
    from kvspine.config import get_settings

    settings = get_settings()
    values = {
        key: ("***" if key in _SECRET_FIELDS and value else value)
        for key, value in sorted(settings.model_dump().items())
    }

    if format == "json":
        import json

        console.print_json(json.dumps(values, default=str))
        return

    if format == "env":
        for key, value in values.items():
            console.print(f"KVSPINE_{key.upper()}={'' if value is None else value}", markup=False)
        return

    from rich.table import Table

    table = Table(title="Connection settings")
    table.add_column("Setting")
    table.add_column("Value")
    for key, value in values.items():
        table.add_row(key, "" if value is None else str(value))
    console.print(table)
