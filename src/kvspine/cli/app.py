"""
Root Typer application for the kvspine CLI.
"""

from __future__ import annotations

import redis
import typer
from typer import Typer

from kvspine.cli.config import app as config_app
from kvspine.cli.utils import console, fail, make_connection, output_value
from kvspine.core.errors import KVSpineError, categorize_error, is_retryable
from kvspine.logging import configure_logging

app = Typer(
    name="kvspine",
    help="kvspine: issue key-value commands through a pluggable driver.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("kvspine")
        except PackageNotFoundError:
            from kvspine import __version__ as v
        typer.echo(f"kvspine {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """kvspine CLI: run commands and inspect drivers and configuration."""


@app.command("exec")
def exec_command(
    command: str = typer.Argument(..., help="Command name, e.g. get, hgetall, lrange"),
    args: list[str] | None = typer.Argument(None, help="Command arguments"),  # noqa: UP007
    driver: str | None = typer.Option(None, "--driver", "-d", help="Driver alias or dotted path"),
    url: str | None = typer.Option(None, "--url", "-u", help="Backend URL (redis driver)"),
    name: str | None = typer.Option(None, "--name", "-n", help="Connection name used in logs"),
    log: bool = typer.Option(False, "--log", help="Log the command at DEBUG level"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
) -> None:
    """Execute a single command and print its result."""
    configure_logging(level="DEBUG" if log else None)

    try:
        conn = make_connection(driver=driver, url=url, name=name, log=log)
        result = conn.execute(command, *(args or []))
    except (KVSpineError, redis.RedisError) as e:
        fail(str(e), category=categorize_error(e).value, retryable=is_retryable(e))
        return

    output_value(result, as_json=as_json)


@app.command("drivers")
def list_drivers_command() -> None:
    """List registered driver names."""
    from rich.table import Table

    from kvspine.drivers import driver_registry

    table = Table(title="Registered drivers")
    table.add_column("Name")
    table.add_column("Driver")
    for name in driver_registry.list_drivers():
        factory = driver_registry.get(name)
        table.add_row(name, f"{factory.__module__}.{getattr(factory, '__qualname__', factory)}")
    console.print(table)


app.add_typer(config_app, name="config", help="Configuration inspection.")
