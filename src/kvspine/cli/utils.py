"""
CLI utility helpers: output formatting and connection management.
"""

from __future__ import annotations

import json
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from kvspine.connection import RedisConnection

console = Console()
err_console = Console(stderr=True)


# ── Connection helper ────────────────────────────────────────────────────


def make_connection(
    driver: str | None = None,
    url: str | None = None,
    name: str | None = None,
    log: bool = False,
) -> RedisConnection:
    """Build a connection from settings, overridden by CLI options."""
    overrides: dict[str, Any] = {}
    if driver:
        overrides["driver"] = driver
    if url:
        overrides["url"] = url
    if name:
        overrides["name"] = name
    if log:
        overrides["log"] = True
    return RedisConnection.from_settings(**overrides)


# ── Output helpers ───────────────────────────────────────────────────────


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=str)
    if isinstance(obj, bytes):
        return obj.decode("utf-8", errors="replace")
    return str(obj)


def output_value(value: Any, *, as_json: bool = False) -> None:
    """Render a command result the way redis-cli does."""
    if as_json:
        console.print_json(json.dumps(value, default=_json_default))
        return

    if value is None:
        console.print("(nil)")
    elif isinstance(value, dict):
        table = Table(show_header=True)
        table.add_column("Field")
        table.add_column("Value")
        for key, item in value.items():
            table.add_row(str(key), str(item))
        console.print(table)
    elif isinstance(value, (list, tuple, set, frozenset)):
        items = sorted(value, key=str) if isinstance(value, (set, frozenset)) else value
        if not items:
            console.print("(empty list or set)")
        for i, item in enumerate(items, 1):
            console.print(f"{i}) {item}")
    elif isinstance(value, bool):
        console.print("(integer) 1" if value else "(integer) 0")
    elif isinstance(value, int):
        console.print(f"(integer) {value}")
    else:
        console.print(str(value), markup=False)


def fail(message: str, *, category: str | None = None, retryable: bool = False) -> None:
    """Print an error and exit with status 1.

    ``category`` and ``retryable`` come from :func:`kvspine.core.errors.categorize_error`
    and :func:`kvspine.core.errors.is_retryable`.
    """
    label = f" ({category.lower()})" if category else ""
    err_console.print(f"[bold red]Error{label}[/bold red]: {escape(message)}")
    if retryable:
        err_console.print("[dim]The failure looks transient; retrying may succeed.[/dim]")
    raise typer.Exit(code=1)
