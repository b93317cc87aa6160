"""
Command logging - the decorator wrapped around dispatched commands.

When query logging is enabled on a connection, every command goes through
``log_command``, which times the real call, counts the affected elements and
hands one ``LoggedCommand`` to the connection's logger.

Logs:
    DEBUG get k1           query=LoggedCommand(command='get', took=41, num_rows=1)
    DEBUG lrange l 0 -1    query=LoggedCommand(command='lrange', took=57, num_rows=3)

Durations are whole microseconds.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Collection
from dataclasses import dataclass, field
from typing import Any

from kvspine.core.protocols import Logger
from kvspine.logging.context import get_logger
from kvspine.logging.timing import TimingResult

_TEXT_TYPES = (str, bytes, bytearray, memoryview)


def count_affected(result: Any) -> int:
    """
    Number of elements a command result represents.

    ``False`` means nothing was found or affected. Sized containers (lists,
    sets, dicts, deques, ranges ...) count their members; strings and bytes
    are single values. Any other value (including ``None`` and ``0``) counts
    as one.
    """
    if result is False:
        return 0
    if isinstance(result, Collection) and not isinstance(result, _TEXT_TYPES):
        return len(result)
    return 1


def _render(value: Any) -> str:
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    if isinstance(value, str):
        if value == "" or any(ch.isspace() for ch in value):
            return json.dumps(value)
        return value
    return str(value)


@dataclass
class LoggedCommand:
    """A single logged command execution."""

    command: str
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)
    took: int = 0
    num_rows: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for structured log output."""
        result = {
            "command": self.command,
            "args": [_render(a) for a in self.args],
            "took_us": self.took,
            "num_rows": self.num_rows,
        }
        if self.kwargs:
            result["kwargs"] = {k: _render(v) for k, v in self.kwargs.items()}
        return result

    def __str__(self) -> str:
        parts = [self.command]
        parts.extend(_render(a) for a in self.args)
        parts.extend(f"{k}={_render(v)}" for k, v in self.kwargs.items())
        return " ".join(parts)


class CommandLogger:
    """
    Default command logger, bound to a connection name.

    Flattens the ``query`` record into structured fields so JSON output stays
    queryable.
    """

    def __init__(self, connection: str = "", **options: Any):
        self.connection = connection
        self._log = get_logger("kvspine.commands").bind(connection=connection, **options)

    def debug(self, event: str, **context: Any) -> None:
        query = context.pop("query", None)
        if isinstance(query, LoggedCommand):
            context.update(query.to_dict())
        elif query is not None:
            context["query"] = query
        self._log.debug(event, **context)


def log_command(
    command: str,
    func: Callable[..., Any],
    get_command_logger: Callable[[], Logger],
) -> Callable[..., Any]:
    """
    Wrap ``func`` so each call is timed and recorded.

    The wrapper returns the result of ``func`` unchanged. Failed calls are
    recorded with ``num_rows=0`` and ``status="error"`` before the original
    exception is re-raised.

    Args:
        command: Command name, used for the record
        func: Callable performing the real command
        get_command_logger: Returns the logger; called once per invocation,
            before the command runs
    """

    def wrapper(*args: Any, **kwargs: Any) -> Any:
        logger = get_command_logger()
        record = LoggedCommand(command=command, args=args, kwargs=kwargs)
        timer = TimingResult(step=command)

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            timer.stop()
            record.took = timer.duration_us
            logger.debug(str(record), query=record, status="error", error_type=type(e).__name__)
            raise

        timer.stop()
        record.took = timer.duration_us
        record.num_rows = count_affected(result)

        logger.debug(str(record), query=record)
        return result

    return wrapper
