"""Base driver class with a per-type command table."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, TypeVar

from kvspine.core.errors import UnknownCommandError

F = TypeVar("F", bound=Callable[..., Any])


def command(*names: str) -> Callable[[F], F]:
    """Mark a driver method as the handler for one or more command names."""

    def decorator(func: F) -> F:
        func.__kvspine_commands__ = tuple(n.lower() for n in names)  # type: ignore[attr-defined]
        return func

    return decorator


class BaseDriver(ABC):
    """
    Abstract base class for bundled drivers.

    Subclasses mark handler methods with ``@command("name")``; the table is
    built once per class when it is defined and inherited by subclasses.
    ``execute`` looks the command up case-insensitively and calls
    ``unknown_command`` when there is no handler.
    """

    _commands: dict[str, str] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        table = dict(cls._commands)
        for attr, value in vars(cls).items():
            for name in getattr(value, "__kvspine_commands__", ()):
                table[name] = attr
        cls._commands = table

    def __init__(self, **config: Any):
        self.config = config

    @classmethod
    def supported_commands(cls) -> list[str]:
        """Names with a registered handler."""
        return sorted(cls._commands)

    def execute(self, command: str, *args: Any, **kwargs: Any) -> Any:
        """Execute a named command with positional arguments."""
        attr = self._commands.get(command.lower())
        if attr is None:
            return self.unknown_command(command, *args, **kwargs)
        return getattr(self, attr)(*args, **kwargs)

    def unknown_command(self, command: str, *args: Any, **kwargs: Any) -> Any:
        """Called for commands without a handler."""
        raise UnknownCommandError(command)

    @abstractmethod
    def transactional(self, operation: Callable[[Any], Any]) -> Any:
        """Run ``operation`` inside a transactional scope and return its result."""
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
