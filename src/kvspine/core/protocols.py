"""
Canonical protocol definitions for kvspine.

Every collaborator of the connection façade is described here as a structural
protocol, so any object with the right shape works without inheriting from a
kvspine base class.

Architecture:
    ::

        protocols.py
        ├── Driver        - executes named commands, runs transactional blocks
        ├── Logger        - receives one debug entry per logged command
        └── CacheBackend  - opaque cacher stored on the connection

Tags:
    protocol, driver, logger, cache, kvspine, contracts

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Driver(Protocol):
    """
    Backend driver contract.

    A driver owns the actual backend session. The connection never inspects
    commands; it forwards the name and arguments to ``execute`` and returns
    whatever comes back.

    Implementations:
        - :class:`kvspine.drivers.redis.RedisDriver` (alias ``"redis"``)
        - :class:`kvspine.drivers.memory.MemoryDriver` (alias ``"memory"``)
    """

    def execute(self, command: str, *args: Any, **kwargs: Any) -> Any:
        """Execute an arbitrary named command with positional arguments."""
        ...

    def transactional(self, operation: Callable[[Any], Any]) -> Any:
        """Run ``operation`` inside a transactional scope and return its result."""
        ...


@runtime_checkable
class Logger(Protocol):
    """
    Command logger contract.

    Satisfied by structlog bound loggers and by
    :class:`kvspine.logging.CommandLogger`.
    """

    def debug(self, event: str, **context: Any) -> Any:
        """Record a debug-level entry with structured context."""
        ...


@runtime_checkable
class CacheBackend(Protocol):
    """Protocol for cacher implementations stored on a connection.

    Keys are strings, values are JSON-serializable. The connection only
    stores and returns the reference; it never calls these methods.
    """

    def get(self, key: str) -> Any | None:
        """Retrieve a value by key, or ``None`` if not found or expired."""
        ...

    def set(self, key: str, value: Any, *, ttl_seconds: int | None = None) -> None:
        """Store a value with optional TTL."""
        ...

    def delete(self, key: str) -> None:
        """Remove a key. No-op if the key does not exist."""
        ...

    def exists(self, key: str) -> bool:
        """Check if a key exists and has not expired."""
        ...

    def clear(self) -> None:
        """Remove all keys."""
        ...


__all__ = [
    "Driver",
    "Logger",
    "CacheBackend",
]
