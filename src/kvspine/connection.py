"""
RedisConnection - one object for issuing key-value commands.

The connection owns a single driver and forwards every command to it
without knowing the command set in advance. When query logging is enabled,
each command is timed and recorded through the connection's logger.

Architecture:
    ::

        caller
          │  conn.execute("get", "k")  /  conn.get("k")
          ▼
        RedisConnection ──(log enabled)──► log_command ──► Logger.debug
          │                                      │
          ▼                                      ▼
        driver.execute("get", "k")  ◄────────────┘
          │
          ▼
        backend (redis-py client, in-process store, custom driver)

State:
    driver: UNINITIALIZED → RESOLVED (replaceable, never closed here)
    logger: UNSET → DEFAULT (created lazily) | EXPLICIT (set_logger)

Usage:
    conn = RedisConnection({"driver": "memory", "name": "sessions", "log": True})
    conn.set("user:1", "alice")
    conn.get("user:1")                 # 'alice', one DEBUG entry logged
    conn.execute("hset", "h", "f", "v")

Concurrency:
    No internal locking. A connection is meant for one caller context at a
    time; replacing the driver from two threads races.
"""

from __future__ import annotations

import functools
import importlib
from collections.abc import Callable, Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any

from kvspine.core.errors import MissingDriverError, MissingLoggerError
from kvspine.core.protocols import CacheBackend, Driver, Logger
from kvspine.drivers.registry import REDIS, driver_registry
from kvspine.logging import CommandLogger, get_logger, log_command, push_context

log = get_logger(__name__)

DEFAULT_CONFIG: dict[str, Any] = {
    "driver": REDIS,
    "name": "",
}

# Keys consumed by the connection; everything else goes to the driver
CONNECTION_KEYS = frozenset({"driver", "name", "log", "logger", "lazy"})


class DriverState(str, Enum):
    """Lifecycle of the connection's driver."""

    UNINITIALIZED = "uninitialized"
    RESOLVED = "resolved"


class LoggerState(str, Enum):
    """Where the connection's logger came from."""

    UNSET = "unset"
    DEFAULT = "default"
    EXPLICIT = "explicit"


def _load_logger_class(target: Any, connection: str) -> Callable[..., Logger]:
    if target is None:
        raise MissingLoggerError(connection)
    if not isinstance(target, str):
        return target

    module_name, _, attr = target.rpartition(".")
    try:
        return getattr(importlib.import_module(module_name), attr)
    except (ImportError, ValueError, AttributeError) as e:
        raise MissingLoggerError(
            connection,
            f"Logger class could not be loaded: {target!r}",
            cause=e,
        ) from e


class RedisConnection:
    """
    Connection façade delegating command execution to a driver.

    Args:
        config: Mapping with ``driver`` (alias, dotted path, class or
            instance; default ``"redis"``), ``name`` (used in logs),
            ``log`` (enable query logging), ``lazy`` (defer driver
            resolution to the first command) and ``logger`` (default logger
            class or dotted path). Other keys go to the driver constructor.
        **overrides: Merged over ``config``.

    Raises:
        MissingDriverError: If the driver cannot be resolved (eager mode).
    """

    def __init__(self, config: Mapping[str, Any] | None = None, **overrides: Any):
        self._config: Mapping[str, Any] = MappingProxyType({**DEFAULT_CONFIG, **(config or {}), **overrides})
        self._driver: Driver | None = None
        self._driver_state = DriverState.UNINITIALIZED
        self._log_queries = False
        self._logger: Logger | None = None
        self._logger_state = LoggerState.UNSET
        self._cacher: CacheBackend | None = None

        if not self._config.get("lazy"):
            self.driver(self._config["driver"], self.driver_config())

        if self._config.get("log"):
            self.enable_query_logging(True)

    @classmethod
    def from_settings(cls, settings: Any = None, **overrides: Any) -> RedisConnection:
        """Build a connection from ``ConnectionSettings`` (environment by default)."""
        from kvspine.config import get_settings

        settings = settings or get_settings()
        return cls(settings.connection_config(), **overrides)

    # ── Configuration ────────────────────────────────────────────

    @property
    def config(self) -> Mapping[str, Any]:
        """Read-only connection configuration."""
        return self._config

    @property
    def config_name(self) -> str:
        """Logical connection name, ``""`` when not configured."""
        return self._config.get("name") or ""

    def driver_config(self) -> dict[str, Any]:
        """Configuration passed through to the driver constructor."""
        return {k: v for k, v in self._config.items() if k not in CONNECTION_KEYS}

    # ── Driver ───────────────────────────────────────────────────

    @property
    def driver_state(self) -> DriverState:
        return self._driver_state

    def driver(self, driver: Any = None, config: Mapping[str, Any] | None = None) -> Driver:
        """
        Get or replace the driver.

        With no argument, returns the current driver. With a string, class
        or factory, resolves and instantiates a new driver with ``config``.
        A driver instance is used as-is. The previous driver is discarded
        without being closed.

        Raises:
            MissingDriverError: Getter called before any driver was set, or
                the identifier does not resolve.
        """
        if driver is None:
            if self._driver_state is DriverState.UNINITIALIZED:
                raise MissingDriverError(None).with_context(connection=self.config_name)
            return self._driver

        try:
            resolved = driver_registry.create(driver, dict(config or {}))
        except MissingDriverError as e:
            e.with_context(connection=self.config_name)
            raise

        replaced = self._driver is not None
        self._driver = resolved
        self._driver_state = DriverState.RESOLVED
        log.debug(
            "driver.resolved",
            connection=self.config_name,
            driver=type(resolved).__name__,
            replaced=replaced,
        )
        return resolved

    def get_driver(self) -> Driver:
        """Return the current driver (see :meth:`driver`)."""
        return self.driver()

    def _current_driver(self) -> Driver:
        if self._driver_state is DriverState.UNINITIALIZED:
            return self.driver(self._config["driver"], self.driver_config())
        return self._driver

    # ── Query logging ────────────────────────────────────────────

    def log_queries(self, enable: bool | None = None) -> bool:
        """Get the query-logging flag, or set it when ``enable`` is given."""
        if enable is None:
            return self._log_queries
        self._log_queries = bool(enable)
        return self._log_queries

    def is_query_logging_enabled(self) -> bool:
        return self._log_queries

    def enable_query_logging(self, enable: bool = True) -> bool:
        self._log_queries = bool(enable)
        return self._log_queries

    def disable_query_logging(self) -> bool:
        self._log_queries = False
        return True

    @property
    def logger_state(self) -> LoggerState:
        return self._logger_state

    def set_logger(self, logger: Logger | None) -> None:
        """Use ``logger`` for command records; ``None`` reverts to the lazy default."""
        self._logger = logger
        self._logger_state = LoggerState.UNSET if logger is None else LoggerState.EXPLICIT

    def get_logger(self) -> Logger:
        """
        Return the command logger, creating the default one on first use.

        Raises:
            MissingLoggerError: No logger was set and the configured default
                logger class is ``None`` or cannot be imported.
        """
        if self._logger is not None:
            return self._logger

        logger_cls = _load_logger_class(self._config.get("logger", CommandLogger), self.config_name)
        self._logger = logger_cls(connection=self.config_name)
        self._logger_state = LoggerState.DEFAULT
        log.debug("logger.created", connection=self.config_name, logger=getattr(logger_cls, "__name__", None))
        return self._logger

    # ── Cacher ───────────────────────────────────────────────────

    def set_cacher(self, cacher: CacheBackend | None) -> None:
        self._cacher = cacher

    def get_cacher(self) -> CacheBackend | None:
        return self._cacher

    # ── Pass-through helpers ─────────────────────────────────────

    def transactional(self, operation: Callable[[Any], Any]) -> Any:
        """Run ``operation`` in the driver's transactional scope."""
        return self._current_driver().transactional(operation)

    def disable_constraints(self, operation: Callable[[RedisConnection], Any]) -> Any:
        """Key-value stores have no constraints to disable; runs ``operation(self)``."""
        return operation(self)

    # ── Command dispatch ─────────────────────────────────────────

    def execute(self, command: str, *args: Any, **kwargs: Any) -> Any:
        """
        Send ``command`` with ``args`` to the driver and return its result.

        Driver errors propagate unchanged.
        """
        driver = self._current_driver()
        func: Callable[..., Any] = functools.partial(driver.execute, command)

        if not self._log_queries:
            return func(*args, **kwargs)

        func = log_command(command, func, self.get_logger)
        token = push_context(connection=self.config_name or None, driver=type(driver).__name__, command=command)
        try:
            return func(*args, **kwargs)
        finally:
            token.restore()

    def __getattr__(self, name: str) -> Callable[..., Any]:
        if name.startswith("_"):
            raise AttributeError(name)
        return functools.partial(self.execute, name)

    def __repr__(self) -> str:
        driver = type(self._driver).__name__ if self._driver is not None else None
        return f"RedisConnection(name={self.config_name!r}, driver={driver}, log_queries={self._log_queries})"
