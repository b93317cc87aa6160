"""Driver registry - turns driver identifiers into driver instances.

Manifesto:
    Callers name a driver with a short alias (``"redis"``) instead of a
    fully-qualified type, while third-party drivers still plug in through
    registration, entry points, or a dotted import path.

Resolution order for string identifiers:
    1. Registered names (bundled aliases + ``register_driver``)
    2. Entry points in the ``kvspine.drivers`` group
    3. Dotted import paths (``"myapp.drivers.ClusterDriver"``)
    4. Names under the ``kvspine.drivers`` namespace
       (``"Memory"`` → ``MemoryDriver``, ``"memory.MemoryDriver"``)

Tags:
    kvspine, drivers, registry, plugin-discovery, lookup

Doc-Types:
    api-reference
"""

from __future__ import annotations

import importlib
import inspect
from collections.abc import Callable
from importlib.metadata import entry_points
from typing import Any

import structlog

from kvspine.core.errors import MissingDriverError
from kvspine.core.protocols import Driver

logger = structlog.get_logger(__name__)

DriverFactory = Callable[..., Driver]

NAMESPACE = "kvspine.drivers"
ENTRY_POINT_GROUP = "kvspine.drivers"

# Reserved aliases for the bundled drivers
REDIS = "redis"
MEMORY = "memory"


def _is_driver_type(obj: Any) -> bool:
    """Concrete class exposing ``execute`` and ``transactional``."""
    if not isinstance(obj, type) or inspect.isabstract(obj) or getattr(obj, "_is_protocol", False):
        return False
    return callable(getattr(obj, "execute", None)) and callable(getattr(obj, "transactional", None))


class DriverRegistry:
    """
    Registry mapping driver names to driver factories.

    A factory is a driver class or any callable accepting the driver config
    as keyword arguments and returning a driver.
    """

    def __init__(self, namespace: str = NAMESPACE, entry_point_group: str = ENTRY_POINT_GROUP):
        self.namespace = namespace
        self.entry_point_group = entry_point_group
        self._drivers: dict[str, DriverFactory] = {}
        self._loaded = False

    def register(self, name: str, factory: DriverFactory, *, replace: bool = False) -> None:
        """Register a driver factory under ``name``."""
        self._ensure_loaded()
        if not replace and name in self._drivers:
            raise ValueError(f"Driver '{name}' is already registered")
        self._drivers[name] = factory
        logger.debug("driver.registered", name=name, factory=getattr(factory, "__name__", repr(factory)))

    def unregister(self, name: str) -> None:
        """Unregister a driver by name."""
        self._drivers.pop(name, None)

    def get(self, name: str) -> DriverFactory | None:
        """Get a registered factory by name."""
        self._ensure_loaded()
        return self._drivers.get(name)

    def list_drivers(self) -> list[str]:
        """List all registered driver names."""
        self._ensure_loaded()
        return sorted(self._drivers.keys())

    def clear(self) -> None:
        """Clear registry (for testing). Bundled aliases come back on next use."""
        self._drivers.clear()
        self._loaded = False

    def resolve(self, identifier: str) -> DriverFactory:
        """
        Resolve a string identifier to a driver factory.

        Raises:
            MissingDriverError: If no strategy finds a driver for ``identifier``.
        """
        if not isinstance(identifier, str) or not identifier.strip():
            raise MissingDriverError(identifier)

        factory = self.get(identifier)
        if factory is not None:
            return factory

        for strategy in (self._from_entry_points, self._from_import_path, self._from_namespace):
            factory = strategy(identifier)
            if factory is not None:
                logger.debug("driver.discovered", identifier=identifier, strategy=strategy.__name__.lstrip("_"))
                return factory

        raise MissingDriverError(identifier)

    def create(self, identifier: Any, config: dict[str, Any] | None = None) -> Driver:
        """
        Turn ``identifier`` into a live driver.

        ``identifier`` may be a driver instance (returned as-is), a driver
        class or factory (called with ``config``), or a string resolved by
        :meth:`resolve`.
        """
        if isinstance(identifier, str):
            factory = self.resolve(identifier)
        elif isinstance(identifier, type):
            if not _is_driver_type(identifier):
                raise MissingDriverError(identifier)
            factory = identifier
        elif isinstance(identifier, Driver):
            return identifier
        elif callable(identifier):
            factory = identifier
        else:
            raise MissingDriverError(identifier)

        driver = factory(**(config or {}))
        if not isinstance(driver, Driver):
            raise MissingDriverError(identifier, f"Driver factory did not return a driver: {identifier!r}")
        return driver

    # ── Resolution strategies ────────────────────────────────────

    def _from_entry_points(self, name: str) -> DriverFactory | None:
        for ep in entry_points(group=self.entry_point_group):
            if ep.name != name:
                continue
            try:
                return ep.load()
            except (ImportError, AttributeError) as e:
                raise MissingDriverError(
                    name,
                    f"Driver entry point {name!r} could not be loaded: {e}",
                    cause=e,
                ) from e
        return None

    def _from_import_path(self, name: str) -> DriverFactory | None:
        module_name, _, attr = name.rpartition(".")
        if not module_name or module_name.startswith("."):
            return None
        try:
            module = importlib.import_module(module_name)
        except (ImportError, ValueError):
            return None
        candidate = getattr(module, attr, None)
        return candidate if _is_driver_type(candidate) else None

    def _from_namespace(self, name: str) -> DriverFactory | None:
        if "." in name:
            return self._from_import_path(f"{self.namespace}.{name}")
        try:
            package = importlib.import_module(self.namespace)
        except ImportError:
            return None
        for attr in (f"{name}Driver", name):
            candidate = getattr(package, attr, None)
            if _is_driver_type(candidate):
                return candidate
        return None

    def _ensure_loaded(self) -> None:
        """Register the bundled drivers on first use."""
        if self._loaded:
            return
        self._loaded = True

        from kvspine.drivers.memory import MemoryDriver
        from kvspine.drivers.redis import RedisDriver

        self._drivers.setdefault(REDIS, RedisDriver)
        self._drivers.setdefault(MEMORY, MemoryDriver)


# Global registry
driver_registry = DriverRegistry()


def register_driver(name: str, *, replace: bool = False) -> Callable[[type], type]:
    """
    Decorator to register a driver class.

    Usage:
        @register_driver("cluster")
        class ClusterDriver(BaseDriver):
            ...
    """

    def decorator(cls: type) -> type:
        driver_registry.register(name, cls, replace=replace)
        return cls

    return decorator


def resolve_driver(identifier: Any, config: dict[str, Any] | None = None) -> Driver:
    """Create a driver from ``identifier`` using the global registry."""
    return driver_registry.create(identifier, config)


def list_drivers() -> list[str]:
    """List all registered driver names."""
    return driver_registry.list_drivers()


def clear_registry() -> None:
    """Clear the global registry (for testing)."""
    driver_registry.clear()
