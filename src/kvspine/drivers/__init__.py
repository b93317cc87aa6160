"""Backend drivers and the driver registry.

Short driver names are resolved under this package: ``"Memory"`` finds
``MemoryDriver`` and ``"memory.MemoryDriver"`` finds the class in
:mod:`kvspine.drivers.memory`.
"""

from kvspine.drivers.base import BaseDriver, command
from kvspine.drivers.memory import MemoryDriver
from kvspine.drivers.redis import RedisDriver
from kvspine.drivers.registry import (
    MEMORY,
    REDIS,
    DriverRegistry,
    clear_registry,
    driver_registry,
    list_drivers,
    register_driver,
    resolve_driver,
)

__all__ = [
    "BaseDriver",
    "command",
    "MemoryDriver",
    "RedisDriver",
    "DriverRegistry",
    "driver_registry",
    "register_driver",
    "resolve_driver",
    "list_drivers",
    "clear_registry",
    "REDIS",
    "MEMORY",
]
