"""
kvspine - a key-value connection façade over pluggable drivers.

Usage:
    from kvspine import RedisConnection

    conn = RedisConnection({"driver": "redis", "url": "redis://localhost:6379/0", "log": True})
    conn.set("greeting", "hello")
    conn.get("greeting")
"""

from kvspine.cache import ConnectionCache
from kvspine.connection import DriverState, LoggerState, RedisConnection
from kvspine.core.errors import (
    BackendCommandError,
    KVSpineError,
    MissingDriverError,
    MissingLoggerError,
)
from kvspine.drivers import BaseDriver, MemoryDriver, RedisDriver, register_driver

__version__ = "0.1.0"

__all__ = [
    "RedisConnection",
    "DriverState",
    "LoggerState",
    "ConnectionCache",
    "BaseDriver",
    "MemoryDriver",
    "RedisDriver",
    "register_driver",
    "KVSpineError",
    "MissingDriverError",
    "MissingLoggerError",
    "BackendCommandError",
    "__version__",
]
