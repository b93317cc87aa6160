"""
kvspine core - errors and structural protocols shared by every module.
"""

from kvspine.core.errors import (
    BackendCommandError,
    ConfigError,
    ErrorCategory,
    ErrorContext,
    KVSpineError,
    MissingDriverError,
    MissingLoggerError,
    UnknownCommandError,
    WrongTypeError,
    categorize_error,
    is_retryable,
)
from kvspine.core.protocols import CacheBackend, Driver, Logger

__all__ = [
    # Errors
    "ErrorCategory",
    "ErrorContext",
    "KVSpineError",
    "ConfigError",
    "MissingDriverError",
    "MissingLoggerError",
    "BackendCommandError",
    "UnknownCommandError",
    "WrongTypeError",
    "is_retryable",
    "categorize_error",
    # Protocols
    "Driver",
    "Logger",
    "CacheBackend",
]
