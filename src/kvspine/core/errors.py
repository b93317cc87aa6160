"""
Structured error types for kvspine.

Every error raised by the connection façade itself extends KVSpineError and
carries a category, a retryable flag, structured context and an optional
chained cause. Errors raised by a backend client (``redis.RedisError`` and
friends) are never wrapped; they reach the caller exactly as the client
raised them.

Manifesto:
    - **Typed hierarchy:** Resolution problems and backend problems are
      different types, so callers can catch one without the other
    - **Explicit retry semantics:** Configuration errors are never retryable
    - **Rich context:** Errors carry connection/driver/command metadata
    - **No swallowing:** The façade adds no retry, classification or
      suppression to backend errors

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────┐
        │                      KVSpineError                        │
        │        (category, retryable, context, cause)             │
        ├─────────────────────────────────────────────────────────┤
        │  ConfigError (CONFIG)        BackendCommandError (BACKEND)│
        │       │                            │                     │
        │  MissingDriverError          UnknownCommandError         │
        │  MissingLoggerError          WrongTypeError              │
        └─────────────────────────────────────────────────────────┘

Tags:
    error-handling, exception-hierarchy, kvspine, observability

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import redis


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    CONFIG = "CONFIG"
    BACKEND = "BACKEND"
    NETWORK = "NETWORK"
    VALIDATION = "VALIDATION"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        connection: Configured name of the connection involved
        driver: Driver identifier or class name
        command: Command name being dispatched
        metadata: Additional key-value pairs
    """

    connection: str | None = None
    driver: str | None = None
    command: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["connection", "driver", "command"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class KVSpineError(Exception):
    """
    Base exception for all kvspine errors.

    Subclasses set ``default_category`` and ``default_retryable`` so callers
    rarely pass them explicitly.

    Examples:
        >>> error = KVSpineError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(connection="cache").context.connection
        'cache'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> KVSpineError:
        """
        Add context to this error (fluent API).

        Usage:
            raise MissingDriverError("nope").with_context(connection="sessions")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(KVSpineError):
    """
    Configuration error.

    Never retryable - configuration must be fixed.
    """

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class MissingDriverError(ConfigError):
    """Driver identifier does not resolve to a loadable driver."""

    def __init__(self, driver: Any, message: str | None = None, **kwargs: Any):
        self.driver = driver
        if message is None:
            if driver is None:
                message = "No driver has been set on this connection"
            else:
                message = f"Driver could not be resolved: {driver!r}"
        super().__init__(message, **kwargs)
        self.context.driver = None if driver is None else str(driver)


class MissingLoggerError(ConfigError):
    """Query logging was requested but no logger can be created."""

    def __init__(self, connection: str = "", message: str | None = None, **kwargs: Any):
        self.connection = connection
        super().__init__(
            message
            or (
                "For logging you must either set a logger using "
                "RedisConnection.set_logger() or configure a 'logger' class"
            ),
            **kwargs,
        )
        self.context.connection = connection


# =============================================================================
# BACKEND ERRORS
# =============================================================================


class BackendCommandError(KVSpineError):
    """Error raised by a bundled driver while executing a command."""

    default_category = ErrorCategory.BACKEND
    default_retryable = False


class UnknownCommandError(BackendCommandError):
    """Driver has no implementation for the command."""

    def __init__(self, command: str):
        self.command = command
        super().__init__(f"ERR unknown command '{command}'")
        self.context.command = command


class WrongTypeError(BackendCommandError):
    """Command used against a key holding the wrong kind of value."""

    def __init__(self, command: str, key: str):
        self.command = command
        self.key = key
        super().__init__("WRONGTYPE Operation against a key holding the wrong kind of value")
        self.context.command = command
        self.context.metadata["key"] = key


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


# Transient transport failures
_NETWORK_ERRORS = (
    ConnectionError,
    TimeoutError,
    redis.ConnectionError,
    redis.TimeoutError,
)


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, KVSpineError):
        return error.retryable
    return isinstance(error, _NETWORK_ERRORS)


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error, including redis-py client errors."""
    if isinstance(error, KVSpineError):
        return error.category
    if isinstance(error, _NETWORK_ERRORS):
        return ErrorCategory.NETWORK
    if isinstance(error, redis.RedisError):
        return ErrorCategory.BACKEND
    if isinstance(error, (ValueError, TypeError)):
        return ErrorCategory.VALIDATION
    return ErrorCategory.UNKNOWN


__all__ = [
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
]
