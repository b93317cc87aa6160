"""
kvspine Logging - structured, connection-aware logging.

This module provides:
- Structured logging with structlog
- Connection context propagation via contextvars
- The command logging decorator and its default logger

Usage:
    from kvspine.logging import configure_logging, get_logger

    configure_logging()
    log = get_logger(__name__)
    log.info("driver.resolved", driver="RedisDriver")
"""

from kvspine.logging.commands import CommandLogger, LoggedCommand, count_affected, log_command
from kvspine.logging.config import configure_logging, is_configured, is_debug_enabled
from kvspine.logging.context import (
    LogContext,
    bind_context,
    clear_context,
    get_context,
    get_logger,
    push_context,
    set_context,
)
from kvspine.logging.timing import TimingResult, timed_block

__all__ = [
    # Configuration
    "configure_logging",
    "is_configured",
    "is_debug_enabled",
    # Context
    "get_logger",
    "set_context",
    "clear_context",
    "get_context",
    "bind_context",
    "push_context",
    "LogContext",
    # Timing
    "TimingResult",
    "timed_block",
    # Commands
    "CommandLogger",
    "LoggedCommand",
    "count_affected",
    "log_command",
]
