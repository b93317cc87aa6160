"""
Tests for the logging module.

Tests verify:
- Affected-element counting for command results
- LoggedCommand rendering
- The log_command wrapper emits exactly one entry per call
- CommandLogger flattens records into structured fields
- Connection context is attached to entries
"""

import time
from collections import deque
from collections.abc import Sequence
from unittest.mock import MagicMock

import pytest
from structlog.testing import capture_logs

from kvspine.logging import (
    CommandLogger,
    LogContext,
    LoggedCommand,
    TimingResult,
    bind_context,
    clear_context,
    configure_logging,
    count_affected,
    get_context,
    is_configured,
    log_command,
    push_context,
    set_context,
    timed_block,
)
from kvspine.logging.context import add_context_processor


class Page(Sequence):
    """Read-only result sequence as a third-party driver might return."""

    def __init__(self, items):
        self._items = list(items)

    def __getitem__(self, index):
        return self._items[index]

    def __len__(self):
        return len(self._items)


class TestCountAffected:
    @pytest.mark.parametrize(
        "result,expected",
        [
            (False, 0),
            (["a", "b", "c"], 3),
            (("a",), 1),
            ({"x", "y"}, 2),
            ({"f1": "v1", "f2": "v2"}, 2),
            ([], 0),
            ("OK", 1),
            (None, 1),
            (0, 1),
            (True, 1),
            (b"raw", 1),
            (bytearray(b"raw"), 1),
            (deque(["a", "b"]), 2),
            (range(4), 4),
            (Page(["a", "b", "c"]), 3),
        ],
    )
    def test_policy(self, result, expected):
        assert count_affected(result) == expected


class TestLoggedCommand:
    def test_str_joins_command_and_args(self):
        assert str(LoggedCommand("set", ("user:1", "alice"))) == "set user:1 alice"

    def test_str_quotes_whitespace_and_empty_strings(self):
        assert str(LoggedCommand("set", ("k", "hello world", ""))) == 'set k "hello world" ""'

    def test_str_includes_kwargs(self):
        assert str(LoggedCommand("set", ("k", "v"), {"ex": 60})) == "set k v ex=60"

    def test_bytes_are_decoded(self):
        assert str(LoggedCommand("get", (b"key",))) == "get key"

    def test_to_dict(self):
        record = LoggedCommand("lrange", ("l", 0, -1), took=12, num_rows=3)
        assert record.to_dict() == {
            "command": "lrange",
            "args": ["l", "0", "-1"],
            "took_us": 12,
            "num_rows": 3,
        }


class TestLogCommand:
    def test_returns_result_and_logs_once(self):
        logger = MagicMock()
        wrapped = log_command("get", lambda key: "v1", lambda: logger)

        assert wrapped("k") == "v1"
        logger.debug.assert_called_once()
        args, kwargs = logger.debug.call_args
        assert args == ("get k",)
        assert kwargs["query"].command == "get"
        assert kwargs["query"].num_rows == 1

    def test_logger_looked_up_per_call(self):
        logger = MagicMock()
        get_logger = MagicMock(return_value=logger)
        wrapped = log_command("ping", lambda: True, get_logger)

        wrapped()
        wrapped()
        assert get_logger.call_count == 2

    def test_records_elapsed_microseconds(self):
        logger = MagicMock()

        def slow(key):
            time.sleep(0.002)
            return None

        log_command("get", slow, lambda: logger)("k")
        record = logger.debug.call_args.kwargs["query"]
        assert record.took >= 2000

    def test_error_logged_then_reraised(self):
        logger = MagicMock()
        error = ValueError("bad")

        def failing():
            raise error

        with pytest.raises(ValueError) as exc_info:
            log_command("incr", failing, lambda: logger)()

        assert exc_info.value is error
        kwargs = logger.debug.call_args.kwargs
        assert kwargs["status"] == "error"
        assert kwargs["error_type"] == "ValueError"


class TestCommandLogger:
    def test_flattens_record(self):
        with capture_logs() as logs:
            logger = CommandLogger(connection="cache")
            logger.debug("get k", query=LoggedCommand("get", ("k",), took=5, num_rows=1))

        assert len(logs) == 1
        entry = logs[0]
        assert entry["event"] == "get k"
        assert entry["log_level"] == "debug"
        assert entry["connection"] == "cache"
        assert entry["command"] == "get"
        assert entry["args"] == ["k"]
        assert entry["took_us"] == 5
        assert entry["num_rows"] == 1

    def test_non_record_query_kept(self):
        with capture_logs() as logs:
            CommandLogger().debug("custom", query="raw")
        assert logs[0]["query"] == "raw"


class TestLogContext:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_to_dict_excludes_none(self):
        ctx = LogContext(connection="cache", driver=None)
        assert ctx.to_dict() == {"connection": "cache"}

    def test_set_and_bind(self):
        set_context(connection="cache")
        bind_context(driver="MemoryDriver")

        ctx = get_context()
        assert ctx.connection == "cache"
        assert ctx.driver == "MemoryDriver"

    def test_push_context_restores(self):
        set_context(connection="cache")
        token = push_context(command="get")
        assert get_context().command == "get"
        assert get_context().span_id is not None

        token.restore()
        assert get_context().command is None
        assert get_context().connection == "cache"

    def test_processor_adds_context_without_overriding(self):
        set_context(connection="cache", command="get")
        event = add_context_processor(None, "debug", {"event": "x", "command": "explicit"})

        assert event["connection"] == "cache"
        assert event["command"] == "explicit"


class TestTiming:
    def test_timed_block_stops_timer(self):
        with timed_block("get") as timer:
            pass
        assert timer.ended_at is not None
        assert isinstance(timer.duration_us, int)

    def test_timed_block_stops_on_error(self):
        with pytest.raises(RuntimeError):
            with timed_block("get") as timer:
                raise RuntimeError("x")
        assert timer.ended_at is not None

    def test_duration_units(self):
        timer = TimingResult(step="x", started_at=10.0, ended_at=10.5)
        assert timer.duration_us == 500_000
        assert timer.duration_ms == pytest.approx(500.0)


class TestConfigureLogging:
    def test_configure_marks_configured(self):
        configure_logging(level="DEBUG", format="json", force=True)
        assert is_configured()

    def test_second_call_is_noop(self):
        configure_logging(level="INFO", force=True)
        configure_logging(level="DEBUG")
        assert is_configured()
