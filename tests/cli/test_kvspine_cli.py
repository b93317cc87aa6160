"""Tests for the kvspine CLI: exec, drivers and config show.

Commands run against the memory driver, so no server is required.
"""

from __future__ import annotations

from unittest.mock import patch

import redis
from typer.testing import CliRunner

from kvspine.cli import app
from kvspine.cli.config import app as config_app

runner = CliRunner()


class TestRootApp:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.output.startswith("kvspine ")

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert "exec" in result.output


class TestExec:
    def test_ping(self):
        result = runner.invoke(app, ["exec", "--driver", "memory", "ping"])
        assert result.exit_code == 0
        assert "(integer) 1" in result.output

    def test_string_result(self):
        result = runner.invoke(app, ["exec", "-d", "memory", "ping", "hello"])
        assert result.exit_code == 0
        assert result.output.strip() == "hello"

    def test_nil_result(self):
        result = runner.invoke(app, ["exec", "-d", "memory", "get", "missing"])
        assert result.exit_code == 0
        assert "(nil)" in result.output

    def test_empty_list(self):
        result = runner.invoke(app, ["exec", "-d", "memory", "keys", "user:*"])
        assert result.exit_code == 0
        assert "(empty list or set)" in result.output

    def test_json_output(self):
        result = runner.invoke(app, ["exec", "-d", "memory", "--json", "hgetall", "h"])
        assert result.exit_code == 0
        assert result.output.strip() == "{}"

    def test_driver_from_environment(self, monkeypatch):
        monkeypatch.setenv("KVSPINE_DRIVER", "memory")
        result = runner.invoke(app, ["exec", "get", "k"])
        assert result.exit_code == 0
        assert "(nil)" in result.output

    def test_with_logging(self):
        result = runner.invoke(app, ["exec", "-d", "memory", "--log", "--name", "cli", "get", "k"])
        assert result.exit_code == 0

    def test_unknown_command_fails(self):
        result = runner.invoke(app, ["exec", "-d", "memory", "zadd", "board", "1", "a"])
        assert result.exit_code == 1
        assert "unknown command" in result.output
        assert "Error (backend)" in result.output
        assert "retrying" not in result.output

    def test_unresolvable_driver_fails(self):
        result = runner.invoke(app, ["exec", "-d", "nope", "get", "k"])
        assert result.exit_code == 1
        assert "could not be resolved" in result.output
        assert "Error (config)" in result.output

    @patch("kvspine.drivers.redis.redis.Redis")
    def test_backend_error_fails(self, mock_redis):
        mock_redis.return_value.get.side_effect = redis.ConnectionError("Connection refused")

        result = runner.invoke(app, ["exec", "get", "k"])

        assert result.exit_code == 1
        assert "Connection refused" in result.output
        assert "Error (network)" in result.output
        assert "retrying may succeed" in result.output


class TestDrivers:
    def test_lists_bundled_drivers(self):
        result = runner.invoke(app, ["drivers"])
        assert result.exit_code == 0
        assert "memory" in result.output
        assert "redis" in result.output
        assert "MemoryDriver" in result.output


class TestConfigShow:
    def test_env_format(self, monkeypatch):
        monkeypatch.setenv("KVSPINE_DRIVER", "memory")

        result = runner.invoke(config_app, ["show", "--format", "env"])

        assert result.exit_code == 0
        assert "KVSPINE_DRIVER=memory" in result.output

    def test_json_format(self):
        result = runner.invoke(config_app, ["show", "--format", "json"])
        assert result.exit_code == 0
        assert '"driver": "redis"' in result.output

    def test_table_format(self):
        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0
        assert "driver" in result.output

    def test_password_masked(self, monkeypatch):
        monkeypatch.setenv("KVSPINE_PASSWORD", "hunter2")

        result = runner.invoke(config_app, ["show", "--format", "env"])

        assert "hunter2" not in result.output
        assert "KVSPINE_PASSWORD=***" in result.output
