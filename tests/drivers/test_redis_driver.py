"""
Tests for RedisDriver.

Uses a mocked redis client; no server required.
"""

from unittest.mock import MagicMock, patch

import pytest
import redis

from kvspine import RedisConnection
from kvspine.drivers import RedisDriver


@pytest.fixture
def mock_client():
    client = MagicMock(spec=redis.Redis)
    client.get.return_value = "v1"
    return client


@pytest.fixture
def driver(mock_client):
    return RedisDriver(client=mock_client)


class TestRedisDriverInit:
    """Client construction."""

    @patch("kvspine.drivers.redis.redis.from_url")
    def test_from_url(self, mock_from_url):
        driver = RedisDriver(url="redis://cache:6380/2")

        mock_from_url.assert_called_once_with("redis://cache:6380/2", decode_responses=True)
        assert driver.client is mock_from_url.return_value

    @patch("kvspine.drivers.redis.redis.from_url")
    def test_from_url_with_password(self, mock_from_url):
        RedisDriver(url="redis://cache:6379/0", password="secret")

        mock_from_url.assert_called_once_with("redis://cache:6379/0", decode_responses=True, password="secret")

    @patch("kvspine.drivers.redis.redis.from_url")
    def test_connection_config_password_reaches_client(self, mock_from_url):
        RedisConnection({"driver": "redis", "url": "redis://h:6379/0", "password": "secret"})

        assert mock_from_url.call_args.kwargs["password"] == "secret"

    @patch("kvspine.drivers.redis.redis.Redis")
    def test_from_host_port(self, mock_redis):
        RedisDriver(host="cache", port=6380, db=1, password="secret")

        mock_redis.assert_called_once_with(
            host="cache",
            port=6380,
            db=1,
            password="secret",
            decode_responses=True,
        )

    @patch("kvspine.drivers.redis.redis.Redis")
    def test_extra_options_passed_to_client(self, mock_redis):
        RedisDriver(socket_timeout=2.5)
        assert mock_redis.call_args.kwargs["socket_timeout"] == 2.5

    def test_explicit_client(self, mock_client):
        assert RedisDriver(client=mock_client).client is mock_client


class TestRedisDriverExecute:
    """Command forwarding."""

    def test_calls_client_method(self, driver, mock_client):
        assert driver.execute("get", "k1") == "v1"
        mock_client.get.assert_called_once_with("k1")

    def test_keyword_arguments_forwarded(self, driver, mock_client):
        driver.execute("set", "k", "v", ex=60, nx=True)
        mock_client.set.assert_called_once_with("k", "v", ex=60, nx=True)

    def test_falls_back_to_execute_command(self, driver, mock_client):
        mock_client.execute_command.return_value = 1

        assert driver.execute("del", "k") == 1
        mock_client.execute_command.assert_called_once_with("DEL", "k")

    def test_private_names_sent_raw(self, driver, mock_client):
        driver.execute("_private")
        mock_client.execute_command.assert_called_once_with("_PRIVATE")

    def test_client_errors_propagate_unchanged(self, driver, mock_client):
        error = redis.ResponseError("WRONGTYPE Operation against a key holding the wrong kind of value")
        mock_client.get.side_effect = error

        with pytest.raises(redis.ResponseError) as exc_info:
            driver.execute("get", "k")
        assert exc_info.value is error


class TestRedisDriverTransactional:
    """MULTI/EXEC pipelines."""

    def test_runs_operation_on_pipeline(self, driver, mock_client):
        pipe = mock_client.pipeline.return_value.__enter__.return_value

        result = driver.transactional(lambda p: p.set("k", "v") and "done")

        mock_client.pipeline.assert_called_once_with(transaction=True)
        pipe.set.assert_called_once_with("k", "v")
        pipe.execute.assert_called_once()
        assert result == "done"

    def test_nothing_sent_when_operation_raises(self, driver, mock_client):
        pipe = mock_client.pipeline.return_value.__enter__.return_value

        def operation(p):
            raise RuntimeError("abort")

        with pytest.raises(RuntimeError):
            driver.transactional(operation)
        pipe.execute.assert_not_called()
