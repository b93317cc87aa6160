"""Redis driver backed by redis-py.

Works with Redis, Valkey, KeyDB and other RESP-compatible servers.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import redis
import structlog

from kvspine.drivers.base import BaseDriver

logger = structlog.get_logger(__name__)


class RedisDriver(BaseDriver):
    """
    Driver forwarding every command to a ``redis.Redis`` client.

    Commands map onto the client method of the same name (``get``, ``hset``,
    ``zadd`` ...). Names the client has no method for are sent raw through
    ``execute_command``. Client exceptions (``redis.RedisError`` and
    subclasses) propagate unchanged.
    """

    def __init__(
        self,
        url: str | None = None,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        password: str | None = None,
        decode_responses: bool = True,
        client: redis.Redis | None = None,
        **options: Any,
    ):
        super().__init__(url=url, host=host, port=port, db=db, decode_responses=decode_responses, **options)

        if client is not None:
            self.client = client
        elif url:
            if password is not None:
                options["password"] = password
            self.client = redis.from_url(url, decode_responses=decode_responses, **options)
        else:
            self.client = redis.Redis(
                host=host,
                port=port,
                db=db,
                password=password,
                decode_responses=decode_responses,
                **options,
            )

        logger.info(
            "redis.initialized",
            url=url,
            host=None if url else host,
            port=None if url else port,
            db=None if url else db,
        )

    def execute(self, command: str, *args: Any, **kwargs: Any) -> Any:
        """Call the client method named ``command``, or send it raw."""
        method = getattr(self.client, command, None)
        if command.startswith("_") or not callable(method):
            return self.client.execute_command(command.upper(), *args, **kwargs)
        return method(*args, **kwargs)

    def transactional(self, operation: Callable[[Any], Any]) -> Any:
        """
        Run ``operation(pipeline)`` inside MULTI/EXEC.

        Commands issued on the pipeline are queued and sent atomically once
        the operation returns. Nothing is sent if the operation raises.
        """
        with self.client.pipeline(transaction=True) as pipe:
            result = operation(pipe)
            pipe.execute()
        return result

    def __repr__(self) -> str:
        return f"RedisDriver(client={self.client!r})"
