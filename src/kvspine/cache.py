"""
Cache backend running on a RedisConnection.

``ConnectionCache`` satisfies the :class:`~kvspine.core.protocols.CacheBackend`
protocol by issuing commands through a connection, so cache traffic goes
through the same driver and the same query logging as everything else.

Examples:
    >>> conn = RedisConnection({"driver": "memory"})
    >>> cache = ConnectionCache(conn, prefix="app:", default_ttl_seconds=600)
    >>> conn.set_cacher(cache)
    >>> cache.set("user:123", {"name": "Alice"})
    >>> cache.get("user:123")
    {'name': 'Alice'}

Guardrails:
    ❌ DON'T: Call clear() without a prefix on a shared database
    ✅ DO: Give every cache a prefix so clear() only touches its own keys
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from kvspine.connection import RedisConnection


class ConnectionCache:
    """JSON-valued cache with TTL support on top of a connection.

    Attributes:
        prefix: Prepended to every key.
        default_ttl_seconds: TTL used when ``set`` gets none (``None`` → no expiry).
    """

    def __init__(
        self,
        connection: RedisConnection,
        *,
        prefix: str = "",
        default_ttl_seconds: int | None = 3600,
    ):
        self._connection = connection
        self.prefix = prefix
        self._default_ttl = default_ttl_seconds

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get(self, key: str) -> Any | None:
        """Retrieve a value by key."""
        raw = self._connection.execute("get", self._key(key))
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any, *, ttl_seconds: int | None = None) -> None:
        """Store a value with optional TTL."""
        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl
        serialized = json.dumps(value)

        if ttl:
            self._connection.execute("setex", self._key(key), ttl, serialized)
        else:
            self._connection.execute("set", self._key(key), serialized)

    def delete(self, key: str) -> None:
        """Remove a key from the cache."""
        self._connection.execute("delete", self._key(key))

    def exists(self, key: str) -> bool:
        """Check if key exists."""
        return bool(self._connection.execute("exists", self._key(key)))

    def clear(self) -> None:
        """Remove all keys under the prefix; the whole database when there is none."""
        if not self.prefix:
            self._connection.execute("flushdb")
            return
        keys = self._connection.execute("keys", f"{self.prefix}*")
        if keys:
            self._connection.execute("delete", *keys)


__all__ = ["ConnectionCache"]
