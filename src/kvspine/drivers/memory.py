"""In-process key-value driver.

Keeps every key in a dict owned by the driver instance. Implements the string,
hash, list and set commands most application code needs, with redis-py style
return values so code written against ``RedisDriver`` behaves the same here.
Useful for development, tests, and single-process tools.
"""

from __future__ import annotations

import copy
import fnmatch
import time
from collections.abc import Callable
from typing import Any

import structlog

from kvspine.core.errors import BackendCommandError, WrongTypeError
from kvspine.drivers.base import BaseDriver, command

logger = structlog.get_logger(__name__)


def _to_str(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


class MemoryDriver(BaseDriver):
    """
    In-memory driver.

    Values are stored as strings (as the server would), hashes as dicts,
    lists as lists and sets as sets. Expiry is checked lazily on access.
    """

    def __init__(self, **config: Any):
        super().__init__(**config)
        self._store: dict[str, Any] = {}
        self._expires: dict[str, float] = {}
        logger.debug("memory.initialized")

    # ── Keyspace helpers ────────────────────────────────────────

    def _alive(self, key: str) -> bool:
        expires_at = self._expires.get(key)
        if expires_at is not None and time.time() >= expires_at:
            self._store.pop(key, None)
            self._expires.pop(key, None)
        return key in self._store

    def _lookup(self, cmd: str, key: str, kind: type) -> Any | None:
        if not self._alive(key):
            return None
        value = self._store[key]
        if not isinstance(value, kind):
            raise WrongTypeError(cmd, key)
        return value

    def _remove(self, key: str) -> bool:
        self._expires.pop(key, None)
        return self._store.pop(key, None) is not None

    # ── Server ──────────────────────────────────────────────────

    @command("ping")
    def ping(self, message: str | None = None) -> Any:
        return True if message is None else message

    @command("flushdb")
    def flushdb(self) -> bool:
        self._store.clear()
        self._expires.clear()
        return True

    # ── Keys ────────────────────────────────────────────────────

    @command("del", "delete")
    def delete(self, *keys: str) -> int:
        return sum(1 for key in keys if self._alive(key) and self._remove(key))

    @command("exists")
    def exists(self, *keys: str) -> int:
        return sum(1 for key in keys if self._alive(key))

    @command("keys")
    def keys(self, pattern: str = "*") -> list[str]:
        return sorted(key for key in list(self._store) if self._alive(key) and fnmatch.fnmatchcase(key, pattern))

    @command("expire")
    def expire(self, key: str, seconds: int) -> bool:
        if not self._alive(key):
            return False
        self._expires[key] = time.time() + int(seconds)
        return True

    @command("ttl")
    def ttl(self, key: str) -> int:
        if not self._alive(key):
            return -2
        expires_at = self._expires.get(key)
        if expires_at is None:
            return -1
        return max(0, round(expires_at - time.time()))

    # ── Strings ─────────────────────────────────────────────────

    @command("get")
    def get(self, key: str) -> str | None:
        return self._lookup("get", key, str)

    @command("set")
    def set(
        self,
        key: str,
        value: Any,
        ex: int | None = None,
        px: int | None = None,
        nx: bool = False,
        xx: bool = False,
    ) -> bool | None:
        present = self._alive(key)
        if (nx and present) or (xx and not present):
            return None
        self._store[key] = _to_str(value)
        self._expires.pop(key, None)
        if ex is not None:
            self._expires[key] = time.time() + int(ex)
        elif px is not None:
            self._expires[key] = time.time() + int(px) / 1000
        return True

    @command("setex")
    def setex(self, key: str, seconds: int, value: Any) -> bool:
        return bool(self.set(key, value, ex=seconds))

    @command("incrby", "incr")
    def incrby(self, key: str, amount: int = 1) -> int:
        current = self._lookup("incrby", key, str)
        try:
            number = int(current or 0) + int(amount)
        except ValueError as exc:
            raise BackendCommandError("ERR value is not an integer or out of range", cause=exc).with_context(
                command="incrby", key=key
            )
        self._store[key] = str(number)
        return number

    @command("decrby", "decr")
    def decrby(self, key: str, amount: int = 1) -> int:
        return self.incrby(key, -int(amount))

    # ── Hashes ──────────────────────────────────────────────────

    @command("hset")
    def hset(
        self,
        name: str,
        key: str | None = None,
        value: Any = None,
        mapping: dict[str, Any] | None = None,
    ) -> int:
        items = dict(mapping or {})
        if key is not None:
            items[key] = value
        if not items:
            raise BackendCommandError("ERR wrong number of arguments for 'hset' command")
        current = self._lookup("hset", name, dict)
        if current is None:
            current = self._store[name] = {}
        added = sum(1 for field in items if field not in current)
        current.update({_to_str(k): _to_str(v) for k, v in items.items()})
        return added

    @command("hget")
    def hget(self, name: str, key: str) -> str | None:
        current = self._lookup("hget", name, dict)
        return None if current is None else current.get(key)

    @command("hgetall")
    def hgetall(self, name: str) -> dict[str, str]:
        return dict(self._lookup("hgetall", name, dict) or {})

    @command("hdel")
    def hdel(self, name: str, *keys: str) -> int:
        current = self._lookup("hdel", name, dict)
        if current is None:
            return 0
        removed = sum(1 for key in keys if current.pop(key, None) is not None)
        if not current:
            self._remove(name)
        return removed

    # ── Lists ───────────────────────────────────────────────────

    def _list_for_write(self, cmd: str, name: str) -> list[str]:
        current = self._lookup(cmd, name, list)
        if current is None:
            current = self._store[name] = []
        return current

    @command("lpush")
    def lpush(self, name: str, *values: Any) -> int:
        current = self._list_for_write("lpush", name)
        for value in values:
            current.insert(0, _to_str(value))
        return len(current)

    @command("rpush")
    def rpush(self, name: str, *values: Any) -> int:
        current = self._list_for_write("rpush", name)
        current.extend(_to_str(v) for v in values)
        return len(current)

    @command("lrange")
    def lrange(self, name: str, start: int, end: int) -> list[str]:
        current = self._lookup("lrange", name, list) or []
        size = len(current)
        start, end = int(start), int(end)
        if start < 0:
            start = max(size + start, 0)
        if end < 0:
            end = size + end
        if end < start:
            return []
        # Redis ranges are inclusive on both ends
        return current[start : end + 1]

    @command("llen")
    def llen(self, name: str) -> int:
        return len(self._lookup("llen", name, list) or [])

    # ── Sets ────────────────────────────────────────────────────

    @command("sadd")
    def sadd(self, name: str, *values: Any) -> int:
        current = self._lookup("sadd", name, set)
        if current is None:
            current = self._store[name] = set()
        before = len(current)
        current.update(_to_str(v) for v in values)
        return len(current) - before

    @command("smembers")
    def smembers(self, name: str) -> set[str]:
        return set(self._lookup("smembers", name, set) or set())

    @command("srem")
    def srem(self, name: str, *values: Any) -> int:
        current = self._lookup("srem", name, set)
        if current is None:
            return 0
        before = len(current)
        current.difference_update(_to_str(v) for v in values)
        removed = before - len(current)
        if not current:
            self._remove(name)
        return removed

    # ── Transactions ────────────────────────────────────────────

    def transactional(self, operation: Callable[[Any], Any]) -> Any:
        """
        Run ``operation(self)``; restore the keyspace if it raises.
        """
        store = copy.deepcopy(self._store)
        expires = dict(self._expires)
        try:
            return operation(self)
        except Exception:
            self._store = store
            self._expires = expires
            logger.debug("memory.transaction_rolled_back")
            raise
