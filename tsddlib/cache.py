"""String key/value caches held in memory or in Redis."""

from __future__ import annotations

import threading
from datetime import timedelta
from typing import Any

import redis


def _to_milliseconds(expire: timedelta | float | int) -> int:
    if isinstance(expire, timedelta):
        return int(expire.total_seconds() * 1000)
    return int(expire * 1000)


class MemoryCache:
    """Thread-safe in-process cache; expiry times are accepted but not enforced."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}
        self._lock = threading.Lock()

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def set_and_expire(self, key: str, value: str, expire: timedelta | float) -> None:
        with self._lock:
            self._data[key] = value

    def get(self, key: str) -> str:
        """Value for key, or an empty string when absent."""
        with self._lock:
            return self._data.get(key, "")

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


class RedisCache:
    """Cache backed by a Redis server at ``host:port``."""

    def __init__(self, addr: str, password: str = "", *, client: Any = None) -> None:
        if client is None:
            host, _, port = addr.rpartition(":")
            if not host:
                host, port = addr, "6379"
            client = redis.Redis(
                host=host,
                port=int(port),
                password=password or None,
                decode_responses=True,
            )
        self.conn = client

    def set(self, key: str, value: str) -> None:
        self.conn.set(key, value)

    def set_and_expire(self, key: str, value: str, expire: timedelta | float) -> None:
        """Store a value that expires after ``expire`` (timedelta or seconds)."""
        self.conn.set(key, value, px=_to_milliseconds(expire))

    def get(self, key: str) -> str:
        """Value for key, or an empty string when absent."""
        value = self.conn.get(key)
        if value is None:
            return ""
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return str(value)

    def delete(self, key: str) -> None:
        self.conn.delete(key)