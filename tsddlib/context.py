"""Application context: shared values, caches, listeners and scheduled work."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable

from tsddlib.cache import MemoryCache
from tsddlib.messages import MessageResp

__all__ = ["OnlineStatus", "AppContext"]


@dataclass
class OnlineStatus:
    """A user's online state on one kind of device."""

    uid: str = ""
    device_flag: int = 0
    online: bool = False
    socket_id: int = 0
    online_count: int = 0
    total_online_count: int = 0


OnlineStatusListener = Callable[[list[OnlineStatus]], None]
EventCommit = Callable[[Exception | None], None]
EventListener = Callable[[bytes, EventCommit], None]
MessagesListener = Callable[[list[MessageResp]], None]


class _ScheduledTask:
    """Runs a function every ``interval`` seconds until stopped."""

    def __init__(self, interval: float, func: Callable[[], Any]) -> None:
        self._interval = interval
        self._func = func
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            self._func()

    @property
    def active(self) -> bool:
        return self._thread.is_alive()

    def stop(self) -> None:
        self._stop.set()
        if threading.current_thread() is not self._thread:
            self._thread.join()


class AppContext:
    """Holds what the parts of the application share."""

    def __init__(self, im_client: Any = None, seq_generator: Any = None) -> None:
        self.im_client = im_client
        self.seq_generator = seq_generator
        self._values: dict[str, Any] = {}
        self._values_lock = threading.Lock()
        self._memory_cache: MemoryCache | None = None
        self._online_status_listeners: list[OnlineStatusListener] = []
        self._event_listeners: dict[str, list[EventListener]] = {}
        self._messages_listeners: list[MessagesListener] = []
        self._tasks: list[_ScheduledTask] = []
        self._tasks_lock = threading.Lock()

    def set_value(self, value: Any, key: str) -> None:
        """Store ``value`` under ``key``."""
        with self._values_lock:
            self._values[key] = value

    def value(self, key: str) -> Any:
        """The value stored under ``key``, or None."""
        with self._values_lock:
            return self._values.get(key)

    def memory_cache(self) -> MemoryCache:
        """The context's in-memory cache, created on first use."""
        if self._memory_cache is None:
            self._memory_cache = MemoryCache()
        return self._memory_cache

    def add_online_status_listener(self, listener: OnlineStatusListener) -> None:
        self._online_status_listeners.append(listener)

    def get_all_online_status_listeners(self) -> list[OnlineStatusListener]:
        return list(self._online_status_listeners)

    def add_event_listener(self, event: str, listener: EventListener) -> None:
        self._event_listeners.setdefault(event, []).append(listener)

    def get_event_listeners(self, event: str) -> list[EventListener]:
        return list(self._event_listeners.get(event, []))

    def add_messages_listener(self, listener: MessagesListener) -> None:
        self._messages_listeners.append(listener)

    def notify_messages_listeners(self, messages: list[MessageResp]) -> None:
        """Hand ``messages`` to every messages listener in order."""
        for listener in self._messages_listeners:
            listener(messages)

    def schedule(self, interval: float | timedelta, func: Callable[[], Any]) -> _ScheduledTask:
        """Run ``func`` every ``interval`` (seconds or timedelta); return a stoppable task."""
        seconds = interval.total_seconds() if isinstance(interval, timedelta) else float(interval)
        if seconds <= 0:
            raise ValueError("interval must be positive")
        task = _ScheduledTask(seconds, func)
        with self._tasks_lock:
            self._tasks.append(task)
        return task

    def close(self) -> None:
        """Stop all scheduled work."""
        with self._tasks_lock:
            tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.stop()

    def __enter__(self) -> AppContext:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()