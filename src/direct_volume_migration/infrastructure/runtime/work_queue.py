"""Deduplicating reconcile work queue with per-key serialization."""

from __future__ import annotations

import asyncio
from collections import deque

_DEFAULT_BACKOFF_BASE_SECONDS = 0.5
_DEFAULT_BACKOFF_MAX_SECONDS = 300.0


class ReconcileWorkQueue:
    """Queue of object keys awaiting reconciliation.

    A key is handed to at most one worker at a time. Adding a key that is
    being processed marks it dirty; it is queued again when the worker calls
    :meth:`done`.
    """

    def __init__(
        self,
        backoff_base_seconds: float = _DEFAULT_BACKOFF_BASE_SECONDS,
        backoff_max_seconds: float = _DEFAULT_BACKOFF_MAX_SECONDS,
    ) -> None:
        self._backoff_base_seconds = max(backoff_base_seconds, 0.001)
        self._backoff_max_seconds = max(backoff_max_seconds, self._backoff_base_seconds)
        self._queue: deque[str] = deque()
        self._dirty: set[str] = set()
        self._processing: set[str] = set()
        self._failures: dict[str, int] = {}
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._available = asyncio.Event()
        self._shutting_down = False

    def __len__(self) -> int:
        return len(self._queue)

    @property
    def shutting_down(self) -> bool:
        return self._shutting_down

    def add(self, key: str) -> None:
        """Queue a key unless it is already waiting."""

        if self._shutting_down or key in self._dirty:
            return
        self._dirty.add(key)
        if key in self._processing:
            return
        self._queue.append(key)
        self._available.set()

    def add_after(self, key: str, delay_seconds: float) -> None:
        """Queue a key after a delay, keeping only the earliest pending timer."""

        if self._shutting_down:
            return
        if delay_seconds <= 0:
            self.add(key)
            return

        loop = asyncio.get_running_loop()
        due = loop.time() + delay_seconds
        existing = self._timers.get(key)
        if existing is not None and not existing.cancelled():
            if existing.when() <= due:
                return
            existing.cancel()
        self._timers[key] = loop.call_at(due, self._fire_timer, key)

    async def get(self) -> str | None:
        """Wait for the next key. Returns None once the queue shuts down."""

        while True:
            if self._queue:
                key = self._queue.popleft()
                self._dirty.discard(key)
                self._processing.add(key)
                return key
            if self._shutting_down:
                return None
            self._available.clear()
            await self._available.wait()

    def done(self, key: str) -> None:
        """Mark processing of a key finished."""

        self._processing.discard(key)
        if key in self._dirty and not self._shutting_down:
            self._queue.append(key)
            self._available.set()

    def backoff(self, key: str) -> float:
        """Record a failure for the key and return the next retry delay."""

        failures = self._failures.get(key, 0) + 1
        self._failures[key] = failures
        delay = self._backoff_base_seconds * (2 ** (failures - 1))
        return min(delay, self._backoff_max_seconds)

    def failures(self, key: str) -> int:
        return self._failures.get(key, 0)

    def forget(self, key: str) -> None:
        """Reset the failure counter for a key."""

        self._failures.pop(key, None)

    def shutdown(self) -> None:
        """Stop handing out keys and cancel pending timers."""

        self._shutting_down = True
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._queue.clear()
        self._dirty.clear()
        self._available.set()

    def reopen(self) -> None:
        """Accept keys again after a shutdown."""

        if not self._shutting_down:
            return
        self._shutting_down = False
        self._processing.clear()
        self._failures.clear()
        self._available = asyncio.Event()

    def _fire_timer(self, key: str) -> None:
        self._timers.pop(key, None)
        self.add(key)


__all__ = ["ReconcileWorkQueue"]
