"""
Per-key request coalescing (singleflight).

Hey future me - this stops the "5 playback events for the same song = 5 iTunes lookups" problem!
The first caller for a key starts the operation as a Task. Everyone else who shows up
while it's running just awaits that SAME task. When it settles, the key is dropped so the
next call starts fresh (nothing is cached here - that's the engines' cooldown job).

WHY NO LOCK?
- Everything runs on one event loop. Check-then-insert in submit() has no await
  between them, so no other task can sneak in.

WHY asyncio.shield()?
- If ONE waiter gets cancelled, it must not cancel the shared task under everybody else.

USAGE:
    coalescer: RequestCoalescer[str, Result] = RequestCoalescer("metadata")
    result = await coalescer.submit(item_id, lambda: self._enrich(item_id, reason))
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")


class RequestCoalescer(Generic[K, V]):
    """Share one in-flight operation per key among concurrent callers."""

    def __init__(self, name: str = "default") -> None:
        self._name = name
        self._in_flight: dict[K, asyncio.Task[V]] = {}

    @property
    def in_flight_count(self) -> int:
        """Number of keys with an operation currently running."""
        return len(self._in_flight)

    def is_in_flight(self, key: K) -> bool:
        """Check if an operation is running for `key`."""
        return key in self._in_flight

    async def submit(self, key: K, operation: Callable[[], Awaitable[V]]) -> V:
        """Run `operation` for `key`, or join the one already running.

        All callers for the same in-flight key observe the identical outcome:
        the same value, or the same exception re-raised.

        Args:
            key: Coalescing key (e.g. item id, normalized artist name)
            operation: Zero-arg factory producing the awaitable to run

        Returns:
            The operation's result
        """
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(operation())
            self._in_flight[key] = task
            task.add_done_callback(lambda done, k=key: self._forget(k, done))
        else:
            logger.debug("[%s] Joining in-flight request for %s", self._name, key)
        return await asyncio.shield(task)

    def _forget(self, key: K, task: asyncio.Task[V]) -> None:
        # Only drop the entry if it's still OUR task (a fresh one may have replaced it).
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        # Retrieve the exception so asyncio doesn't log "never retrieved" when all
        # waiters were cancelled before the task failed.
        if not task.cancelled():
            task.exception()
