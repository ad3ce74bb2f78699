"""
FIFO-fair counting semaphore for bounded parallelism.

Hey future me - this caps how many artist image downloads run at once during a bulk refresh
(N=3 library-wide). asyncio.Semaphore would mostly do, but it does NOT promise strict FIFO
handoff - a task calling acquire() right after release() can barge past long-waiting ones.
Here release() hands the permit DIRECTLY to the oldest waiter, so nobody starves.

CANCELLATION:
- Cancelled while queued → removed from the queue, no permit consumed
- Cancelled after the permit was handed over but before resuming → permit passed on

USAGE:
    limiter = ConcurrencyLimiter(3)
    async with limiter:
        data = await fetcher.fetch(url)
"""

import asyncio
from collections import deque
from types import TracebackType


class ConcurrencyLimiter:
    """Counting semaphore with FIFO admission."""

    def __init__(self, permits: int) -> None:
        if permits < 1:
            raise ValueError(f"permits must be >= 1, got {permits}")
        self._capacity = permits
        self._available = permits
        self._waiters: deque[asyncio.Future[None]] = deque()

    @property
    def capacity(self) -> int:
        """Total number of permits."""
        return self._capacity

    @property
    def available(self) -> int:
        """Permits free right now."""
        return self._available

    @property
    def waiting(self) -> int:
        """Number of callers queued for a permit."""
        return sum(1 for waiter in self._waiters if not waiter.done())

    async def acquire(self) -> None:
        """Take a permit, suspending in FIFO order if none is free."""
        if self._available > 0 and not self._waiters:
            self._available -= 1
            return

        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # release() already handed us the permit - pass it along.
                self.release()
            elif waiter in self._waiters:
                self._waiters.remove(waiter)
            raise

    def release(self) -> None:
        """Return a permit, waking the longest-waiting caller first."""
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)
                return
        if self._available >= self._capacity:
            raise ValueError("ConcurrencyLimiter released too many times")
        self._available += 1

    async def __aenter__(self) -> "ConcurrencyLimiter":
        await self.acquire()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()
