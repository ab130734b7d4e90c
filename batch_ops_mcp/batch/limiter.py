"""Concurrency limiter shared by every group of a batch run."""

import asyncio
from collections.abc import Awaitable
from collections.abc import Callable
from typing import Any
from typing import TypeVar

T = TypeVar("T")


class ConcurrencyLimiter:
    """Counting semaphore that caps in-flight work at ``capacity``.

    Submissions beyond the capacity wait in FIFO order and start as soon as a
    slot frees. The counters are only touched between await points, so they
    are consistent on a single event loop.
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"Limiter capacity must be a positive integer, got {capacity}")
        self._capacity = capacity
        self._semaphore = asyncio.Semaphore(capacity)
        self._active = 0
        self._pending = 0
        self._peak = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def active(self) -> int:
        """Units of work currently holding a slot."""
        return self._active

    @property
    def pending(self) -> int:
        """Submissions waiting for a slot."""
        return self._pending

    @property
    def peak(self) -> int:
        """Highest number of concurrently active units seen so far."""
        return self._peak

    async def run(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Run ``func(*args, **kwargs)`` once a slot is available."""
        self._pending += 1
        try:
            await self._semaphore.acquire()
        finally:
            self._pending -= 1

        self._active += 1
        self._peak = max(self._peak, self._active)
        try:
            return await func(*args, **kwargs)
        finally:
            self._active -= 1
            self._semaphore.release()
