"""Concurrency limiter for profile extraction.

A pure admission gate: at most ``limit`` scheduled coroutines run at once
across every caller sharing the limiter. Excess calls wait on an
asyncio.Semaphore, which wakes waiters in the order they started waiting, so
pending work is admitted first-in first-out as slots free up.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

T = TypeVar("T")


class ConcurrencyLimiter:
    """Cap the number of concurrently executing coroutines.

    Example::

        limiter = ConcurrencyLimiter(50)
        results = await asyncio.gather(
            *(limiter.schedule(extractor.extract, link) for link in links)
        )
    """

    def __init__(self, limit: int) -> None:
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")
        self.limit = limit
        self._semaphore = asyncio.Semaphore(limit)
        self._active = 0
        self._peak = 0

    @property
    def active(self) -> int:
        """Number of scheduled coroutines currently running."""
        return self._active

    @property
    def peak(self) -> int:
        """Highest number of coroutines that ever ran at once."""
        return self._peak

    async def schedule(
        self, fn: Callable[..., Awaitable[T]], *args: Any
    ) -> T:
        """Run ``await fn(*args)`` once a slot is free and return its result."""
        async with self._semaphore:
            self._active += 1
            self._peak = max(self._peak, self._active)
            try:
                return await fn(*args)
            finally:
                self._active -= 1
