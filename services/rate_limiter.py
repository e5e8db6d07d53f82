"""
services/rate_limiter.py

Responsibility: Paces outbound provider calls to at most N per second.
Does NOT: make HTTP calls or know which operation is being paced.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Token pacer shared by every call a Reconciler makes.

    Each acquisition is scheduled 1/N seconds after the previous one, so idle
    time never accumulates into a burst. All accounting happens under one
    asyncio.Lock: concurrent tasks share a single N-per-second ceiling.

    Collaborators:
        - clock: monotonic time source (injectable for tests)
        - sleep: coroutine used to wait (injectable for tests)
    """

    def __init__(
        self,
        requests_per_second: int = 5,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialises the limiter.

        Args:
            requests_per_second: Positive ceiling on acquisitions per second.
            clock: Returns the current time in seconds.
            sleep: Awaitable delay function.

        Raises:
            ValueError: If requests_per_second is below 1.
        """
        if requests_per_second < 1:
            raise ValueError(f"requests_per_second must be >= 1, got {requests_per_second}")

        self.requests_per_second = requests_per_second
        self._interval = 1.0 / requests_per_second
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._next_slot: float | None = None

    async def acquire(self) -> None:
        """
        Waits until the caller may make one outbound call.

        Never fails; it only delays. Waiters are served one at a time in the
        order they obtain the lock.

        Returns:
            None
        """
        async with self._lock:
            now = self._clock()
            if self._next_slot is not None and now < self._next_slot:
                delay = self._next_slot - now
                logger.debug("Rate limit reached, waiting %.3fs", delay)
                await self._sleep(delay)
                now = max(self._clock(), self._next_slot)
            self._next_slot = now + self._interval
