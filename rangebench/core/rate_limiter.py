"""
Rate Limiter

Meters out query start permits at a fixed global rate shared by all workers.

Slot ``i`` is due at ``origin + i / rate`` where ``origin`` is the instant of
the first ``acquire`` call. Every wait is computed against that absolute
schedule, so rounding error does not accumulate over long runs.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Absolute-schedule rate limiter for asyncio tasks.

    Slots are assigned in call order (FIFO) and a caller only ever suspends
    on a sleep until its own slot's due time. A rate of 0/None disables
    limiting entirely.
    """

    def __init__(
        self,
        rate: Optional[float],
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize rate limiter.

        Args:
            rate: Target permits per second (0 or None = unlimited)
            clock: Monotonic clock in seconds
            sleep: Coroutine function used to suspend until a slot is due
        """
        if rate is not None and rate < 0:
            raise ValueError("rate must be >= 0")
        self.rate = float(rate or 0.0)
        self._interval = 1.0 / self.rate if self.rate > 0 else 0.0
        self._clock = clock
        self._sleep = sleep
        self._origin: Optional[float] = None
        self._next_slot = 0

    @property
    def unlimited(self) -> bool:
        return self.rate <= 0

    @property
    def issued(self) -> int:
        """Number of slots handed out since creation or the last reset."""
        return self._next_slot

    @property
    def origin(self) -> Optional[float]:
        return self._origin

    def due_time(self, slot: int) -> Optional[float]:
        """Absolute clock time at which ``slot`` may start (None before first use)."""
        if self._origin is None:
            return None
        return self._origin + slot * self._interval

    def reset(self) -> None:
        """Forget the schedule; the next acquire re-anchors slot 0 at 'now'."""
        self._origin = None
        self._next_slot = 0

    async def acquire(self) -> int:
        """
        Wait for the next slot and return its index.

        Slot assignment happens before the first await, so concurrent callers
        receive slots strictly in the order they called.
        """
        slot = self._next_slot
        self._next_slot += 1

        if self.unlimited:
            return slot

        now = self._clock()
        if self._origin is None:
            self._origin = now
            logger.debug("Rate limiter anchored at %.6f (%.2f/s)", now, self.rate)

        due = self._origin + slot * self._interval
        while True:
            delay = due - now
            if delay <= 0:
                return slot
            await self._sleep(delay)
            now = self._clock()
