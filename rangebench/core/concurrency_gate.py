"""
Concurrency Gate

Bounds the number of logical queries with an in-flight attempt.
"""

import asyncio
from types import TracebackType
from typing import Optional, Type


class ConcurrencyGate:
    """
    Counting gate with capacity ``parallelism``.

    ``enter`` suspends while all permits are held; ``exit`` releases one and
    wakes a single waiter. The in-flight counters are read-only diagnostics.
    """

    def __init__(self, parallelism: int):
        if parallelism < 1:
            raise ValueError("parallelism must be >= 1")
        self.capacity = int(parallelism)
        self._semaphore = asyncio.Semaphore(self.capacity)
        self._in_flight = 0
        self._peak_in_flight = 0

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def peak_in_flight(self) -> int:
        return self._peak_in_flight

    async def enter(self) -> None:
        await self._semaphore.acquire()
        self._in_flight += 1
        if self._in_flight > self._peak_in_flight:
            self._peak_in_flight = self._in_flight

    def exit(self) -> None:
        if self._in_flight <= 0:
            raise RuntimeError("ConcurrencyGate.exit() called without enter()")
        self._in_flight -= 1
        self._semaphore.release()

    async def __aenter__(self) -> "ConcurrencyGate":
        await self.enter()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.exit()
