"""Waiting for a number of coroutines to finish."""

from __future__ import annotations

from durablewf.sync.context import Context
from durablewf.sync.future import Future


class WaitGroup:
    """Counts outstanding work; ``wait`` blocks until the count returns to zero."""

    def __init__(self) -> None:
        self._count = 0
        self._future = Future()
        self._waiting = False

    def wait(self, ctx: Context) -> None:
        """Yield the current coroutine until the counter drops to zero."""
        self._waiting = True
        self._future.get(ctx)

    def add(self, delta: int) -> None:
        self._count += delta
        if self._count < 0:
            raise ValueError("negative WaitGroup counter")
        if self._waiting and delta > 0 and self._count == delta:
            raise RuntimeError("WaitGroup misuse: Add called concurrently with Wait")
        if self._count > 0 or not self._waiting:
            return
        self._future.set(None)

    def done(self) -> None:
        self.add(-1)