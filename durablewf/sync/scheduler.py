"""Running a set of coroutines until all of them are blocked."""

from __future__ import annotations

from typing import Any, Callable

from durablewf.sync.context import Context
from durablewf.sync.coroutine import Coroutine, get_co_state, new_coroutine


class Scheduler:
    """Tracks coroutines and runs them one at a time."""

    def __init__(self) -> None:
        self._coroutines: list[Coroutine] = []

    def new_coroutine(self, ctx: Context, fn: Callable[[Context], Any]) -> None:
        """Start tracking a new coroutine running ``fn``."""
        co = new_coroutine(ctx, fn)
        self._coroutines.append(co)
        co.set_scheduler(self)

    def execute(self, ctx: Context) -> None:
        """Run all coroutines until each one is blocked without progress.

        Finished coroutines are dropped; the first error raised by one is re-raised.
        """
        all_blocked = False
        while not all_blocked:
            all_blocked = True
            # The list may grow while it is traversed, as coroutines start others.
            index = 0
            while index < len(self._coroutines):
                co = self._coroutines[index]
                co.execute()
                if co.finished():
                    all_blocked = False
                    del self._coroutines[index]
                    error = co.error()
                    if error is not None:
                        raise error
                    continue
                all_blocked = all_blocked and not co.progress()
                index += 1

    def running_coroutines(self) -> int:
        return len(self._coroutines)

    def exit(self, ctx: Context) -> None:
        """Stop every blocked coroutine from continuing."""
        for co in list(self._coroutines):
            co.exit()


def go(ctx: Context, fn: Callable[[Context], Any]) -> None:
    """Start ``fn`` as a new coroutine on the scheduler running ``ctx``."""
    state = get_co_state(ctx)
    scheduler = state.scheduler
    if scheduler is None:
        raise RuntimeError("coroutine is not managed by a scheduler")

    def run(inner: Context) -> None:
        fn(inner)

    scheduler.new_coroutine(ctx, run)