"""Cooperative coroutines that run one at a time under explicit control."""

from __future__ import annotations

import threading
from typing import Any, Callable, Optional

from durablewf.sync.context import Context, with_value

# Seconds to wait for a coroutine to block again before giving up.
DEADLOCK_DETECTION = 40.0

_CO_STATE_KEY = object()


class CoroutineTimeoutError(RuntimeError):
    """Raised when a coroutine does not block again within the deadline."""


class _CoroutineExit(BaseException):
    """Unwinds a coroutine that was told to exit."""


class Coroutine:
    """A function run step by step: it runs only during ``execute``.

    Each ``execute`` resumes the function until it yields or returns.
    Exceptions raised by the function are kept and exposed by ``error``.
    """

    def __init__(self, ctx: Context, fn: Callable[[Context], Any]) -> None:
        self._blocking = threading.Semaphore(0)
        self._unblock = threading.Semaphore(0)
        self._blocked = False
        self._finished = False
        self._should_exit = False
        self._progress = False
        self._error: Optional[BaseException] = None
        self.deadlock_detection = DEADLOCK_DETECTION
        self.scheduler: Any = None
        self._fn = fn
        self._ctx = with_value(ctx, _CO_STATE_KEY, self)
        self._thread = threading.Thread(target=self._run, name="coroutine", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        try:
            # Wait for the first execute before running any code.
            self._yield(mark_blocking=False)
            self._fn(self._ctx)
        except _CoroutineExit:
            pass
        except BaseException as exc:  # noqa: BLE001 - failures are reported via error()
            self._error = exc
        finally:
            self._finished = True
            self._blocking.release()

    def _yield(self, mark_blocking: bool) -> None:
        self._blocked = True
        if mark_blocking:
            self._blocking.release()
        self._unblock.acquire()
        if self._should_exit:
            raise _CoroutineExit()
        self._blocked = False

    def yield_(self) -> None:
        """Hand control back to whoever called ``execute``."""
        self._yield(mark_blocking=True)

    def execute(self) -> None:
        """Resume the coroutine and wait until it yields or finishes."""
        self.reset_progress()
        if self._finished:
            return
        timeout = self.deadlock_detection
        self._unblock.release()
        if not self._blocking.acquire(timeout=timeout):
            raise CoroutineTimeoutError("coroutine timed out")

    def exit(self) -> None:
        """Stop a blocked coroutine from ever continuing."""
        if self._finished:
            return
        self._should_exit = True
        self.execute()

    def blocked(self) -> bool:
        return self._blocked

    def finished(self) -> bool:
        return self._finished

    def progress(self) -> bool:
        """Whether the coroutine made progress during the last execution."""
        return self._progress

    def made_progress(self) -> None:
        self._progress = True

    def reset_progress(self) -> None:
        self._progress = False

    def error(self) -> Optional[BaseException]:
        """The exception the coroutine's function raised, if any."""
        return self._error

    def set_scheduler(self, scheduler: Any) -> None:
        self.scheduler = scheduler


def new_coroutine(ctx: Context, fn: Callable[[Context], Any]) -> Coroutine:
    """Create a coroutine for ``fn``; it starts running on the first ``execute``."""
    return Coroutine(ctx, fn)


def get_co_state(ctx: Context) -> Coroutine:
    """Return the coroutine that owns ``ctx``."""
    state = ctx.value(_CO_STATE_KEY)
    if not isinstance(state, Coroutine):
        raise RuntimeError("could not find coroutine state")
    return state