"""Channels for passing values between coroutines."""

from __future__ import annotations

from collections import deque
from typing import Any, Callable

from durablewf.converter import DEFAULT_CONVERTER, Converter, assign_value
from durablewf.sync.context import Context
from durablewf.sync.coroutine import get_co_state


class ChannelClosedError(RuntimeError):
    """Raised when sending on a closed channel."""


class Channel:
    """A channel with an optional buffer, used from within coroutines.

    Blocking operations yield the current coroutine until they can complete.
    """

    def __init__(self, size: int = 0, converter: Converter = DEFAULT_CONVERTER) -> None:
        self._buffer: deque[Any] = deque()
        self._receivers: deque[Callable[[Any], None]] = deque()
        self._senders: deque[Callable[[], Any]] = deque()
        self._closed = False
        self._size = size
        self._converter = converter

    def close(self) -> None:
        """Close the channel and release every waiting receiver."""
        self._closed = True
        if self._senders:
            raise ChannelClosedError("send on closed channel")
        while self._receivers:
            self._receivers.popleft()(None)

    def closed(self) -> bool:
        return self._closed

    def send(self, ctx: Context, value: Any) -> None:
        """Send a value, yielding until a receiver or buffer slot takes it."""
        co = get_co_state(ctx)
        taken: list[bool] = []

        def take() -> Any:
            taken.append(True)
            return value

        registered = False
        while True:
            if self._try_send(value):
                if registered:
                    self._discard(self._senders, take)
                co.made_progress()
                return
            if not registered:
                self._senders.append(take)
                registered = True
            co.yield_()
            if taken:
                co.made_progress()
                return

    def send_nonblocking(self, ctx: Context, value: Any) -> bool:
        """Send only if it can happen right away; return whether it did."""
        return self._try_send(value)

    def receive(self, ctx: Context, target_type: Any = None) -> tuple[Any, bool]:
        """Receive a value, yielding until one is available.

        Returns the value and whether the channel is still open.
        """
        co = get_co_state(ctx)
        delivered: list[Any] = []

        registered = False
        while True:
            ok, value = self._try_receive()
            if ok:
                if registered:
                    self._discard(self._receivers, delivered.append)
                co.made_progress()
                return self._assign(value, target_type), not self._closed
            if not registered:
                self._receivers.append(delivered.append)
                registered = True
            co.yield_()
            if delivered:
                co.made_progress()
                return self._assign(delivered[0], target_type), not self._closed

    def receive_nonblocking(self, ctx: Context, target_type: Any = None) -> tuple[Any, bool]:
        """Receive only if a value is ready; return it and whether one was taken."""
        ok, value = self._try_receive()
        if not ok:
            return None, False
        return self._assign(value, target_type), True

    def receive_or_register(self, ctx: Context, callback: Callable[[Any], None]) -> bool:
        """Pass a ready value to ``callback`` now, or register it for the next send."""
        ok, value = self._try_receive()
        if ok:
            callback(value)
            return True
        self.add_receive_callback(callback)
        return False

    def add_receive_callback(self, callback: Callable[[Any], None]) -> None:
        self._receivers.append(callback)

    def can_receive(self) -> bool:
        """Whether a receive would complete without blocking."""
        return bool(self._buffer) or bool(self._senders) or self._closed

    def _assign(self, value: Any, target_type: Any) -> Any:
        return assign_value(self._converter, value, target_type)

    @staticmethod
    def _discard(queue: deque, item: Any) -> None:
        try:
            queue.remove(item)
        except ValueError:
            pass

    def _try_send(self, value: Any) -> bool:
        if self._closed:
            raise ChannelClosedError("channel closed")
        if self._receivers:
            self._receivers.popleft()(value)
            return True
        if len(self._buffer) < self._size:
            self._buffer.append(value)
            return True
        return False

    def _try_receive(self) -> tuple[bool, Any]:
        if self._buffer:
            return True, self._buffer.popleft()
        if self._closed:
            return True, None
        if self._senders:
            return True, self._senders.popleft()()
        return False, None


def new_channel() -> Channel:
    """An unbuffered channel."""
    return Channel()


def new_buffered_channel(size: int) -> Channel:
    """A channel that holds up to ``size`` values without a receiver."""
    return Channel(size)