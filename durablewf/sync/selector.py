"""Waiting on whichever of several futures or channels becomes ready first."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

from durablewf.sync.channel import Channel
from durablewf.sync.context import Context
from durablewf.sync.coroutine import get_co_state
from durablewf.sync.future import Future


class SelectCase(ABC):
    """One alternative of a ``select``."""

    @abstractmethod
    def ready(self) -> bool:
        """Whether this case can be handled without blocking."""

    @abstractmethod
    def handle(self, ctx: Context) -> None:
        """Run the case's handler."""


class _FutureCase(SelectCase):
    def __init__(self, future: Future, handler: Callable[[Context, Future], None]) -> None:
        self._future = future
        self._handler = handler

    def ready(self) -> bool:
        return self._future.ready()

    def handle(self, ctx: Context) -> None:
        self._handler(ctx, self._future)


class _ChannelCase(SelectCase):
    def __init__(self, channel: Channel, handler: Callable[[Context, Channel], None]) -> None:
        self._channel = channel
        self._handler = handler

    def ready(self) -> bool:
        return self._channel.can_receive()

    def handle(self, ctx: Context) -> None:
        self._handler(ctx, self._channel)


class _DefaultCase(SelectCase):
    def __init__(self, handler: Callable[[Context], None]) -> None:
        self._handler = handler

    def ready(self) -> bool:
        return True

    def handle(self, ctx: Context) -> None:
        self._handler(ctx)


def await_future(future: Future, handler: Callable[[Context, Future], None]) -> SelectCase:
    """A case that fires once ``future`` has been set."""
    return _FutureCase(future, handler)


def receive(channel: Channel, handler: Callable[[Context, Channel], None]) -> SelectCase:
    """A case that fires once ``channel`` can be received from."""
    return _ChannelCase(channel, handler)


def default(handler: Callable[[Context], None]) -> SelectCase:
    """A case that is always ready; used when no other case is."""
    return _DefaultCase(handler)


def select(ctx: Context, *args: SelectCase) -> None:
    """Handle the first ready case in order, yielding until one is ready."""
    co = get_co_state(ctx)
    while True:
        for case in args:
            if case.ready():
                case.handle(ctx)
                return
        co.yield_()