"""Deterministic contexts carrying values and cancellation across coroutines."""

from __future__ import annotations

from typing import Any, Optional


class ContextCanceledError(Exception):
    """Raised or reported when a context has been canceled."""

    def __init__(self, message: str = "context canceled") -> None:
        super().__init__(message)


class Context:
    """Carries a done channel, a cancellation error and request-scoped values.

    The base context is never canceled and holds no values.
    """

    def done(self) -> Optional[Any]:
        """Channel that is closed once the context is canceled, or None."""
        return None

    def err(self) -> Optional[BaseException]:
        """The reason the context was canceled, or None while it is live."""
        return None

    def value(self, key: Any) -> Any:
        """The value stored for ``key`` in this context or its ancestors."""
        return None


class _BackgroundContext(Context):
    def __repr__(self) -> str:
        return "context.Background"


class _ValueContext(Context):
    def __init__(self, parent: Context, key: Any, value: Any) -> None:
        self._parent = parent
        self._key = key
        self._value = value

    def done(self) -> Optional[Any]:
        return self._parent.done()

    def err(self) -> Optional[BaseException]:
        return self._parent.err()

    def value(self, key: Any) -> Any:
        if self._key == key:
            return self._value
        return self._parent.value(key)

    def __repr__(self) -> str:
        return f"{self._parent!r}.WithValue({self._key!r}, {self._value!r})"


_BACKGROUND = _BackgroundContext()


def background() -> Context:
    """The empty root context: never canceled, no values."""
    return _BACKGROUND


def with_value(parent: Context, key: Any, value: Any) -> Context:
    """Return a child of ``parent`` in which ``key`` maps to ``value``."""
    if parent is None:
        raise TypeError("cannot create context from nil parent")
    if key is None:
        raise TypeError("nil key")
    try:
        hash(key)
    except TypeError:
        raise TypeError("key is not comparable") from None
    return _ValueContext(parent, key, value)