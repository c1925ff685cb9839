"""Contexts that can be canceled, cascading to their children."""

from __future__ import annotations

from typing import Any, Callable, Optional

from durablewf.sync.channel import Channel, new_channel
from durablewf.sync.context import Context, ContextCanceledError

_CANCEL_CTX_KEY = object()

_CLOSED_CHANNEL = new_channel()
_CLOSED_CHANNEL.close()


class CancelContext(Context):
    """A context whose done channel is closed when it is canceled.

    Canceling it also cancels every child derived from it with ``with_cancel``.
    """

    def __init__(self, parent: Context, done: Optional[Channel] = None) -> None:
        self._parent = parent
        self._done = done
        self._children: Optional[dict[CancelContext, None]] = None
        self._err: Optional[BaseException] = None

    def done(self) -> Optional[Channel]:
        return self._done

    def err(self) -> Optional[BaseException]:
        return self._err

    def value(self, key: Any) -> Any:
        if key is _CANCEL_CTX_KEY:
            return self
        return self._parent.value(key)

    def cancel(self, remove_from_parent: bool, error: Optional[BaseException]) -> None:
        """Close the done channel, cancel the children and record ``error``."""
        if error is None:
            raise ValueError("context: internal error: missing cancel error")
        if self._err is not None:
            return
        self._err = error
        if self._done is None:
            self._done = _CLOSED_CHANNEL
        else:
            self._done.close()
        children = self._children or {}
        self._children = None
        for child in children:
            child.cancel(False, error)

        if remove_from_parent:
            _remove_child(self._parent, self)

    def _add_child(self, child: CancelContext) -> None:
        if self._children is None:
            self._children = {}
        self._children[child] = None

    def _remove_child(self, child: CancelContext) -> None:
        if self._children is not None:
            self._children.pop(child, None)

    def __repr__(self) -> str:
        return f"{self._parent!r}.WithCancel"


def _parent_cancel_ctx(parent: Context) -> Optional[CancelContext]:
    """The innermost cancel context of ``parent`` that owns its done channel."""
    done = parent.done()
    if done is None or done is _CLOSED_CHANNEL:
        return None
    owner = parent.value(_CANCEL_CTX_KEY)
    if not isinstance(owner, CancelContext):
        return None
    if owner._done is not done:
        return None
    return owner


def _remove_child(parent: Context, child: CancelContext) -> None:
    owner = _parent_cancel_ctx(parent)
    if owner is not None:
        owner._remove_child(child)


def _propagate_cancel(parent: Context, child: CancelContext) -> None:
    done = parent.done()
    if done is None:
        return  # parent can never be canceled

    if done.can_receive():
        # Parent is already canceled.
        child.cancel(False, parent.err())

    owner = _parent_cancel_ctx(parent)
    if owner is None:
        raise TypeError("contexts with their own done channel are not supported as parents")
    if owner._err is not None:
        child.cancel(False, owner._err)
    else:
        owner._add_child(child)


def with_cancel(parent: Context) -> tuple[CancelContext, Callable[[], None]]:
    """Return a cancelable child of ``parent`` and the function that cancels it."""
    if parent is None:
        raise TypeError("cannot create context from nil parent")
    ctx = CancelContext(parent, new_channel())
    _propagate_cancel(parent, ctx)

    def cancel() -> None:
        ctx.cancel(True, ContextCanceledError())

    return ctx, cancel


def new_disconnected_context(ctx: Context) -> CancelContext:
    """A cancelable context with ``ctx``'s values that ignores its cancellation."""
    return CancelContext(ctx, new_channel())