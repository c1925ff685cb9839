"""A single-assignment value that coroutines can wait on."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from durablewf import converter as _conversion
from durablewf.sync import coroutine as _coroutine

if TYPE_CHECKING:
    from durablewf.sync.context import Context


class Future:
    """Holds a value or error set once; ``get`` blocks the coroutine until then."""

    def __init__(self, converter: _conversion.Converter = _conversion.DEFAULT_CONVERTER) -> None:
        self._converter = converter
        self._has_value = False
        self._value: Any = None
        self._error: Optional[BaseException] = None

    def set(self, value: Any, error: Optional[BaseException] = None) -> None:
        """Store the result and unblock waiting coroutines."""
        if self._has_value:
            raise RuntimeError("future already set")
        self._value, self._error = value, error
        self._has_value = True

    def get(self, ctx: Context, target_type: Any = None) -> Any:
        """Return the value, yielding until it is set; raise the stored error."""
        state = _coroutine.get_co_state(ctx)
        while not self._has_value:
            state.yield_()
        state.made_progress()
        if self._error is not None:
            raise self._error
        return _conversion.assign_value(self._converter, self._value, target_type)

    def ready(self) -> bool:
        return self._has_value