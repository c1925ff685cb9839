"""Helpers for callables."""

from __future__ import annotations

import functools
from typing import Any


def function_name(fn: Any) -> str:
    """Return the short name of a function or bound method."""
    while isinstance(fn, functools.partial):
        fn = fn.func
    name = getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None)
    if not isinstance(name, str):
        raise TypeError(f"{fn!r} has no function name")
    return name.rsplit(".", 1)[-1]