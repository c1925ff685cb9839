"""Backend tuning options."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable


@dataclass(frozen=True)
class Options:
    sticky_timeout: timedelta = timedelta(seconds=30)
    workflow_lock_timeout: timedelta = timedelta(minutes=1)
    activity_lock_timeout: timedelta = timedelta(minutes=2)


DEFAULT_OPTIONS = Options()

BackendOption = Callable[[Options], Options]


def with_sticky_timeout(timeout: timedelta) -> BackendOption:
    def apply(options: Options) -> Options:
        return dataclasses.replace(options, sticky_timeout=timeout)

    return apply


def apply_options(*args: BackendOption) -> Options:
    """Start from the defaults and apply each option in order."""
    options = DEFAULT_OPTIONS
    for option in args:
        options = option(options)
    return options