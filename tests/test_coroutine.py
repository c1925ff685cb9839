import time

import pytest

from durablewf.sync.context import background
from durablewf.sync.coroutine import (
    CoroutineTimeoutError,
    get_co_state,
    new_coroutine,
)

BLOCKED = (True, False)
DONE = (False, True)


def status(c):
    return c.blocked(), c.finished()


def yielder(marks, count):
    """A body that yields ``count`` times, recording each resumption."""

    def fn(ctx):
        s = get_co_state(ctx)
        for i in range(count):
            s.yield_()
            marks.append(i)

    return fn


def test_can_access_state():
    seen = []
    c = new_coroutine(background(), lambda ctx: seen.append(get_co_state(ctx)))
    c.execute()
    assert seen == [c]


def test_get_co_state_outside_coroutine_raises():
    with pytest.raises(RuntimeError, match="could not find coroutine state"):
        get_co_state(background())


@pytest.mark.parametrize("runs", [1, 2])
def test_finished_body_stays_finished(runs):
    c = new_coroutine(background(), lambda ctx: None)
    for _ in range(runs):
        c.execute()
    assert c.finished()


@pytest.mark.parametrize(
    "count, runs, expected_status, expected_marks",
    [
        (1, 1, BLOCKED, []),
        (1, 2, DONE, [0]),
        (2, 2, BLOCKED, [0]),
    ],
)
def test_yield_and_continue(count, runs, expected_status, expected_marks):
    marks = []
    c = new_coroutine(background(), yielder(marks, count))
    for _ in range(runs):
        c.execute()
    assert status(c) == expected_status
    assert marks == expected_marks


@pytest.mark.parametrize("run_first", [False, True])
def test_exit(run_first):
    marks = []
    c = new_coroutine(background(), yielder(marks, 1))
    if run_first:
        c.execute()
    c.exit()
    assert c.finished()
    assert marks == []
    assert c.error() is None


def test_exit_if_already_finished():
    c = new_coroutine(background(), lambda ctx: None)
    c.exit()
    assert c.finished()


def test_raises_when_deadlocked():
    def fn(ctx):
        s = get_co_state(ctx)
        s.deadlock_detection = 0.01
        s.yield_()
        time.sleep(0.3)

    c = new_coroutine(background(), fn)
    c.execute()
    with pytest.raises(CoroutineTimeoutError, match="coroutine timed out"):
        c.execute()


@pytest.mark.parametrize(
    "exc_type, message", [(ValueError, "custom error"), (RuntimeError, "test panic")]
)
def test_error_is_recorded(exc_type, message):
    def fn(ctx):
        raise exc_type(message)

    c = new_coroutine(background(), fn)
    c.execute()
    assert c.finished()
    assert isinstance(c.error(), exc_type)
    assert str(c.error()) == message


def test_progress_is_reset_on_execute():
    def fn(ctx):
        s = get_co_state(ctx)
        s.made_progress()
        s.yield_()
        s.yield_()

    c = new_coroutine(background(), fn)
    c.execute()
    assert c.progress()
    c.execute()
    assert not c.progress()


def test_set_scheduler():
    c = new_coroutine(background(), lambda ctx: None)
    marker = object()
    c.set_scheduler(marker)
    assert c.scheduler is marker