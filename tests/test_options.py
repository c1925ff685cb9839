from datetime import timedelta

from durablewf.backend.options import DEFAULT_OPTIONS, Options, apply_options, with_sticky_timeout


def test_defaults():
    options = apply_options()
    assert options == DEFAULT_OPTIONS
    assert options.sticky_timeout == timedelta(seconds=30)
    assert options.workflow_lock_timeout == timedelta(minutes=1)
    assert options.activity_lock_timeout == timedelta(minutes=2)


def test_with_sticky_timeout():
    options = apply_options(with_sticky_timeout(timedelta(0)))
    assert options.sticky_timeout == timedelta(0)
    assert options.workflow_lock_timeout == DEFAULT_OPTIONS.workflow_lock_timeout


def test_later_options_win():
    options = apply_options(
        with_sticky_timeout(timedelta(seconds=1)), with_sticky_timeout(timedelta(seconds=2))
    )
    assert options.sticky_timeout == timedelta(seconds=2)


def test_defaults_are_not_changed():
    apply_options(with_sticky_timeout(timedelta(0)))
    assert DEFAULT_OPTIONS == Options()
    assert DEFAULT_OPTIONS.sticky_timeout == timedelta(seconds=30)