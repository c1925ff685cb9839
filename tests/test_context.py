import pytest

from durablewf.sync.context import (
    Context,
    ContextCanceledError,
    background,
    with_value,
)


def test_with_value():
    ctx = with_value(background(), 42, "foo")
    assert ctx.value(42) == "foo"


def test_with_value_missing_key_is_none():
    ctx = with_value(background(), "a", 1)
    assert ctx.value("b") is None


def test_with_value_nested_lookup_and_shadowing():
    outer = with_value(background(), "a", 1)
    inner = with_value(outer, "b", 2)
    shadow = with_value(inner, "a", 3)
    assert inner.value("a") == 1
    assert inner.value("b") == 2
    assert shadow.value("a") == 3
    assert outer.value("b") is None


def test_background_is_never_canceled():
    ctx = background()
    assert ctx.done() is None
    assert ctx.err() is None
    assert ctx.value("x") is None
    assert repr(ctx) == "context.Background"
    assert background() is ctx


def test_value_context_delegates_to_parent():
    ctx = with_value(background(), "k", "v")
    assert ctx.done() is None
    assert ctx.err() is None


def test_base_context_has_no_values():
    assert Context().value("anything") is None


def test_with_value_rejects_nil_key():
    with pytest.raises(TypeError, match="nil key"):
        with_value(background(), None, "v")


def test_with_value_rejects_unhashable_key():
    with pytest.raises(TypeError, match="not comparable"):
        with_value(background(), [1, 2], "v")


def test_with_value_rejects_nil_parent():
    with pytest.raises(TypeError, match="nil parent"):
        with_value(None, "k", "v")


def test_canceled_error_message():
    assert str(ContextCanceledError()) == "context canceled"