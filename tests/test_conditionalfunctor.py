import pytest

from eventloom.conditionalfunctor import ConditionalFunctor, conditional_functor


def test_calls_func_when_condition_holds():
    calls = []
    functor = conditional_functor(lambda *args: calls.append(args), lambda *args: True)
    functor(1, "a")
    assert calls == [(1, "a")]


def test_skips_func_when_condition_fails():
    calls = []
    functor = conditional_functor(lambda *args: calls.append(args), lambda *args: False)
    functor(1, "a")
    assert calls == []


def test_condition_sees_the_same_arguments():
    seen = []
    calls = []

    def condition(value):
        seen.append(value)
        return value > 0

    functor = conditional_functor(calls.append, condition)
    for value in (-1, 4, 0, 7):
        functor(value)
    assert seen == [-1, 4, 0, 7]
    assert calls == [4, 7]


def test_factory_builds_functor_with_parts():
    func = print
    condition = callable
    functor = conditional_functor(func, condition)
    assert isinstance(functor, ConditionalFunctor)
    assert functor.func is func
    assert functor.condition is condition


def test_call_returns_none_even_when_func_returns():
    functor = ConditionalFunctor(lambda x: x * 2, lambda x: True)
    assert functor(5) is None


def test_condition_error_propagates_and_func_not_called():
    calls = []

    def condition(x):
        raise ValueError("bad")

    functor = ConditionalFunctor(calls.append, condition)
    with pytest.raises(ValueError):
        functor(1)
    assert calls == []