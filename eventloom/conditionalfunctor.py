"""Callables that run only when a condition on their arguments holds."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable


@dataclass
class ConditionalFunctor:
    """Calls ``func`` with the arguments when ``condition`` accepts them."""

    func: Callable[..., Any]
    condition: Callable[..., bool]

    def __call__(self, *args: Any) -> None:
        if self.condition(*args):
            self.func(*args)


def conditional_functor(func: Callable[..., Any], condition: Callable[..., bool]) -> ConditionalFunctor:
    """Wrap ``func`` so that it runs only when ``condition`` is true."""
    return ConditionalFunctor(func, condition)