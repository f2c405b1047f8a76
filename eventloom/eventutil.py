"""Helpers that search and remove listeners by their callback."""

from __future__ import annotations

from typing import Any, Callable, Hashable


def remove_listener(dispatcher: Any, event: Hashable, listener: Callable[..., Any]) -> bool:
    """Remove the first listener of ``event`` equal to ``listener``.

    Return whether one was found and removed.
    """
    found = False

    def visit(handle: Any, item: Callable[..., Any]) -> bool:
        nonlocal found
        if item == listener:
            found = True
            dispatcher.remove_listener(event, handle)
            return False
        return True

    dispatcher.for_each_if(event, visit)
    return found


def has_listener(dispatcher: Any, event: Hashable, listener: Callable[..., Any]) -> bool:
    """Whether ``event`` has a listener equal to ``listener``."""
    found = False

    def visit(handle: Any, item: Callable[..., Any]) -> bool:
        nonlocal found
        if item == listener:
            found = True
            return False
        return True

    dispatcher.for_each_if(event, visit)
    return found


def has_any_listener(dispatcher: Any, event: Hashable) -> bool:
    """Whether ``event`` has at least one listener."""
    found = False

    def visit(handle: Any, item: Callable[..., Any]) -> bool:
        nonlocal found
        found = True
        return False

    dispatcher.for_each_if(event, visit)
    return found


def remove_callback(callback_list: Any, callback: Callable[..., Any]) -> bool:
    """Remove the first callback in the list equal to ``callback``.

    Return whether one was found and removed.
    """
    found = False

    def visit(handle: Any, item: Callable[..., Any]) -> bool:
        nonlocal found
        if item == callback:
            found = True
            callback_list.remove(handle)
            return False
        return True

    callback_list.for_each_if(visit)
    return found


def has_callback(callback_list: Any, callback: Callable[..., Any]) -> bool:
    """Whether the list holds a callback equal to ``callback``."""
    found = False

    def visit(handle: Any, item: Callable[..., Any]) -> bool:
        nonlocal found
        if item == callback:
            found = True
            return False
        return True

    callback_list.for_each_if(visit)
    return found


def has_any_callback(callback_list: Any) -> bool:
    """Whether the list holds at least one callback."""
    found = False

    def visit(handle: Any, item: Callable[..., Any]) -> bool:
        nonlocal found
        found = True
        return False

    callback_list.for_each_if(visit)
    return found