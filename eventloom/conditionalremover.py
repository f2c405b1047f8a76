"""Listeners that remove themselves once a condition becomes true."""

from __future__ import annotations

import types
from dataclasses import dataclass
from typing import Any, Callable, Hashable

_CO_VARARGS = 0x04


def _takes_args(condition: Callable[..., Any], args: tuple) -> bool:
    """Whether ``condition`` can be called with ``args``."""
    target: Any = condition
    bound = 0
    if isinstance(condition, types.MethodType):
        target = condition.__func__
        bound = 1
    code = getattr(target, "__code__", None)
    if code is None:
        target = getattr(type(condition), "__call__", None)
        code = getattr(target, "__code__", None)
        if code is None:
            return True
        bound = 1
    defaults = getattr(target, "__defaults__", None) or ()
    count = code.co_argcount - bound
    required = max(count - len(defaults), 0)
    if len(args) < required:
        return False
    return bool(code.co_flags & _CO_VARARGS) or len(args) <= count


def _should_remove(condition: Callable[..., bool], args: tuple) -> bool:
    if _takes_args(condition, args):
        return bool(condition(*args))
    return bool(condition())


@dataclass
class _DispatcherItem:
    should_remove: Callable[..., bool]
    dispatcher: Any
    event: Any
    listener: Callable[..., Any]
    handle: Any = None

    def __call__(self, *args: Any) -> None:
        if _should_remove(self.should_remove, args):
            self.dispatcher.remove_listener(self.event, self.handle)
        self.listener(*args)


@dataclass
class _CallbackListItem:
    should_remove: Callable[..., bool]
    callback_list: Any
    listener: Callable[..., Any]
    handle: Any = None

    def __call__(self, *args: Any) -> None:
        if _should_remove(self.should_remove, args):
            self.callback_list.remove(self.handle)
        self.listener(*args)


class ConditionalRemover:
    """Adds listeners that are removed after the call in which the condition holds.

    The condition is called with the listener's arguments, or with none if it
    takes none. The listener still runs on the call that removes it.
    """

    def __init__(self, dispatcher: Any) -> None:
        self.dispatcher = dispatcher

    def append_listener(
        self, event: Hashable, listener: Callable[..., Any], condition: Callable[..., bool]
    ) -> Any:
        item = _DispatcherItem(condition, self.dispatcher, event, listener)
        item.handle = self.dispatcher.append_listener(event, item)
        return item.handle

    def prepend_listener(
        self, event: Hashable, listener: Callable[..., Any], condition: Callable[..., bool]
    ) -> Any:
        item = _DispatcherItem(condition, self.dispatcher, event, listener)
        item.handle = self.dispatcher.prepend_listener(event, item)
        return item.handle

    def insert_listener(
        self,
        event: Hashable,
        listener: Callable[..., Any],
        before: Any,
        condition: Callable[..., bool],
    ) -> Any:
        item = _DispatcherItem(condition, self.dispatcher, event, listener)
        item.handle = self.dispatcher.insert_listener(event, item, before)
        return item.handle


class CallbackListConditionalRemover:
    """Adds callbacks to a callback list that remove themselves on a condition."""

    def __init__(self, callback_list: Any) -> None:
        self.callback_list = callback_list

    def append(self, listener: Callable[..., Any], condition: Callable[..., bool]) -> Any:
        item = _CallbackListItem(condition, self.callback_list, listener)
        item.handle = self.callback_list.append(item)
        return item.handle

    def prepend(self, listener: Callable[..., Any], condition: Callable[..., bool]) -> Any:
        item = _CallbackListItem(condition, self.callback_list, listener)
        item.handle = self.callback_list.prepend(item)
        return item.handle

    def insert(
        self, listener: Callable[..., Any], before: Any, condition: Callable[..., bool]
    ) -> Any:
        item = _CallbackListItem(condition, self.callback_list, listener)
        item.handle = self.callback_list.insert(item, before)
        return item.handle


def conditional_remover(dispatcher: Any) -> ConditionalRemover | CallbackListConditionalRemover:
    """Make the remover that suits ``dispatcher``: an event dispatcher or a callback list."""
    if hasattr(dispatcher, "append_listener"):
        return ConditionalRemover(dispatcher)
    return CallbackListConditionalRemover(dispatcher)