"""Removers that take back every listener they added when they are reset."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Callable, Hashable


@dataclass
class _Item:
    event: Any
    handle: Any


def _take_handle(items: list, handle: Any, lock: threading.Lock) -> bool:
    """Drop the item holding ``handle``; return whether one was found."""
    if not handle:
        return False
    with lock:
        for index, item in enumerate(items):
            if item.handle is handle:
                del items[index]
                return True
    return False


class ScopedRemover:
    """Adds listeners to a dispatcher and removes them all on ``reset``.

    Used as a context manager, the listeners are removed when the block ends.
    """

    def __init__(self, dispatcher: Any = None) -> None:
        self.dispatcher = dispatcher
        self._items: list[_Item] = []
        self._lock = threading.Lock()

    def __enter__(self) -> "ScopedRemover":
        return self

    def __exit__(self, *args: Any) -> None:
        self.reset()

    def swap(self, other: "ScopedRemover") -> None:
        """Exchange dispatchers and tracked listeners with ``other``."""
        self.dispatcher, other.dispatcher = other.dispatcher, self.dispatcher
        self._items, other._items = other._items, self._items

    def reset(self) -> None:
        """Remove every tracked listener from the dispatcher."""
        if self.dispatcher is not None:
            for item in list(self._items):
                self.dispatcher.remove_listener(item.event, item.handle)
        with self._lock:
            self._items.clear()

    def set_dispatcher(self, dispatcher: Any) -> None:
        """Switch to another dispatcher, removing listeners from the old one."""
        if self.dispatcher is not dispatcher:
            self.reset()
            self.dispatcher = dispatcher

    def _require(self) -> Any:
        if self.dispatcher is None:
            raise ValueError("no dispatcher is set")
        return self.dispatcher

    def _track(self, event: Hashable, handle: Any) -> Any:
        with self._lock:
            self._items.append(_Item(event, handle))
        return handle

    def append_listener(self, event: Hashable, listener: Callable[..., Any]) -> Any:
        return self._track(event, self._require().append_listener(event, listener))

    def prepend_listener(self, event: Hashable, listener: Callable[..., Any]) -> Any:
        return self._track(event, self._require().prepend_listener(event, listener))

    def insert_listener(
        self, event: Hashable, listener: Callable[..., Any], before: Any
    ) -> Any:
        return self._track(event, self._require().insert_listener(event, listener, before))

    def remove_listener(self, event: Hashable, handle: Any) -> bool:
        """Remove one tracked listener now; return whether it was removed."""
        if _take_handle(self._items, handle, self._lock):
            return bool(self._require().remove_listener(event, handle))
        return False


class CallbackListScopedRemover:
    """Adds callbacks to a callback list and removes them all on ``reset``."""

    def __init__(self, callback_list: Any = None) -> None:
        self.callback_list = callback_list
        self._items: list[_Item] = []
        self._lock = threading.Lock()

    def __enter__(self) -> "CallbackListScopedRemover":
        return self

    def __exit__(self, *args: Any) -> None:
        self.reset()

    def swap(self, other: "CallbackListScopedRemover") -> None:
        """Exchange callback lists and tracked callbacks with ``other``."""
        self.callback_list, other.callback_list = other.callback_list, self.callback_list
        self._items, other._items = other._items, self._items

    def reset(self) -> None:
        """Remove every tracked callback from the callback list."""
        if self.callback_list is not None:
            for item in list(self._items):
                self.callback_list.remove(item.handle)
        with self._lock:
            self._items.clear()

    def set_callback_list(self, callback_list: Any) -> None:
        """Switch to another callback list, removing callbacks from the old one."""
        if self.callback_list is not callback_list:
            self.reset()
            self.callback_list = callback_list

    def _require(self) -> Any:
        if self.callback_list is None:
            raise ValueError("no callback list is set")
        return self.callback_list

    def _track(self, handle: Any) -> Any:
        with self._lock:
            self._items.append(_Item(None, handle))
        return handle

    def append(self, callback: Callable[..., Any]) -> Any:
        return self._track(self._require().append(callback))

    def prepend(self, callback: Callable[..., Any]) -> Any:
        return self._track(self._require().prepend(callback))

    def insert(self, callback: Callable[..., Any], before: Any) -> Any:
        return self._track(self._require().insert(callback, before))

    def remove(self, handle: Any) -> bool:
        """Remove one tracked callback now; return whether it was removed."""
        if _take_handle(self._items, handle, self._lock):
            return bool(self._require().remove(handle))
        return False