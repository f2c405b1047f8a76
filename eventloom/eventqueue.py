"""Event dispatcher whose events can also be queued and processed later."""

from __future__ import annotations

import collections
import contextlib
import time
import types
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Iterable, Iterator

from .policies import ArgumentPassing, Threading, multiple_threading

_SPIN_CHECKS = 128
_YIELD_CHECKS = 16
_CO_VARARGS = 0x04


def _arity(func: Callable[..., Any]) -> tuple[int, int | None] | None:
    """Positional argument range ``(required, maximum)`` of ``func``, if known."""
    target: Any = func
    bound = 0
    if isinstance(func, types.MethodType):
        target = func.__func__
        bound = 1
    code = getattr(target, "__code__", None)
    if code is None:
        target = getattr(type(func), "__call__", None)
        code = getattr(target, "__code__", None)
        if code is None:
            return None
        bound = 1
    defaults = getattr(target, "__defaults__", None) or ()
    count = code.co_argcount - bound
    required = max(count - len(defaults), 0)
    maximum = None if code.co_flags & _CO_VARARGS else count
    return required, maximum


def _accepts(func: Callable[..., Any], args: tuple) -> bool:
    """Whether ``func`` can be called with ``args`` positionally."""
    arity = _arity(func)
    if arity is None:
        return True
    required, maximum = arity
    return required <= len(args) and (maximum is None or len(args) <= maximum)


class _FifoList:
    """Plain first-in-first-out queue list."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: collections.deque = collections.deque()

    def append(self, item: Any) -> None:
        self._items.append(item)

    def extendleft(self, items: Iterable[Any]) -> None:
        """Put items back at the front, keeping the order given."""
        self._items.extendleft(reversed(list(items)))

    def popleft(self) -> Any:
        return self._items.popleft()

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __getitem__(self, index: int) -> Any:
        return self._items[index]


class Handle:
    """Identifies one listener or filter; false once it has been removed."""

    __slots__ = ("callback", "_alive")

    def __init__(self, callback: Callable[..., Any]) -> None:
        self.callback = callback
        self._alive = True

    def __bool__(self) -> bool:
        return self._alive

    def __repr__(self) -> str:
        state = "alive" if self._alive else "removed"
        return f"Handle({self.callback!r}, {state})"


@dataclass(frozen=True)
class QueuedEvent:
    """An event waiting in the queue together with its listener arguments."""

    event: Any
    arguments: tuple = ()


class DisableQueueNotify:
    """Context in which waiting threads are not woken by new events.

    When the last such context ends and events are pending, a waiter is woken.
    """

    def __init__(self, queue: "EventQueue") -> None:
        self.queue = queue

    def __enter__(self) -> "DisableQueueNotify":
        self.queue._suspend_notify()
        return self

    def __exit__(self, *args: Any) -> None:
        self.queue._resume_notify()


class EventQueue:
    """Maps events to listener lists; dispatches at once or through a queue.

    With no ``get_event`` the first argument of ``enqueue``/``dispatch`` is the
    event and listeners receive the rest. With ``get_event`` the event may be
    derived from the arguments, in which case listeners receive them all.
    """

    def __init__(
        self,
        get_event: Callable[..., Hashable] | None = None,
        argument_passing: ArgumentPassing = ArgumentPassing.AUTO_DETECT,
        queue_list: Callable[[], Any] = _FifoList,
        threading: Threading | None = None,
    ) -> None:
        policy = threading if threading is not None else multiple_threading()
        self._get_event = get_event
        self._argument_passing = argument_passing
        self._queue_list = queue_list
        self._listeners: dict[Hashable, list[Handle]] = {}
        self._filters: list[Handle] = []
        self._listener_lock = policy.new_lock()
        self._queue_lock = policy.new_lock()
        self._condition = policy.new_condition(self._queue_lock)
        self._counter_lock = policy.new_lock()
        self._queue = queue_list()
        self._processing = 0
        self._notify_disabled = 0

    # ----- listeners -----

    def append_listener(self, event: Hashable, callback: Callable[..., Any]) -> Handle:
        """Add a listener after the existing ones for ``event``."""
        handle = Handle(callback)
        with self._listener_lock:
            self._listeners.setdefault(event, []).append(handle)
        return handle

    def prepend_listener(self, event: Hashable, callback: Callable[..., Any]) -> Handle:
        """Add a listener before the existing ones for ``event``."""
        handle = Handle(callback)
        with self._listener_lock:
            self._listeners.setdefault(event, []).insert(0, handle)
        return handle

    def insert_listener(
        self, event: Hashable, callback: Callable[..., Any], before: Handle
    ) -> Handle:
        """Add a listener before ``before``, or at the end if it is not found."""
        handle = Handle(callback)
        with self._listener_lock:
            listeners = self._listeners.setdefault(event, [])
            index = _index_of(listeners, before)
            if index is None:
                listeners.append(handle)
            else:
                listeners.insert(index, handle)
        return handle

    def remove_listener(self, event: Hashable, handle: Handle) -> bool:
        """Remove a listener; return whether it was found under ``event``."""
        with self._listener_lock:
            listeners = self._listeners.get(event)
            if not listeners:
                return False
            index = _index_of(listeners, handle)
            if index is None:
                return False
            del listeners[index]
            handle._alive = False
            if not listeners:
                del self._listeners[event]
            return True

    def for_each(self, event: Hashable, func: Callable[..., Any]) -> None:
        """Call ``func(handle, callback)`` or ``func(callback)`` per listener."""
        for handle in self._snapshot(event):
            if handle:
                _visit(func, handle)

    def for_each_if(self, event: Hashable, func: Callable[..., bool]) -> bool:
        """Like ``for_each`` but stop when ``func`` returns false.

        Return False if stopped early, True otherwise.
        """
        for handle in self._snapshot(event):
            if handle and not _visit(func, handle):
                return False
        return True

    # ----- filters -----

    def append_filter(self, filter_func: Callable[..., bool]) -> Handle:
        """Add a filter; a dispatch goes ahead only if every filter returns true."""
        handle = Handle(filter_func)
        with self._listener_lock:
            self._filters.append(handle)
        return handle

    def remove_filter(self, handle: Handle) -> bool:
        """Remove a filter; return whether it was found."""
        with self._listener_lock:
            index = _index_of(self._filters, handle)
            if index is None:
                return False
            del self._filters[index]
            handle._alive = False
            return True

    # ----- dispatching -----

    def dispatch(self, *args: Any) -> None:
        """Invoke the listeners of the event at once."""
        event, arguments = self._split(args)
        self._direct_dispatch(event, arguments)

    def dispatch_queued(self, queued_event: QueuedEvent) -> None:
        """Invoke the listeners for an event taken from the queue."""
        self._direct_dispatch(queued_event.event, queued_event.arguments)

    # ----- queueing -----

    def enqueue(self, *args: Any) -> None:
        """Put an event in the queue; listeners run when the queue is processed."""
        event, arguments = self._split(args)
        item = QueuedEvent(event, arguments)
        with self._condition:
            self._queue.append(item)
            if self._can_process():
                self._condition.notify()

    def empty_queue(self) -> bool:
        """True when nothing is queued and nothing is being processed."""
        return len(self._queue) == 0 and self._processing == 0

    def clear_events(self) -> None:
        """Drop every queued event without dispatching it."""
        if not self._queue:
            return
        with self._queue_lock:
            self._queue.clear()

    def process(self) -> bool:
        """Dispatch every queued event; return whether any was dispatched."""
        if not self._queue:
            return False
        with self._processing_guard():
            items = list(self._take_all())
            for item in items:
                self._direct_dispatch(item.event, item.arguments)
            return bool(items)

    def process_one(self) -> bool:
        """Dispatch the first queued event; return whether there was one."""
        if not self._queue:
            return False
        with self._processing_guard():
            item = self._pop_front()
            if item is None:
                return False
            self._direct_dispatch(item.event, item.arguments)
            return True

    def process_with(self, visitor: Callable[..., Any]) -> bool:
        """Pass every queued event to ``visitor(event, *arguments)`` instead of listeners."""
        if not self._queue:
            return False
        with self._processing_guard():
            items = list(self._take_all())
            for item in items:
                visitor(item.event, *item.arguments)
            return bool(items)

    def process_one_with(self, visitor: Callable[..., Any]) -> bool:
        """Pass the first queued event to ``visitor(event, *arguments)``."""
        if not self._queue:
            return False
        with self._processing_guard():
            item = self._pop_front()
            if item is None:
                return False
            visitor(item.event, *item.arguments)
            return True

    def process_if(self, predicate: Callable[..., bool]) -> bool:
        """Dispatch the queued events the predicate accepts; keep the others."""
        if not self._queue:
            return False
        with self._processing_guard():
            kept = []
            processed = False
            for item in self._take_all():
                if _test(predicate, item.arguments):
                    self._direct_dispatch(item.event, item.arguments)
                    processed = True
                else:
                    kept.append(item)
            self._restore(kept)
            return processed

    def process_until(self, predicate: Callable[..., bool]) -> bool:
        """Dispatch queued events in order until the predicate accepts one."""
        if not self._queue:
            return False
        with self._processing_guard():
            remaining: list[QueuedEvent] = []
            processed = False
            pending = iter(list(self._take_all()))
            for item in pending:
                if _test(predicate, item.arguments):
                    remaining.append(item)
                    remaining.extend(pending)
                    break
                self._direct_dispatch(item.event, item.arguments)
                processed = True
            self._restore(remaining)
            return processed

    def wait(self) -> None:
        """Block until there are events that can be processed."""
        with self._condition:
            self._condition.wait_for(self._can_process)

    def wait_for(self, timeout: float) -> bool:
        """Wait up to ``timeout`` seconds; return whether events can be processed."""
        if self._can_process():
            return True
        for _ in range(_SPIN_CHECKS):
            if self._can_process():
                return True
        for _ in range(_YIELD_CHECKS):
            if self._can_process():
                return True
            time.sleep(0)
        with self._condition:
            return bool(self._condition.wait_for(self._can_process, timeout))

    def peek_event(self) -> QueuedEvent | None:
        """Return the first queued event without removing it, or None."""
        if not self._queue:
            return None
        with self._queue_lock:
            return self._queue[0] if self._queue else None

    def take_event(self) -> QueuedEvent | None:
        """Remove and return the first queued event without dispatching it, or None."""
        if not self._queue:
            return None
        return self._pop_front()

    def disable_notify(self) -> DisableQueueNotify:
        """Context manager that keeps waiting threads asleep while it is active."""
        return DisableQueueNotify(self)

    # ----- internals -----

    def _split(self, args: tuple) -> tuple[Any, tuple]:
        if not args:
            raise TypeError("an event or event arguments are required")
        get_event = self._get_event
        derive = get_event is not None and _accepts(get_event, args)
        mode = self._argument_passing
        if mode is ArgumentPassing.INCLUDE_EVENT:
            include = True
        elif mode is ArgumentPassing.EXCLUDE_EVENT:
            include = False
        else:
            include = derive
        event = get_event(*args) if derive else args[0]
        return event, tuple(args if include else args[1:])

    def _snapshot(self, event: Hashable) -> list[Handle]:
        with self._listener_lock:
            return list(self._listeners.get(event, ()))

    def _direct_dispatch(self, event: Hashable, arguments: tuple) -> None:
        with self._listener_lock:
            filters = list(self._filters)
        for handle in filters:
            if handle and not handle.callback(*arguments):
                return
        for handle in self._snapshot(event):
            if handle:
                handle.callback(*arguments)

    def _take_all(self) -> Any:
        with self._queue_lock:
            taken, self._queue = self._queue, self._queue_list()
        return taken

    def _pop_front(self) -> QueuedEvent | None:
        with self._queue_lock:
            return self._queue.popleft() if self._queue else None

    def _restore(self, items: list[QueuedEvent]) -> None:
        if items:
            with self._queue_lock:
                self._queue.extendleft(items)

    @contextlib.contextmanager
    def _processing_guard(self) -> Iterator[None]:
        with self._counter_lock:
            self._processing += 1
        try:
            yield
        finally:
            with self._counter_lock:
                self._processing -= 1

    def _can_process(self) -> bool:
        return not self.empty_queue() and self._notify_disabled == 0

    def _suspend_notify(self) -> None:
        with self._counter_lock:
            self._notify_disabled += 1

    def _resume_notify(self) -> None:
        with self._counter_lock:
            self._notify_disabled -= 1
        with self._condition:
            if self._can_process():
                self._condition.notify()


def _index_of(handles: list[Handle], target: Handle) -> int | None:
    return next((index for index, handle in enumerate(handles) if handle is target), None)


def _visit(func: Callable[..., Any], handle: Handle) -> Any:
    if _accepts(func, (handle, handle.callback)):
        return func(handle, handle.callback)
    return func(handle.callback)


def _test(predicate: Callable[..., bool], arguments: tuple) -> bool:
    if _accepts(predicate, ()):
        return bool(predicate())
    return bool(predicate(*arguments))