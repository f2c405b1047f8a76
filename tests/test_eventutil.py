from eventloom.eventqueue import EventQueue
from eventloom.eventutil import (
    has_any_callback,
    has_any_listener,
    has_callback,
    has_listener,
    remove_callback,
    remove_listener,
)


class _Handle:
    def __init__(self, callback):
        self.callback = callback
        self.alive = True

    def __bool__(self):
        return self.alive


class FakeCallbackList:
    def __init__(self):
        self.items = []

    def append(self, callback):
        handle = _Handle(callback)
        self.items.append(handle)
        return handle

    def prepend(self, callback):
        handle = _Handle(callback)
        self.items.insert(0, handle)
        return handle

    def insert(self, callback, before):
        handle = _Handle(callback)
        for index, item in enumerate(self.items):
            if item is before:
                self.items.insert(index, handle)
                return handle
        self.items.append(handle)
        return handle

    def remove(self, handle):
        for index, item in enumerate(self.items):
            if item is handle:
                del self.items[index]
                handle.alive = False
                return True
        return False

    def for_each_if(self, func):
        for handle in list(self.items):
            if handle and not func(handle, handle.callback):
                return False
        return True

    def __call__(self, *args):
        for handle in list(self.items):
            if handle:
                handle.callback(*args)


def test_dispatcher_has_and_remove_listener():
    queue = EventQueue()
    received = []

    def first(value):
        received.append(("first", value))

    def second(value):
        received.append(("second", value))

    queue.append_listener(3, first)
    queue.append_listener(3, second)

    assert has_listener(queue, 3, first)
    assert has_listener(queue, 3, second)
    assert not has_listener(queue, 4, first)
    assert has_any_listener(queue, 3)
    assert not has_any_listener(queue, 4)

    assert remove_listener(queue, 3, first)
    assert not has_listener(queue, 3, first)
    assert not remove_listener(queue, 3, first)

    queue.dispatch(3, "x")
    assert received == [("second", "x")]

    assert remove_listener(queue, 3, second)
    assert not has_any_listener(queue, 3)


def test_dispatcher_remove_only_first_matching():
    queue = EventQueue()
    received = []

    def listener(value):
        received.append(value)

    queue.append_listener(1, listener)
    queue.append_listener(1, listener)
    assert remove_listener(queue, 1, listener)
    assert has_listener(queue, 1, listener)
    queue.dispatch(1, "once")
    assert received == ["once"]


def test_callback_list_helpers():
    callbacks = FakeCallbackList()
    received = []

    def first():
        received.append("first")

    def second():
        received.append("second")

    assert not has_any_callback(callbacks)
    callbacks.append(first)
    callbacks.append(second)

    assert has_any_callback(callbacks)
    assert has_callback(callbacks, first)
    assert remove_callback(callbacks, first)
    assert not has_callback(callbacks, first)
    assert not remove_callback(callbacks, first)

    callbacks()
    assert received == ["second"]

    assert remove_callback(callbacks, second)
    assert not has_any_callback(callbacks)