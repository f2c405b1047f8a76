"""Locking and threading policies shared by the event containers."""

from __future__ import annotations

import enum
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable

_MAX_BACKOFF = 64


class SpinLock:
    """Busy-waiting lock with exponential backoff for short critical sections."""

    __slots__ = ("_flag",)

    def __init__(self) -> None:
        self._flag = threading.Lock()

    def lock(self) -> None:
        """Acquire the lock, spinning with growing backoff while it is held."""
        acquire = self._flag.acquire
        if acquire(blocking=False):
            return
        backoff = 1
        while not acquire(blocking=False):
            for _ in range(backoff):
                time.sleep(0)
            if backoff < _MAX_BACKOFF:
                backoff <<= 1

    def try_lock(self) -> bool:
        """Acquire the lock if it is free; return whether it was acquired."""
        return self._flag.acquire(blocking=False)

    def unlock(self) -> None:
        """Release the lock. Releasing a free lock leaves it free."""
        try:
            self._flag.release()
        except RuntimeError:
            pass

    def __enter__(self) -> "SpinLock":
        self.lock()
        return self

    def __exit__(self, *args: Any) -> None:
        self.unlock()


class NullLock:
    """Lock that never blocks, for containers used from a single thread.

    It only counts how deeply it is held, so ``locked()`` can report it.
    """

    __slots__ = ("_depth",)

    def __init__(self) -> None:
        self._depth = 0

    def acquire(self, blocking: bool = True, timeout: float = -1) -> bool:
        """Succeed at once, recording one more level of holding."""
        self._depth += 1
        return True

    def release(self) -> None:
        """Drop one level of holding; releasing a free lock leaves it free."""
        if self._depth > 0:
            self._depth -= 1

    def locked(self) -> bool:
        """Whether the lock is currently held."""
        return self._depth > 0

    def __enter__(self) -> "NullLock":
        self.acquire()
        return self

    def __exit__(self, *args: Any) -> None:
        self.release()


class _NullCondition:
    """Condition variable that never waits; every wait reports success.

    It keeps counts of notifications and waits for inspection.
    """

    __slots__ = ("_lock", "notifications", "waits")

    def __init__(self, lock: Any = None) -> None:
        self._lock = lock if lock is not None else NullLock()
        self.notifications = 0
        self.waits = 0

    def notify(self, n: int = 1) -> None:
        """Record ``n`` notifications; there are never waiters to wake."""
        self.notifications += n

    def notify_all(self) -> None:
        """Record a notification; there are never waiters to wake."""
        self.notifications += 1

    def wait(self, timeout: float | None = None) -> bool:
        """Return at once, reporting success."""
        self.waits += 1
        return self.waits > 0

    def wait_for(self, predicate: Callable[[], bool], timeout: float | None = None) -> bool:
        """Return at once, reporting success without consulting ``predicate``."""
        return self.wait(timeout)

    def __enter__(self) -> "_NullCondition":
        self._lock.acquire()
        return self

    def __exit__(self, *args: Any) -> None:
        self._lock.release()


@dataclass(frozen=True)
class Threading:
    """Factories for the lock and condition objects a container uses."""

    lock_factory: Callable[[], Any]
    condition_factory: Callable[[Any], Any]

    def new_lock(self) -> Any:
        """Create a fresh lock."""
        return self.lock_factory()

    def new_condition(self, lock: Any) -> Any:
        """Create a condition variable bound to ``lock``."""
        return self.condition_factory(lock)


class ArgumentPassing(enum.Enum):
    """Whether the event is passed among the arguments of enqueue and dispatch."""

    AUTO_DETECT = (True, True)
    INCLUDE_EVENT = (True, False)
    EXCLUDE_EVENT = (False, True)

    @property
    def can_include_event(self) -> bool:
        return self.value[0]

    @property
    def can_exclude_event(self) -> bool:
        return self.value[1]


def single_threading() -> Threading:
    """Threading policy with no real locking, for single-threaded use."""
    return Threading(lock_factory=NullLock, condition_factory=_NullCondition)


def multiple_threading() -> Threading:
    """Threading policy backed by the standard library's lock and condition."""
    return Threading(lock_factory=threading.Lock, condition_factory=threading.Condition)