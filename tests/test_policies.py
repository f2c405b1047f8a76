import threading

import pytest

from eventloom.policies import (
    ArgumentPassing,
    NullLock,
    SpinLock,
    Threading,
    multiple_threading,
    single_threading,
)


def test_spinlock_try_lock_fails_while_held():
    lock = SpinLock()
    assert lock.try_lock() is True
    assert lock.try_lock() is False
    lock.unlock()
    assert lock.try_lock() is True


def test_spinlock_context_manager_releases():
    lock = SpinLock()
    with lock:
        assert lock.try_lock() is False
    assert lock.try_lock() is True


def test_spinlock_unlock_when_free_leaves_it_free():
    lock = SpinLock()
    lock.unlock()
    assert lock.try_lock() is True


def test_spinlock_protects_counter_across_threads():
    lock = SpinLock()
    total = [0]
    held_inside = []
    rounds = 2000
    workers = 4

    def work():
        for _ in range(rounds):
            with lock:
                value = total[0]
                total[0] = value + 1
        with lock:
            held_inside.append(lock.try_lock())

    threads = [threading.Thread(target=work) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert total[0] == rounds * workers
    assert held_inside == [False] * workers
    assert lock.try_lock() is True


def test_spinlock_lock_waits_for_release():
    lock = SpinLock()
    lock.lock()
    acquired = threading.Event()
    attempts = []

    def contender():
        attempts.append(lock.try_lock())
        lock.lock()
        acquired.set()
        lock.unlock()

    thread = threading.Thread(target=contender)
    thread.start()
    assert acquired.wait(0.05) is False
    lock.unlock()
    thread.join(5)
    assert acquired.is_set()
    assert attempts == [False]
    assert lock.try_lock() is True


def test_null_lock_never_blocks():
    lock = NullLock()
    assert lock.acquire() is True
    assert lock.acquire(False) is True
    lock.release()
    with NullLock() as held:
        assert held.acquire(blocking=False) is True


def test_single_threading_lock_and_condition():
    policy = single_threading()
    lock = policy.new_lock()
    assert lock.acquire() is True
    assert lock.acquire(blocking=False) is True
    condition = policy.new_condition(lock)
    with condition:
        assert condition.wait_for(lambda: False, 0) is True
        assert condition.wait() is True


def test_multiple_threading_lock_is_exclusive():
    policy = multiple_threading()
    lock = policy.new_lock()
    assert lock.acquire() is True
    assert lock.acquire(blocking=False) is False
    lock.release()
    assert lock.acquire(blocking=False) is True


def test_multiple_threading_locks_are_independent():
    policy = multiple_threading()
    first = policy.new_lock()
    second = policy.new_lock()
    first.acquire()
    assert second.acquire(blocking=False) is True


def test_multiple_threading_condition_wakes_waiter():
    policy = multiple_threading()
    lock = policy.new_lock()
    condition = policy.new_condition(lock)
    ready = []

    def producer():
        with condition:
            ready.append(1)
            condition.notify()

    thread = threading.Thread(target=producer)
    with condition:
        thread.start()
        woke = condition.wait_for(lambda: bool(ready), timeout=5)
    thread.join()
    assert woke is True
    assert ready == [1]


def test_multiple_threading_condition_times_out():
    policy = multiple_threading()
    condition = policy.new_condition(policy.new_lock())
    with condition:
        assert condition.wait_for(lambda: False, timeout=0.01) is False


def test_custom_threading_uses_factories():
    policy = Threading(lock_factory=SpinLock, condition_factory=lambda lock: ("cond", lock))
    lock = policy.new_lock()
    assert lock.try_lock() is True
    assert policy.new_condition(lock) == ("cond", lock)


@pytest.mark.parametrize(
    "mode, include, exclude",
    [
        (ArgumentPassing.AUTO_DETECT, True, True),
        (ArgumentPassing.INCLUDE_EVENT, True, False),
        (ArgumentPassing.EXCLUDE_EVENT, False, True),
    ],
)
def test_argument_passing_modes(mode, include, exclude):
    assert mode.can_include_event is include
    assert mode.can_exclude_event is exclude