# eventloom

An event library for Python programs that pass work between parts of an
application or between threads. It uses only the standard library.

It provides:

- `EventQueue` in `eventloom.eventqueue`. It holds listeners keyed by event.
  Events can be dispatched at once, or enqueued and processed later, also
  from another thread.
- Listener filters, which can veto a dispatch before any listener runs.
- Helpers in separate modules:
  - `eventutil` finds and removes listeners.
  - `scopedremover` removes listeners when a scope ends.
  - `conditionalremover` removes listeners once a condition holds.
- `AnyId`, an event identifier built from the digest of any value, such as
  a type.
- `OrderedQueueList`, a queue list that keeps pending events sorted.
- An active-object pipeline driven by a hierarchical state machine. It can
  be run as a demo.

## Installation

```
pip install eventloom
```

## Queue events and process them later

```python
from eventloom.eventqueue import EventQueue

queue = EventQueue()

queue.append_listener(3, lambda s, n: print("Got event 3:", s, n))
queue.append_listener(5, lambda s, n: print("Got event 5:", s, n))

# Enqueuing does not call any listener yet.
queue.enqueue(3, "Hello", 38)
queue.enqueue(5, "World", 58)

# Dispatch everything that is queued.
queue.process()
```

By default the first argument of `enqueue` and `dispatch` is the event.
Listeners receive the remaining arguments. `dispatch(...)` calls the
listeners straight away, without queuing.

These methods process the queue partly or in another way. Each one returns
whether anything was processed.

| Method | What it does |
| --- | --- |
| `process()` | Dispatches every pending event. |
| `process_one()` | Dispatches only the first pending event. |
| `process_if(predicate)` | Dispatches the pending events the predicate accepts and keeps the others. |
| `process_until(predicate)` | Dispatches pending events in order until the predicate accepts one. |
| `process_with(visitor)` | Calls `visitor(event, *arguments)` for every pending event instead of the listeners. |
| `process_one_with(visitor)` | Calls the visitor for the first pending event only. |

A predicate is called with the event's arguments, or with none if it takes
none.

Other methods work with the pending events directly:

- `peek_event()` returns the first pending `QueuedEvent` without removing it, or `None`.
- `take_event()` removes the first pending `QueuedEvent` and returns it, or `None`.
- `dispatch_queued(queued_event)` dispatches an event returned by either method.
- `clear_events()` drops all pending events.
- `empty_queue()` reports whether nothing is queued or being processed.

## Deriving the event from the arguments

Pass `get_event` to let the queue compute the event from the arguments. In
that case the listeners receive every argument. The `argument_passing`
option takes one of the values of `eventloom.policies.ArgumentPassing`:

- `AUTO_DETECT`
- `INCLUDE_EVENT`
- `EXCLUDE_EVENT`

The option fixes whether the event is among the listener arguments.

## Priority queue

`eventloom.orderedqueuelist.OrderedQueueList` keeps items in stable
ascending order of a key. Items with equal keys stay first-in-first-out.
Pass a factory for it as `queue_list`:

```python
from dataclasses import dataclass
from eventloom.eventqueue import EventQueue
from eventloom.orderedqueuelist import OrderedQueueList

@dataclass
class MyEvent:
    e: int
    priority: int

queue = EventQueue(
    get_event=lambda event: event.e,
    queue_list=lambda: OrderedQueueList(key=lambda item: -item.arguments[0].priority),
)
queue.append_listener(5, lambda event: print(event))
queue.enqueue(MyEvent(5, 100))
queue.enqueue(MyEvent(5, 200))
queue.process()   # priority 200 first, then 100
```

With no key, `OrderedQueueList` sorts on the items' `event` attribute.

## Consume events from another thread

```python
import threading
from eventloom.eventqueue import EventQueue

queue = EventQueue()
stop = threading.Event()
queue.append_listener(1, lambda _: stop.set())
queue.append_listener(2, lambda index: print("Got event", index))

def worker():
    while not stop.is_set():
        queue.wait()
        queue.process()

thread = threading.Thread(target=worker)
thread.start()

queue.enqueue(2, 1)
with queue.disable_notify():
    # Waiting threads are not woken until the block ends.
    queue.enqueue(2, 10)
    queue.enqueue(2, 11)
queue.enqueue(1, 0)
thread.join()
```

`wait_for(timeout)` waits up to `timeout` seconds. It returns whether events
can be processed. `disable_notify()` returns a `DisableQueueNotify` context
manager.

## Manage listeners

Listeners can be added at different positions:

- `append_listener(event, callback)` adds after the existing listeners.
- `prepend_listener(event, callback)` adds before them.
- `insert_listener(event, callback, before)` adds before the handle `before`.

Each of them returns a `Handle`. `remove_listener(event, handle)` removes
that listener. A removed handle is false.

`for_each(event, func)` calls `func(handle, callback)` or `func(callback)`
for each listener. `for_each_if` works the same way but stops as soon as
`func` returns false.

`append_filter(filter_func)` adds a filter that runs before any listener.
It is called with the listener arguments. A filter that returns false stops
that dispatch. `remove_filter(handle)` removes it again.

`eventloom.eventutil` compares callbacks with `==` to find them:

- `remove_listener(dispatcher, event, listener)`
- `has_listener(dispatcher, event, listener)`
- `has_any_listener(dispatcher, event)`

`eventloom.scopedremover.ScopedRemover` removes every listener it added
when it is reset or when its `with` block ends:

```python
from eventloom.eventqueue import EventQueue
from eventloom.scopedremover import ScopedRemover

queue = EventQueue()
with ScopedRemover(queue) as remover:
    remover.append_listener(3, print)
    queue.dispatch(3, "inside")   # printed
queue.dispatch(3, "outside")      # listener already removed
```

`eventloom.conditionalremover.conditional_remover(queue)` returns a
`ConditionalRemover`. Its `append_listener`, `prepend_listener` and
`insert_listener` take an extra `condition`. The listener removes itself
on the first call for which the condition is true, and it still runs on
that call.

## Callback lists

The package has no callback list class of its own. These helpers work with
any object that has the right methods:

- `remove_callback`, `has_callback` and `has_any_callback` in
  `eventloom.eventutil` need `for_each_if(func)` and `remove(handle)`.
- `CallbackListScopedRemover` and `CallbackListConditionalRemover` also
  need `append`, `prepend` and `insert`.

## Other utilities

- `eventloom.conditionalfunctor.conditional_functor(func, condition)` wraps
  `func`. The wrapper runs it only when `condition` accepts the arguments.
- `eventloom.anyid.AnyId(value, digester=hash, store_value=False)` compares
  and hashes by the digest of `value`. With `store_value=True` on both ids,
  the values are compared too. With `digester=type_digester`, an instance
  and its type give equal ids. Python types can then serve as events.

## Threading policy

`eventloom.policies` supplies the locking strategy for
`EventQueue(threading=...)`:

- `multiple_threading()` is the default. It uses real locks and conditions.
- `single_threading()` uses stand-ins that never block or wait. It is for
  code that runs on one thread.
- `SpinLock` is a busy-waiting lock with backoff, for very short critical
  sections.

## Demo

`eventloom.activeobject` builds a sensor → processor → logger pipeline out
of `ActiveObject`s. Each active object has its own queue and thread.
A `ProcessorHSM` governs the processor. It has these states:

- Idle
- Running::Normal
- Running::Degraded
- Paused
- Error, where a guard limits how many resets are allowed

Run the demo with:

```
eventloom-demo
```

The demo goes through each phase and prints the state transitions. It runs
for about eight seconds and then prints the final statistics.

## Running the tests

```
pip install "eventloom[test]"
pytest
```