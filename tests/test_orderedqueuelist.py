from dataclasses import dataclass

import pytest

from eventloom.orderedqueuelist import OrderedQueueList


@dataclass
class Item:
    event: int
    priority: int


def _fill(queue_list):
    items = [Item(5, 100), Item(5, 200), Item(7, 300), Item(7, 400), Item(3, 500), Item(3, 600)]
    for item in items:
        queue_list.append(item)
    return items


def test_default_key_orders_by_event_stably():
    queue_list = OrderedQueueList()
    _fill(queue_list)
    assert [(i.event, i.priority) for i in queue_list] == [
        (3, 500),
        (3, 600),
        (5, 100),
        (5, 200),
        (7, 300),
        (7, 400),
    ]


def test_custom_key_orders_by_descending_priority():
    queue_list = OrderedQueueList(key=lambda item: -item.priority)
    items = _fill(queue_list)
    assert list(queue_list) == sorted(items, key=lambda i: i.priority, reverse=True)


def test_popleft_returns_items_in_order_then_raises():
    queue_list = OrderedQueueList()
    _fill(queue_list)
    events = []
    while queue_list:
        events.append(queue_list.popleft().event)
    assert events == sorted(events)
    assert len(queue_list) == 0
    with pytest.raises(IndexError):
        queue_list.popleft()


def test_extendleft_keeps_given_order_before_equal_keys():
    queue_list = OrderedQueueList()
    existing = Item(5, 1)
    queue_list.append(existing)
    returned = [Item(5, 2), Item(5, 3), Item(3, 4)]
    queue_list.extendleft(returned)
    assert list(queue_list) == [returned[2], returned[0], returned[1], existing]


def test_getitem_and_len():
    queue_list = OrderedQueueList()
    items = _fill(queue_list)
    assert len(queue_list) == len(items)
    assert queue_list[0].event == min(i.event for i in items)
    assert queue_list[-1].event == max(i.event for i in items)
    with pytest.raises(IndexError):
        queue_list[len(items)]


def test_clear_empties_list():
    queue_list = OrderedQueueList()
    _fill(queue_list)
    queue_list.clear()
    assert list(queue_list) == []
    assert not queue_list


def test_sorted_invariant_holds_after_mixed_operations():
    queue_list = OrderedQueueList(key=lambda x: x)
    for value in [9, 2, 7, 2, 5]:
        queue_list.append(value)
    queue_list.popleft()
    queue_list.extendleft([8, 1])
    values = list(queue_list)
    assert values == sorted(values)
    assert sorted(values) == sorted([9, 7, 2, 5, 8, 1])