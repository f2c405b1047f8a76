"""A queue list that keeps its items sorted by a key."""

from __future__ import annotations

import bisect
from operator import attrgetter
from typing import Any, Callable, Iterable, Iterator


class OrderedQueueList:
    """Sequence kept in stable ascending order of ``key(item)``.

    Items with equal keys keep the order in which they were added, so the
    list behaves as a priority queue that is first-in-first-out per priority.
    """

    def __init__(self, key: Callable[[Any], Any] = attrgetter("event")) -> None:
        self._key = key
        self._items: list[Any] = []

    def append(self, item: Any) -> None:
        """Add an item after every item whose key is not greater."""
        bisect.insort_right(self._items, item, key=self._key)

    def extendleft(self, items: Iterable[Any]) -> None:
        """Put items back at the front, in the order given, then re-sort.

        Among equal keys the returned items come before those already held.
        """
        merged = list(items)
        merged.extend(self._items)
        merged.sort(key=self._key)
        self._items = merged

    def popleft(self) -> Any:
        """Remove and return the first item; raise IndexError when empty."""
        if not self._items:
            raise IndexError("pop from an empty OrderedQueueList")
        return self._items.pop(0)

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __getitem__(self, index: int) -> Any:
        return self._items[index]

    def __repr__(self) -> str:
        return f"OrderedQueueList({self._items!r})"