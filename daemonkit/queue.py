"""A FIFO queue that adds at the tail and removes from the head."""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterable, Iterator
from typing import Any, Optional

DestroyFunction = Optional[Callable[[Any], None]]


class Queue:
    """FIFO queue with optional per-item destroy callbacks on removal."""

    def __init__(self, items: Iterable[Any] = ()) -> None:
        self._items: deque[Any] = deque(items)

    def push(self, item: Any) -> Any:
        """Add item to the tail and return it."""
        self._items.append(item)
        return item

    def pop(self, destroy: DestroyFunction = None) -> Any:
        """Remove the head item, calling destroy on it first.

        Returns the removed item, or None if the queue is empty.
        """
        if not self._items:
            return None
        item = self._items.popleft()
        if destroy is not None:
            destroy(item)
        return item

    def peek(self) -> Any:
        """Return the head item without removing it, or None if empty."""
        if not self._items:
            return None
        return self._items[0]

    def clear(self, destroy: DestroyFunction = None) -> None:
        """Remove all items from head to tail, calling destroy on each."""
        while self._items:
            item = self._items.popleft()
            if destroy is not None:
                destroy(item)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)