"""Growable slot arrays: the storage behind every dependency edge.

Edges are kept in parallel arrays (observer + slot index on one side, source +
slot index on the other) so either end can be removed in O(1) by swapping the
last entry into the hole. A plain list would do the growing for us; SlotArray
exists so the live length is explicit and shrinking never reallocates.
"""

from __future__ import annotations

from typing import Generic, Iterator, TypeVar

T = TypeVar("T")

INITIAL_CAPACITY = 4


class SlotArray(Generic[T]):
    """Amortized-O(1) append array that doubles its capacity on overflow."""

    __slots__ = ("_items", "_len")

    def __init__(self, capacity: int = 0) -> None:
        self._items: list[T | None] = [None] * capacity
        self._len = 0

    @property
    def capacity(self) -> int:
        return len(self._items)

    def append(self, item: T) -> int:
        """Store item at the end. Returns the index it landed on."""
        if self._len == len(self._items):
            self._grow()
        index = self._len
        self._items[index] = item
        self._len += 1
        return index

    def pop(self) -> T:
        """Remove and return the last live entry."""
        if self._len == 0:
            raise IndexError("pop from empty SlotArray")
        self._len -= 1
        item = self._items[self._len]
        self._items[self._len] = None
        return item

    def clear(self) -> None:
        """Drop every live entry. Capacity is kept."""
        for i in range(self._len):
            self._items[i] = None
        self._len = 0

    def _grow(self) -> None:
        new_capacity = max(INITIAL_CAPACITY, len(self._items) * 2)
        self._items.extend([None] * (new_capacity - len(self._items)))

    def _check(self, index: int) -> None:
        if not 0 <= index < self._len:
            raise IndexError(f"slot {index} out of range (len={self._len})")

    def __getitem__(self, index: int) -> T:
        self._check(index)
        return self._items[index]

    def __setitem__(self, index: int, item: T) -> None:
        self._check(index)
        self._items[index] = item

    def __len__(self) -> int:
        return self._len

    def __iter__(self) -> Iterator[T]:
        for i in range(self._len):
            yield self._items[i]

    def __repr__(self) -> str:
        return f"SlotArray({list(self)!r})"
