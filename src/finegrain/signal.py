"""Signals: mutable cells that track their readers.

When a Signal is read while a memo or effect is running, the dependency is
registered automatically. When the Signal is written with a different value,
its observers are marked dirty and the batch that follows re-runs them.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from finegrain import _tracking
from finegrain._nodes import Computation, SourceKind
from finegrain._runtime import current_runtime
from finegrain._slots import SlotArray

T = TypeVar("T")


def default_equals(a: object, b: object) -> bool:
    return a is b or a == b


class Signal(Generic[T]):
    """A single reactive value with automatic dependency tracking."""

    __slots__ = ("value", "observers", "observer_slots", "comparator")

    def __init__(self, value: T, equals: Callable[[T, T], bool] | None = None) -> None:
        self.value = value
        self.observers: SlotArray[Computation] = SlotArray()
        self.observer_slots: SlotArray[int] = SlotArray()
        self.comparator = equals or default_equals

    def get(self) -> T:
        """Read the value. If a computation is running, registers the dependency."""
        listener = current_runtime().listener
        if listener is not None:
            _tracking.link(listener, self, SourceKind.SIGNAL)
        return self.value

    def peek(self) -> T:
        """Read the value without tracking. Works outside any runtime."""
        return self.value

    def set(self, value: T) -> None:
        """Write a new value and run the batch that propagates it.

        Writing a value the comparator considers equal does nothing.
        """
        if self.comparator(self.value, value):
            return
        self.value = value
        if not self.observers:
            return
        _tracking.run_updates(lambda: _tracking.mark_observers(self.observers))

    def update(self, fn: Callable[[T], T]) -> None:
        """Write fn(current value), reading the current value untracked."""
        self.set(fn(self.value))

    def __repr__(self) -> str:
        return f"Signal({self.value!r})"


def create_signal(initial: T, equals: Callable[[T, T], bool] | None = None) -> Signal[T]:
    """Factory for a Signal.

    Usage:
        count = create_signal(0)
        count.get()   # 0
        count.set(1)
    """
    return Signal(initial, equals)
