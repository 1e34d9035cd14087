"""Memos: cached derived values with automatic dependency tracking.

A Memo wraps a function. It runs once on creation, caching the result and
tracking which signals and memos the function read. When any of those change,
the memo is re-run during the batch drain (or on the next read, whichever
comes first). Observers of the memo are only re-run when the new result
differs from the cached one under the memo's comparator.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from finegrain import _tracking
from finegrain._nodes import Computation, SourceKind, State
from finegrain._runtime import current_runtime
from finegrain._slots import SlotArray
from finegrain.signal import default_equals

T = TypeVar("T")


class Memo(Generic[T]):
    """Read handle for a memo computation."""

    __slots__ = ("_node",)

    def __init__(self, node: Computation) -> None:
        self._node = node

    @property
    def node(self) -> Computation:
        return self._node

    def get(self) -> T:
        """Read the value, bringing it up to date first if it is dirty."""
        node = self._node
        if node.state is State.STALE:
            _tracking.update_computation(node)
        elif node.state is State.PENDING:
            _tracking.look_upstream(node)
            if node.state is State.STALE:
                _tracking.update_computation(node)
        listener = current_runtime().listener
        if listener is not None:
            _tracking.link(listener, node, SourceKind.MEMO)
        return node.cached

    def peek(self) -> T:
        """The cached value. No tracking, no recomputation."""
        return self._node.cached

    def __repr__(self) -> str:
        node = self._node
        if node.fn is None:
            state = "disposed"
        elif node.state is State.CLEAN:
            state = f"cached={node.cached!r}"
        else:
            state = node.state.name.lower()
        return f"Memo({state})"


def create_memo(fn: Callable[[], T], equals: Callable[[T, T], bool] | None = None) -> Memo[T]:
    """Create a memo under the current owner and evaluate it immediately."""
    node: Computation | None = None

    def evaluate(_prev: T | None) -> T:
        value = fn()
        if node.has_cached and not node.comparator(node.cached, value):
            node.cached = value
            _tracking.propagate_change(node)
        else:
            node.cached = value
            node.has_cached = True
        return value

    node = _tracking.create_computation(evaluate, pure=True)
    node.memo_observers = SlotArray()
    node.memo_observer_slots = SlotArray()
    node.comparator = equals or default_equals
    _tracking.update_computation(node)
    return Memo(node)


def memo(fn: Callable[[], T]) -> Memo[T]:
    """Decorator/factory to create a Memo from a function.

    Usage:
        count = create_signal(2)

        @memo
        def doubled():
            return count.get() * 2

        doubled.get()  # 4
    """
    return create_memo(fn)
