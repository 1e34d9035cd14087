"""Graph node shapes: owners and computations.

A Computation is also an Owner: whatever it creates while running (child
computations, cleanups, nested roots) is adopted by it and torn down the next
time it re-runs or is disposed.

Memos and effects share the Computation shape. ``pure`` tells them apart;
only memos carry ``memo_observers`` (who depends on the memo's *value*).
"""

from __future__ import annotations

import enum
from typing import Any, Callable

from finegrain._slots import SlotArray

Thunk = Callable[[], None]
ContextList = tuple[tuple[int, Any], ...]


class State(enum.IntEnum):
    """Freshness of a computation."""

    CLEAN = 0
    STALE = 1  # definitely re-runs
    PENDING = 2  # queued, may turn out to be a no-op


class SourceKind(enum.Enum):
    """Which observer list a source edge lives in."""

    SIGNAL = "signal"
    MEMO = "memo"


class Owner:
    """A disposal scope for computations, cleanups and context bindings."""

    __slots__ = ("owned", "cleanups", "owner", "context", "child_owners")

    def __init__(self, owner: Owner | None = None, context: ContextList = ()) -> None:
        self.owned: list[Computation] = []
        self.cleanups: list[Thunk] = []
        self.owner = owner
        self.context = context
        self.child_owners: list[Owner] = []

    def __repr__(self) -> str:
        return (
            f"Owner(owned={len(self.owned)}, cleanups={len(self.cleanups)}, "
            f"children={len(self.child_owners)})"
        )


class Computation(Owner):
    """The unit of re-evaluation: a memo (``pure``) or an effect."""

    __slots__ = (
        "fn",
        "state",
        "sources",
        "source_slots",
        "source_kinds",
        "value",
        "updated_at",
        "pure",
        "user",
        "memo_observers",
        "memo_observer_slots",
        "cached",
        "has_cached",
        "comparator",
    )

    def __init__(
        self,
        fn: Callable[[Any], Any] | None,
        value: Any = None,
        *,
        pure: bool,
        state: State = State.STALE,
        owner: Owner | None = None,
        context: ContextList = (),
    ) -> None:
        super().__init__(owner, context)
        self.fn = fn
        self.state = state
        self.sources: SlotArray[Any] = SlotArray()
        self.source_slots: SlotArray[int] = SlotArray()
        self.source_kinds: SlotArray[SourceKind] = SlotArray()
        self.value = value
        self.updated_at = 0
        self.pure = pure
        self.user = False
        # Memo-only
        self.memo_observers: SlotArray[Computation] | None = None
        self.memo_observer_slots: SlotArray[int] | None = None
        self.cached: Any = None
        self.has_cached = False
        self.comparator: Callable[[Any, Any], bool] | None = None

    @property
    def is_memo(self) -> bool:
        return self.memo_observers is not None

    @property
    def disposed(self) -> bool:
        return self.fn is None

    def __repr__(self) -> str:
        kind = "memo" if self.is_memo else ("effect" if self.user else "render_effect")
        status = "disposed" if self.fn is None else self.state.name.lower()
        return f"Computation({kind}, {status}, sources={len(self.sources)})"
