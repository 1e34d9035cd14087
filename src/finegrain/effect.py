"""Effects: side effects triggered by reactive state changes.

Unlike a Memo, an effect produces nothing other nodes can read. It runs once
when created and again after every batch that changed something it read.

Three flavors:
- create_effect(fn): a user effect.
- create_effect_with_cleanup(fn): fn returns a teardown thunk that runs right
  before the next execution and when the owning scope is disposed.
- create_render_effect(fn): a system effect; within one drain pass, system
  effects run before user effects.

reaction(data_fn, effect_fn) builds on these: effect_fn only fires when
data_fn's *result* changes.
"""

from __future__ import annotations

from typing import Callable, TypeVar

from finegrain import _tracking
from finegrain._nodes import Computation, State
from finegrain._runtime import current_runtime
from finegrain.memo import create_memo
from finegrain.owner import on_cleanup, untrack

T = TypeVar("T")

Cleanup = Callable[[], None]


class Effect:
    """Handle for an effect computation."""

    __slots__ = ("_node",)

    def __init__(self, node: Computation) -> None:
        self._node = node

    @property
    def node(self) -> Computation:
        return self._node

    @property
    def disposed(self) -> bool:
        return self._node.fn is None

    def __repr__(self) -> str:
        state = "disposed" if self.disposed else self._node.state.name.lower()
        kind = "user" if self._node.user else "system"
        return f"Effect({kind}, {state})"


def _schedule(node: Computation) -> Effect:
    rt = current_runtime()
    if rt.in_update:
        rt.effects.append(node)
    else:
        _tracking.run_updates(lambda: _tracking.run_top(node), init=True)
    return Effect(node)


def _create(fn: Callable[[], object], *, user: bool) -> Effect:
    node = _tracking.create_computation(lambda _prev: fn(), pure=False, state=State.STALE)
    node.user = user
    return _schedule(node)


def create_effect(fn: Callable[[], object]) -> Effect:
    """Run fn now (or at the end of the current batch) and after every change.

    Usage:
        count = create_signal(0)
        log = []
        create_effect(lambda: log.append(count.get()))
        # log == [0]
        count.set(1)
        # log == [0, 1]
    """
    return _create(fn, user=True)


def create_render_effect(fn: Callable[[], object]) -> Effect:
    """Like create_effect, but drained ahead of user effects."""
    return _create(fn, user=False)


def create_effect_with_cleanup(fn: Callable[[], Cleanup | None]) -> Effect:
    """Effect whose fn returns a teardown thunk.

    The thunk from the previous run is called right before the next run, and
    the last one is called once when the owning scope is disposed.

    Usage:
        def subscribe():
            handle = bus.listen(topic.get(), on_message)
            return handle.close

        create_effect_with_cleanup(subscribe)
    """
    pending: list[Cleanup] = []

    def flush() -> None:
        while pending:
            pending.pop()()

    def body() -> None:
        flush()
        cleanup = fn()
        if cleanup is not None:
            pending.append(cleanup)

    on_cleanup(flush)
    return _create(body, user=True)


def reaction(
    data_fn: Callable[[], T],
    effect_fn: Callable[[T], None],
    *,
    fire_immediately: bool = False,
    equals: Callable[[T, T], bool] | None = None,
) -> Effect:
    """Track data_fn; call effect_fn with its result whenever it changes.

    effect_fn runs untracked: only what data_fn reads drives the reaction.

    Usage:
        first = create_signal("Alice")
        last = create_signal("Smith")
        names = []
        reaction(
            lambda: f"{first.get()} {last.get()}",
            names.append,
        )
        # names == [], data_fn ran to establish deps, effect_fn didn't fire
        first.set("Bob")
        # names == ["Bob Smith"]
    """
    data = create_memo(data_fn, equals)
    initialized = False

    def body() -> None:
        nonlocal initialized
        value = data.get()
        if not initialized:
            initialized = True
            if not fire_immediately:
                return
        untrack(lambda: effect_fn(value))

    return _create(body, user=True)
