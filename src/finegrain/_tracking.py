"""Dependency tracking and scheduling: the heart of finegrain.

Reads performed while a computation runs register bidirectional edges:
the reader records (source, slot, kind) and the source records
(observer, slot). Each side stores the other's index, so an edge is removed
in O(1) by swapping the last entry into its place.

Writes mark dependents dirty in two strengths. Direct observers of a written
signal become STALE (will re-run). Everything further downstream of a memo
becomes PENDING (might re-run). A PENDING node only upgrades to STALE when an
upstream memo actually produces a different value, which is what keeps diamond
graphs from recomputing twice or seeing half-updated inputs.

Batching: every write, and every top-level effect creation, runs inside
run_updates(). The outermost call drains the queues to a fixed point: memos
first, then system effects, then user effects, repeating until quiet.
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from finegrain._errors import NoOwnerError
from finegrain._nodes import Computation, Owner, SourceKind, State
from finegrain._runtime import Runtime, current_runtime, get_backend
from finegrain._slots import SlotArray

T = TypeVar("T")


# ─── Edges ───────────────────────────────────────────────────────────────────


def _observer_arrays(source: Any, kind: SourceKind) -> tuple[SlotArray, SlotArray]:
    if kind is SourceKind.SIGNAL:
        return source.observers, source.observer_slots
    return source.memo_observers, source.memo_observer_slots


def link(listener: Computation, source: Any, kind: SourceKind) -> None:
    """Record that listener read source during its current run."""
    if listener.fn is None:
        return
    observers, observer_slots = _observer_arrays(source, kind)
    index = listener.sources.append(source)
    listener.source_slots.append(len(observers))
    listener.source_kinds.append(kind)
    observers.append(listener)
    observer_slots.append(index)


def _unlink(source: Any, kind: SourceKind, slot: int) -> None:
    observers, observer_slots = _observer_arrays(source, kind)
    if not observers:
        return
    last = len(observers) - 1
    if slot < last:
        moved = observers[last]
        moved_slot = observer_slots[last]
        observers[slot] = moved
        observer_slots[slot] = moved_slot
        moved.source_slots[moved_slot] = slot
    observers.pop()
    observer_slots.pop()


def unlink_sources(node: Computation) -> None:
    """Remove every edge node recorded during its last run."""
    for i in range(len(node.sources)):
        _unlink(node.sources[i], node.source_kinds[i], node.source_slots[i])
    node.sources.clear()
    node.source_slots.clear()
    node.source_kinds.clear()


# ─── Teardown ────────────────────────────────────────────────────────────────


def _run_cleanups(owner: Owner) -> None:
    cleanups, owner.cleanups = owner.cleanups, []
    for cleanup in reversed(cleanups):
        cleanup()


def clean_node(node: Computation) -> None:
    """Reset node for a re-run: unlink, tear down children, run cleanups."""
    unlink_sources(node)
    child_owners, node.child_owners = node.child_owners, []
    for child in reversed(child_owners):
        dispose_owner(child)
    owned, node.owned = node.owned, []
    for child in reversed(owned):
        clean_node(child)
    _run_cleanups(node)
    node.state = State.CLEAN


def dispose_owner(owner: Owner) -> None:
    """Permanently retire owner and everything it owns.

    Depth-first: child scopes, then owned computations (made inert), then
    cleanups in LIFO order, then detach from the parent scope.
    """
    child_owners, owner.child_owners = owner.child_owners, []
    for child in reversed(child_owners):
        dispose_owner(child)
    owned, owner.owned = owner.owned, []
    for comp in reversed(owned):
        comp.fn = None
        clean_node(comp)
    _run_cleanups(owner)
    parent = owner.owner
    if parent is not None:
        parent.child_owners = [c for c in parent.child_owners if c is not owner]


# ─── Marking ─────────────────────────────────────────────────────────────────


def _enqueue(rt: Runtime, node: Computation) -> None:
    if node.pure:
        rt.updates.append(node)
    else:
        rt.effects.append(node)


def mark_downstream(node: Computation) -> None:
    """Tentatively dirty everything that depends on memo node's value."""
    rt = current_runtime()
    observers = node.memo_observers
    if observers is None:
        return
    for i in range(len(observers)):
        o = observers[i]
        if o.state is State.CLEAN:
            o.state = State.PENDING
            _enqueue(rt, o)
            if o.is_memo:
                mark_downstream(o)


def mark_observers(observers: SlotArray[Computation]) -> None:
    """Definitely dirty the direct observers of a written signal."""
    rt = current_runtime()
    for i in range(len(observers)):
        o = observers[i]
        if o.state is State.CLEAN:
            _enqueue(rt, o)
            if o.is_memo:
                mark_downstream(o)
        o.state = State.STALE


def propagate_change(node: Computation) -> None:
    """Memo node produced a new value: upgrade its observers to STALE."""
    rt = current_runtime()
    observers = node.memo_observers
    if observers is None:
        return
    for i in range(len(observers)):
        o = observers[i]
        if o.state is State.CLEAN:
            o.state = State.STALE
            _enqueue(rt, o)
        elif o.state is State.PENDING:
            o.state = State.STALE


# ─── Execution ───────────────────────────────────────────────────────────────


def _adopt(node: Computation, scope: Owner) -> None:
    node.owned = scope.owned
    node.cleanups = scope.cleanups
    node.child_owners = scope.child_owners
    for comp in node.owned:
        comp.owner = node
    for child in node.child_owners:
        child.owner = node


def run_computation(node: Computation) -> None:
    """Evaluate node.fn with node tracking reads and owning what it creates.

    Whatever was registered before a failure is still adopted, so partial
    resources get cleaned up on the next run or disposal.
    """
    fn = node.fn
    if fn is None:
        return
    rt = current_runtime()
    prev_listener, prev_owner = rt.listener, rt.owner
    scope = Owner(node.owner, node.context)
    rt.listener = node
    rt.owner = scope
    try:
        node.value = fn(node.value)
        node.updated_at = rt.exec_count
    finally:
        _adopt(node, scope)
        rt.listener = prev_listener
        rt.owner = prev_owner
        if node.fn is None:
            # disposed by its own run
            unlink_sources(node)
            dispose_owner(node)
            node.state = State.CLEAN


def update_computation(node: Computation) -> None:
    if node.fn is None:
        return
    clean_node(node)
    run_computation(node)


def look_upstream(node: Computation) -> None:
    """Settle a PENDING node by checking its direct memo sources once.

    Any direct source still STALE is brought up to date, which upgrades node to
    STALE if that source's value changed. PENDING ancestors further up are not
    chased; if nothing upgraded node, it is considered clean.
    """
    for i in range(len(node.sources)):
        if node.source_kinds[i] is SourceKind.MEMO:
            source = node.sources[i]
            if source.state is State.STALE:
                update_computation(source)
    if node.state is State.PENDING:
        node.state = State.CLEAN


def run_top(node: Computation) -> None:
    if node.state is State.CLEAN:
        return
    if node.state is State.PENDING:
        node.state = State.CLEAN
        return
    update_computation(node)


def _run_queue(nodes: list[Computation], context: str) -> None:
    handle_error = get_backend().handle_error
    for node in nodes:
        try:
            run_top(node)
        except Exception as exc:
            handle_error(exc, context)


def complete_updates(rt: Runtime) -> None:
    """Drain the queues to a fixed point."""
    while rt.updates or rt.effects:
        while rt.updates:
            updates, rt.updates = rt.updates, []
            _run_queue(updates, "memo")
        effects, rt.effects = rt.effects, []
        _run_queue([e for e in effects if not e.user], "effect")
        _run_queue([e for e in effects if e.user], "effect")


# ─── Batches ─────────────────────────────────────────────────────────────────


def begin_updates(rt: Runtime, *, init: bool = False) -> bool:
    """Open a batch. Returns False when one is already open (nested call)."""
    if rt.in_update:
        return False
    rt.in_update = True
    rt.exec_count += 1
    if not init:
        rt.updates = []
        rt.effects = []
    return True


def finish_updates(rt: Runtime) -> None:
    try:
        complete_updates(rt)
    except BaseException:
        abort_updates(rt)
        raise
    rt.in_update = False


def abort_updates(rt: Runtime) -> None:
    """Drop the current batch. Queued nodes go back to CLEAN so later writes re-enqueue them."""
    queued, rt.updates, rt.effects = rt.updates + rt.effects, [], []
    rt.in_update = False
    for node in queued:
        node.state = State.CLEAN


def run_updates(fn: Callable[[], T], *, init: bool = False) -> T:
    """Run fn as one batch, then drain everything it dirtied.

    Nested calls run fn inline and leave draining to the outermost batch.
    ``init`` keeps whatever is already queued (used when creating effects).
    """
    rt = current_runtime()
    if not begin_updates(rt, init=init):
        return fn()
    try:
        result = fn()
    except BaseException:
        abort_updates(rt)
        raise
    finish_updates(rt)
    return result


# ─── Construction ────────────────────────────────────────────────────────────


def create_computation(
    fn: Callable[[Any], Any],
    init: Any = None,
    *,
    pure: bool,
    state: State = State.STALE,
) -> Computation:
    """Build a computation attached to the current owner."""
    rt = current_runtime()
    owner = rt.owner
    if owner is None:
        raise NoOwnerError()
    comp = Computation(fn, init, pure=pure, state=state, owner=owner, context=owner.context)
    owner.owned.append(comp)
    return comp
