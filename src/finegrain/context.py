"""Context: values scoped to a subtree of owners.

provide_context(ctx, value, fn) binds ctx for the dynamic extent of fn on the
current owner. Anything created inside fn (memos, effects, roots) captures the
binding and keeps seeing it on later re-runs. use_context(ctx) walks up from
the current owner and falls back to the context's default.
"""

from __future__ import annotations

import itertools
from typing import Callable, Generic, TypeVar

from finegrain._nodes import Owner
from finegrain._runtime import get_runtime, run
from finegrain.owner import create_root

T = TypeVar("T")
R = TypeVar("R")

_context_ids = itertools.count()
_MISSING = object()


class Context(Generic[T]):
    """A context key with a default value."""

    __slots__ = ("id", "default")

    def __init__(self, id: int, default: T) -> None:
        self.id = id
        self.default = default

    def __repr__(self) -> str:
        return f"Context(id={self.id}, default={self.default!r})"


def create_context(default: T) -> Context[T]:
    return Context(next(_context_ids), default)


def _find(ctx_id: int, owner: Owner | None) -> object:
    while owner is not None:
        for bound_id, value in owner.context:
            if bound_id == ctx_id:
                return value
        owner = owner.owner
    return _MISSING


def use_context(ctx: Context[T]) -> T:
    """The nearest provided value for ctx, or its default."""
    rt = get_runtime()
    if rt is None or rt.owner is None:
        return ctx.default
    value = _find(ctx.id, rt.owner)
    return ctx.default if value is _MISSING else value


def _provide_in_new_root(ctx: Context[T], value: T, fn: Callable[[], R]) -> R:
    def scoped(_dispose: Callable[[], None]) -> R:
        owner = get_runtime().owner
        owner.context = ((ctx.id, value),) + owner.context
        return fn()

    return create_root(scoped)


def provide_context(ctx: Context[T], value: T, fn: Callable[[], R]) -> R:
    """Call fn with ctx bound to value on the current owner.

    The binding is removed when fn returns or raises. With no runtime or no
    owner active, fn runs inside a fresh root (and runtime) that carries it.
    """
    rt = get_runtime()
    if rt is None:
        return run(lambda: _provide_in_new_root(ctx, value, fn))
    owner = rt.owner
    if owner is None:
        return _provide_in_new_root(ctx, value, fn)
    prev = owner.context
    owner.context = ((ctx.id, value),) + prev
    try:
        return fn()
    finally:
        owner.context = prev
