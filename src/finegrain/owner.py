"""Owners: lifetime scopes for computations and cleanups.

Every memo and effect belongs to the owner that was active when it was
created. Disposing an owner tears down its child scopes, makes its
computations permanently inert, unlinks them from everything they read, and
runs its cleanups newest-first.
"""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from finegrain._errors import NoOwnerError
from finegrain._nodes import Owner
from finegrain._runtime import Runtime, current_runtime, get_runtime, set_runtime
from finegrain._tracking import dispose_owner

T = TypeVar("T")

logger = logging.getLogger("finegrain")


def create_root(fn: Callable[[Callable[[], None]], T]) -> T:
    """Open a root scope, call fn(dispose) inside it, return fn's result.

    Nested under the current owner when there is one, so disposing the outer
    scope disposes this one too. When no runtime is active, one is created
    and installed; it stays installed until replaced.

    Usage:
        def app(dispose):
            count = create_signal(0)
            create_effect(lambda: print(count.get()))
            return count, dispose

        count, dispose = create_root(app)
        count.set(1)   # prints 1
        dispose()
        count.set(2)   # prints nothing
    """
    rt = get_runtime()
    if rt is None:
        rt = Runtime()
        set_runtime(rt)
        logger.debug("Installed runtime %r for new root", rt)
    prev_owner = rt.owner
    root = Owner(prev_owner, prev_owner.context if prev_owner is not None else ())
    if prev_owner is not None:
        prev_owner.child_owners.append(root)

    def dispose() -> None:
        dispose_owner(root)

    rt.owner = root
    try:
        return fn(dispose)
    finally:
        rt.owner = prev_owner


def on_cleanup(fn: Callable[[], None]) -> None:
    """Register fn to run when the current scope is disposed or re-run."""
    owner = current_runtime().owner
    if owner is None:
        raise NoOwnerError("on_cleanup() called outside of any owner scope.")
    owner.cleanups.append(fn)


def get_owner() -> Owner | None:
    """The scope new computations currently attach to."""
    return current_runtime().owner


def untrack(fn: Callable[[], T]) -> T:
    """Call fn without registering any of its reads as dependencies."""
    rt = current_runtime()
    prev = rt.listener
    rt.listener = None
    try:
        return fn()
    finally:
        rt.listener = prev
