"""Batches: grouped writes that propagate once.

Wrapping writes in batch(), @action or `with transaction()` defers all memo
and effect re-runs until the outermost batch ends. Dependents then see every
write at once, never an intermediate mix.
"""

from __future__ import annotations

import functools
from contextlib import contextmanager
from typing import Callable, Iterator, ParamSpec, TypeVar

from finegrain._runtime import current_runtime
from finegrain._tracking import abort_updates, begin_updates, finish_updates, run_updates

P = ParamSpec("P")
R = TypeVar("R")


def batch(fn: Callable[[], R]) -> R:
    """Run fn as a single batch and return its result.

    Usage:
        batch(lambda: (first.set("Bob"), last.set("Jones")))
    """
    return run_updates(fn)


def action(fn: Callable[P, R]) -> Callable[P, R]:
    """Decorator: every call to fn is one batch.

    Usage:
        @action
        def swap():
            a, b = left.get(), right.get()
            left.set(b)
            right.set(a)
            # effects see both writes at once
    """

    @functools.wraps(fn)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        return run_updates(lambda: fn(*args, **kwargs))

    return wrapper


@contextmanager
def transaction() -> Iterator[None]:
    """Context manager form of batch().

    Usage:
        with transaction():
            a.set(1)
            b.set(2)
            # effects run here, after both writes
    """
    rt = current_runtime()
    if not begin_updates(rt):
        yield
        return
    try:
        yield
    except BaseException:
        abort_updates(rt)
        raise
    finish_updates(rt)
