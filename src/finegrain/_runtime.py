"""Runtime state and the backend seam.

A Runtime is one reactive session: who is tracking reads right now, which
scope new computations attach to, and what is queued for the current batch.

Where the *current* runtime lives is up to the backend. The default keeps it in
a ContextVar, so each thread and each asyncio task copy sees its own session
(e.g. concurrent server-render passes never share queues).
"""

from __future__ import annotations

import contextvars
import logging
from typing import TYPE_CHECKING, Callable, Protocol, TypeVar

from finegrain._errors import NoRuntimeError

if TYPE_CHECKING:
    from finegrain._nodes import Computation, Owner

T = TypeVar("T")

logger = logging.getLogger("finegrain")


class Runtime:
    """Mutable scheduler state for one reactive session."""

    __slots__ = ("listener", "owner", "updates", "effects", "exec_count", "in_update")

    def __init__(self) -> None:
        self.listener: Computation | None = None
        self.owner: Owner | None = None
        self.updates: list[Computation] = []
        self.effects: list[Computation] = []
        self.exec_count = 0
        self.in_update = False

    def __repr__(self) -> str:
        return (
            f"Runtime(exec_count={self.exec_count}, in_update={self.in_update}, "
            f"updates={len(self.updates)}, effects={len(self.effects)})"
        )


class Backend(Protocol):
    """Capabilities the scheduler needs from its host environment."""

    def get_runtime(self) -> Runtime | None: ...

    def set_runtime(self, runtime: Runtime | None) -> None: ...

    def handle_error(self, exc: BaseException, context: str) -> None:
        """Report a memo/effect failure caught during drain. Must not raise."""
        ...


class ContextVarBackend:
    """Default backend: runtime in a ContextVar, failures to the logger."""

    def __init__(self) -> None:
        self._current: contextvars.ContextVar[Runtime | None] = contextvars.ContextVar(
            "finegrain_runtime", default=None
        )

    def get_runtime(self) -> Runtime | None:
        return self._current.get()

    def set_runtime(self, runtime: Runtime | None) -> None:
        self._current.set(runtime)

    def handle_error(self, exc: BaseException, context: str) -> None:
        logger.error("Error in %s: %s", context, exc, exc_info=exc)


_backend: Backend = ContextVarBackend()


def set_backend(backend: Backend) -> None:
    """Replace the process-wide backend.

    Call once at startup, before any runtime is created:
        finegrain.set_backend(MyBackend())
    """
    global _backend
    _backend = backend


def get_backend() -> Backend:
    return _backend


def get_runtime() -> Runtime | None:
    """The active runtime, or None outside of any session."""
    return _backend.get_runtime()


def set_runtime(runtime: Runtime | None) -> None:
    """Install runtime as the active session (None clears it)."""
    _backend.set_runtime(runtime)


def current_runtime() -> Runtime:
    """The active runtime. Raises NoRuntimeError when there is none."""
    rt = _backend.get_runtime()
    if rt is None:
        raise NoRuntimeError()
    return rt


def run(fn: Callable[[], T]) -> T:
    """Run fn inside a fresh, isolated runtime.

    The previous runtime (if any) is restored when fn returns or raises.

    Usage:
        def render():
            count = create_signal(1)
            ...
            return html

        page = run(lambda: create_root(lambda dispose: render()))
    """
    rt = Runtime()
    prev = _backend.get_runtime()
    _backend.set_runtime(rt)
    logger.debug("Opened isolated runtime %r", rt)
    try:
        return fn()
    finally:
        _backend.set_runtime(prev)
