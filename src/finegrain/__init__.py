"""finegrain: fine-grained reactive signals, memos and effects for Python."""

from importlib.metadata import version as _version

__version__ = _version("finegrain")

from finegrain._errors import FinegrainError, NoOwnerError, NoRuntimeError
from finegrain._nodes import Computation, Owner, State
from finegrain._runtime import (
    Backend,
    ContextVarBackend,
    Runtime,
    get_backend,
    get_runtime,
    run,
    set_backend,
    set_runtime,
)
from finegrain.signal import Signal, create_signal
from finegrain.memo import Memo, create_memo, memo
from finegrain.owner import create_root, get_owner, on_cleanup, untrack
from finegrain.effect import (
    Effect,
    create_effect,
    create_effect_with_cleanup,
    create_render_effect,
    reaction,
)
from finegrain.batch import action, batch, transaction
from finegrain.context import Context, create_context, provide_context, use_context
# textual NOT auto-imported, opt-in only

__all__ = [
    "Signal",
    "create_signal",
    "Memo",
    "create_memo",
    "memo",
    "Effect",
    "create_effect",
    "create_effect_with_cleanup",
    "create_render_effect",
    "reaction",
    "batch",
    "action",
    "transaction",
    "untrack",
    "create_root",
    "on_cleanup",
    "get_owner",
    "Owner",
    "Computation",
    "State",
    "Context",
    "create_context",
    "use_context",
    "provide_context",
    "Runtime",
    "run",
    "get_runtime",
    "set_runtime",
    "Backend",
    "ContextVarBackend",
    "get_backend",
    "set_backend",
    "FinegrainError",
    "NoRuntimeError",
    "NoOwnerError",
]
