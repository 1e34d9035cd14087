"""finegrain error hierarchy.

All finegrain-specific errors inherit from FinegrainError for easy catching.
"""


class FinegrainError(Exception):
    """Base error for all finegrain operations."""


class NoRuntimeError(FinegrainError, RuntimeError):
    """A tracking primitive was used with no reactive runtime active."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message or "No reactive runtime active. Use run() or create_root()."
        )


class NoOwnerError(FinegrainError, RuntimeError):
    """A computation or cleanup was registered outside of any owner scope."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message or "No owner active. Create computations inside create_root()."
        )
