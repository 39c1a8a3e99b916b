"""
FoodieBuddy - Exceptions.

Only remote failures are exceptions. Local validation problems in an
edit session are reported as Conflict values (see ingredients.session).
"""

from typing import Any


class FoodieBuddyError(Exception):
    """Base class for all FoodieBuddy errors."""


class StoreOperationFailed(FoodieBuddyError):
    """A Collection Store call failed."""

    def __init__(self, operation: str, message: str = ""):
        self.operation = operation
        super().__init__(message or f"Store operation failed: {operation}")


class PartialCommitError(StoreOperationFailed):
    """
    A commit stage failed after earlier stages were already applied.

    The store has no cross-document transactions, so nothing is rolled
    back. `refreshed` holds a best-effort refetch of the collection (None
    if that failed too) so callers can show what actually landed.
    """

    def __init__(
        self,
        stage: Any,
        completed_stages: list | None = None,
        errors: list[BaseException] | None = None,
        refreshed: dict | None = None,
    ):
        self.stage = stage
        self.completed_stages = completed_stages or []
        self.errors = errors or []
        self.refreshed = refreshed
        stage_name = getattr(stage, "value", stage)
        super().__init__(
            operation=f"commit:{stage_name}",
            message=f"Commit failed at stage '{stage_name}' ({len(self.errors)} error(s))",
        )
