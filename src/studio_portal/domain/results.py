"""Result values returned by workflow guards and actions."""

from dataclasses import dataclass
from enum import StrEnum


class WorkflowError(StrEnum):
    """Failure codes a workflow action can report."""

    NOT_AUTHENTICATED = "not_authenticated"
    NOT_FOUND = "not_found"
    LOCKED_STATE = "locked_state"
    EMPTY_SELECTION = "empty_selection"
    LIMIT_EXCEEDED = "limit_exceeded"
    ALREADY_SUBMITTED = "already_submitted"
    DUPLICATE_SELECTION = "duplicate_selection"
    NOT_ALL_APPROVED = "not_all_approved"
    WRITE_CONFLICT = "write_conflict"
    STORE_WRITE_FAILED = "store_write_failed"


@dataclass(frozen=True)
class GuardResult:
    """Outcome of a workflow precondition check."""

    error: WorkflowError | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        """Return True when the check passed."""
        return self.error is None


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a state-changing action."""

    success: bool
    error: WorkflowError | None = None
    message: str | None = None

    @classmethod
    def ok(cls) -> "ActionResult":
        return cls(success=True)

    @classmethod
    def failure(cls, error: WorkflowError, message: str) -> "ActionResult":
        return cls(success=False, error=error, message=message)

    @classmethod
    def from_guard(cls, guard: GuardResult) -> "ActionResult":
        if guard.ok:
            return cls.ok()
        return cls(success=False, error=guard.error, message=guard.message)

    @classmethod
    def unexpected(cls) -> "ActionResult":
        return cls.failure(
            WorkflowError.STORE_WRITE_FAILED, "An unexpected error occurred"
        )

    def to_dict(self) -> dict[str, object]:
        """Serialize the result for API responses."""
        return {
            "success": self.success,
            "error": self.error.value if self.error else None,
            "message": self.message,
        }
