"""
Tagged operation results.

DESIGN DECISION: Domain operations never raise past their own boundary.
Instead of collapsing every failure into a string immediately, they
return an OperationResult that is either a success value or a
classified error. Callers decide how to render it:

- Text surfaces (tools) call as_text()
- Structured surfaces call unwrap_or(default)

Tests can assert on result.kind instead of parsing message strings.
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from budget_assistant.errors import BudgetAssistantError, ErrorKind

T = TypeVar("T")


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Either a value or a classified error - never both."""

    value: Optional[T] = None
    error: Optional[BudgetAssistantError] = None

    @classmethod
    def success(cls, value: T) -> "OperationResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: BudgetAssistantError) -> "OperationResult[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[ErrorKind]:
        """Error kind, or None on success."""
        return self.error.kind if self.error else None

    @property
    def message(self) -> Optional[str]:
        return self.error.message if self.error else None

    def unwrap_or(self, default: T) -> T:
        """Return the value, or default when the operation failed."""
        if self.error is not None:
            return default
        return self.value

    def as_text(self) -> str:
        """Render for a text surface: the value, or the error message."""
        if self.error is not None:
            return self.error.message
        return str(self.value)
