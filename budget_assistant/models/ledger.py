"""
Core Data Models for Budget Assistant

These models define the schemas for everything flowing through the ledger:
1. Budgets and transactions as read from / written to storage
2. Derived views (budget status, period summary)
3. Validation issues reported before any write

DESIGN DECISION: Money is always Decimal. Floats only appear on the JSON
wire for the structured summary, where consumers expect plain numbers.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
)
from pydantic.alias_generators import to_camel


# Decimal in Python, plain number in JSON
Money = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]

DEFAULT_ALERT_THRESHOLD = Decimal("80")


# =============================================================================
# ENUMS
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a transaction."""
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"

    @property
    def marker(self) -> str:
        """Emoji shown next to transactions of this type."""
        return "💰" if self is TransactionType.INCOME else "💸"


# =============================================================================
# PERSISTED MODELS
# =============================================================================

class Budget(BaseModel):
    """
    A monthly spending limit for one category.

    CRITICAL: At most one ACTIVE budget may exist per
    (category, year, month). This is checked by the domain service
    before insert - storage does not enforce it.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[int] = Field(
        default=None,
        description="Storage-assigned identifier"
    )
    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Free-text category label (e.g., Food)"
    )
    monthly_limit: Decimal = Field(
        ...,
        gt=0,
        description="Spending limit for the month"
    )
    year: int = Field(
        ...,
        ge=1,
        le=9999,
        description="Budget year"
    )
    month: int = Field(
        ...,
        ge=1,
        le=12,
        description="Budget month (1-12)"
    )
    notes: Optional[str] = Field(
        default=None,
        max_length=500,
        description="Optional notes"
    )
    alert_threshold: Decimal = Field(
        default=DEFAULT_ALERT_THRESHOLD,
        gt=0,
        le=100,
        description="Percentage of the limit that triggers a warning"
    )
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def period_label(self) -> str:
        return f"{self.month}/{self.year}"


class Transaction(BaseModel):
    """
    A single income or expense entry.

    Transactions are immutable once stored - there is no update
    or delete path.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[int] = None
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Transaction amount (always positive)"
    )
    description: str = Field(
        ...,
        max_length=255,
        description="What the transaction was for"
    )
    transaction_date: date = Field(
        ...,
        description="Calendar date of the transaction (column: date)"
    )
    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
    )
    type: TransactionType
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def formatted_date(self) -> str:
        """Date as shown to users, e.g. 'Jun 01, 2025'."""
        return self.transaction_date.strftime("%b %d, %Y")


# =============================================================================
# DERIVED MODELS (never persisted)
# =============================================================================

class BudgetSummary(BaseModel):
    """
    Income/expense totals for one calendar month.

    This is the only structured (non-text) tool result. On the wire it
    uses camelCase names: totalIncome, totalExpenses, netAmount.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    total_income: Money
    total_expenses: Money
    net_amount: Money

    @classmethod
    def of(cls, total_income: Decimal, total_expenses: Decimal) -> "BudgetSummary":
        """Build a summary, treating missing totals as zero."""
        income = total_income if total_income is not None else Decimal("0")
        expenses = total_expenses if total_expenses is not None else Decimal("0")
        return cls(
            total_income=income,
            total_expenses=expenses,
            net_amount=income - expenses,
        )

    @classmethod
    def empty(cls) -> "BudgetSummary":
        """The all-zero summary used whenever a read fails."""
        return cls.of(Decimal("0"), Decimal("0"))

    def to_wire(self) -> dict:
        """JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class BudgetStatus(BaseModel):
    """
    Spending status of one active budget in its own period.

    percent_used keeps the 4-place ratio times 100 for the threshold
    comparison; display_percent is rounded to one decimal for users.
    """

    budget: Budget
    spent: Decimal
    remaining: Decimal
    percent_used: Decimal
    display_percent: Decimal
    over_threshold: bool

    @property
    def marker(self) -> str:
        return "⚠️" if self.over_threshold else "✅"


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found in tool input."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'invalid_format')"
    )
    message: str = Field(
        ...,
        description="User-facing message, shown verbatim"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """Result of validating one operation's input."""

    validated_at: datetime = Field(
        default_factory=datetime.utcnow
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def first_error(self) -> Optional[ValidationIssue]:
        for issue in self.issues:
            if issue.severity == "error":
                return issue
        return None

    @field_validator("issues")
    @classmethod
    def errors_first(cls, v: list[ValidationIssue]) -> list[ValidationIssue]:
        """Keep errors ahead of warnings so the first message is the blocking one."""
        return sorted(v, key=lambda issue: issue.severity != "error")
