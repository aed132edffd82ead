"""
Ledger Input Validation

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - PARSING:
- Date strings must be ISO calendar dates (YYYY-MM-DD)
- Transaction types are matched case-insensitively
- Raises ValidationError immediately (nothing else can be checked
  without a parsed value)

STAGE 2 - RULE CHECKS:
- Limits and amounts must be positive, in whole cents
- Alert thresholds must lie in (0, 100]
- Category must not be blank, month must be 1-12
- Collected into a ValidationResult so every problem is visible,
  the first error is what the user sees

IMPORTANT: Validation NEVER silently fixes issues. A rejected input
means nothing is written.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from budget_assistant.errors import ValidationError
from budget_assistant.models.ledger import (
    TransactionType,
    ValidationIssue,
    ValidationResult,
)


INVALID_TYPE_MESSAGE = "❌ Invalid transaction type. Use INCOME or EXPENSE"


CENTS = Decimal("0.01")


def _whole_cents(value: Decimal) -> bool:
    # Money columns keep two places; anything finer would be rounded away
    return value == value.quantize(CENTS)


def parse_iso_date(value: Optional[str], default: date) -> date:
    """
    Parse a YYYY-MM-DD string; None or blank means default.

    Raises:
        ValidationError: If the string is not an ISO calendar date
    """
    if isinstance(value, date):
        return value
    if value is None or not str(value).strip():
        return default
    text = str(value).strip()
    try:
        # fromisoformat accepts other shapes on newer Pythons; pin the length
        if len(text) != 10:
            raise ValueError(text)
        return date.fromisoformat(text)
    except ValueError:
        raise ValidationError(f"❌ Invalid date '{text}'. Use YYYY-MM-DD format")


def parse_transaction_type(value: Optional[str]) -> TransactionType:
    """
    Match a transaction type case-insensitively.

    Raises:
        ValidationError: For anything other than INCOME / EXPENSE
    """
    if isinstance(value, TransactionType):
        return value
    try:
        return TransactionType(str(value).strip().upper())
    except ValueError:
        raise ValidationError(INVALID_TYPE_MESSAGE)


class LedgerValidator:
    """
    Rule checks for ledger writes.

    Stateless; storage-dependent checks (duplicate budgets) live in
    the domain service.
    """

    def validate_budget(
        self,
        category: Optional[str],
        monthly_limit: Optional[Decimal],
        month: int,
        alert_threshold: Decimal,
    ) -> ValidationResult:
        """Check a budget before the duplicate lookup."""
        issues = []

        if monthly_limit is None or monthly_limit <= 0:
            issues.append(ValidationIssue(
                field="monthly_limit",
                issue_type="invalid_value",
                message="❌ Monthly limit must be greater than 0",
            ))
        elif not _whole_cents(monthly_limit):
            issues.append(ValidationIssue(
                field="monthly_limit",
                issue_type="invalid_format",
                message="❌ Monthly limit cannot have more than 2 decimal places",
            ))

        if alert_threshold <= 0 or alert_threshold > 100:
            issues.append(ValidationIssue(
                field="alert_threshold",
                issue_type="invalid_value",
                message="❌ Alert threshold must be between 1 and 100",
            ))

        if category is None or not category.strip():
            issues.append(ValidationIssue(
                field="category",
                issue_type="missing",
                message="❌ Category is required",
            ))

        if not 1 <= month <= 12:
            issues.append(ValidationIssue(
                field="month",
                issue_type="invalid_value",
                message=f"❌ Invalid month {month}. Use a value from 1 to 12",
            ))

        return ValidationResult(issues=issues)

    def validate_transaction(
        self,
        amount: Optional[Decimal],
        category: Optional[str],
    ) -> ValidationResult:
        """Check a transaction before it is parsed any further."""
        issues = []

        if amount is None or amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="❌ Amount must be greater than 0",
            ))
        elif not _whole_cents(amount):
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message="❌ Amount cannot have more than 2 decimal places",
            ))

        if category is None or not category.strip():
            issues.append(ValidationIssue(
                field="category",
                issue_type="missing",
                message="❌ Category is required",
            ))

        return ValidationResult(issues=issues)

    def validate_period(self, month: int) -> ValidationResult:
        """Check a (year, month) read period."""
        issues = []
        if not 1 <= month <= 12:
            issues.append(ValidationIssue(
                field="month",
                issue_type="invalid_value",
                message=f"❌ Invalid month {month}. Use a value from 1 to 12",
            ))
        return ValidationResult(issues=issues)

    @staticmethod
    def raise_for(result: ValidationResult) -> None:
        """Raise the first error of a result as a ValidationError."""
        if result.has_errors:
            raise ValidationError(result.first_error.message)
