"""
Tests for Budget Assistant models

Test strategy:
1. Unit tests for individual components (models, results)
2. Integration tests for flows (with stub agents, in-memory storage)
3. No real API calls in tests
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from budget_assistant.errors import ConflictError, ErrorKind, UnhandledError
from budget_assistant.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from budget_assistant.models.chat import ChatMessage, ChatResponse, ChatRole
from budget_assistant.models.ledger import (
    Budget,
    BudgetSummary,
    Transaction,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)
from budget_assistant.models.result import OperationResult


class TestLedgerModels:
    """Tests for budget and transaction models."""

    def test_budget_defaults(self):
        """Test Budget defaults to an active 80% threshold."""
        budget = Budget(category="Food", monthly_limit=Decimal("500"), year=2025, month=6)

        assert budget.is_active
        assert budget.alert_threshold == Decimal("80")
        assert budget.period_label == "6/2025"

    def test_budget_strips_category_whitespace(self):
        budget = Budget(category="  Food  ", monthly_limit=Decimal("1"), year=2025, month=6)
        assert budget.category == "Food"

    def test_budget_rejects_bad_month(self):
        """Test that months outside 1-12 are rejected."""
        with pytest.raises(PydanticValidationError):
            Budget(category="Food", monthly_limit=Decimal("1"), year=2025, month=13)

    def test_transaction_rejects_non_positive_amount(self):
        with pytest.raises(PydanticValidationError):
            Transaction(
                amount=Decimal("0"),
                description="x",
                transaction_date=date(2025, 6, 1),
                category="Food",
                type=TransactionType.EXPENSE,
            )

    def test_transaction_formatted_date(self):
        transaction = Transaction(
            amount=Decimal("45.50"),
            description="Groceries",
            transaction_date=date(2025, 6, 1),
            category="Food",
            type=TransactionType.EXPENSE,
        )
        assert transaction.formatted_date == "Jun 01, 2025"

    def test_transaction_type_markers(self):
        assert TransactionType.INCOME.marker == "💰"
        assert TransactionType.EXPENSE.marker == "💸"


class TestBudgetSummary:
    """Tests for the structured summary."""

    def test_net_is_income_minus_expenses(self):
        summary = BudgetSummary.of(Decimal("3000"), Decimal("1200.50"))
        assert summary.net_amount == Decimal("1799.50")

    def test_missing_totals_count_as_zero(self):
        summary = BudgetSummary.of(None, Decimal("10"))
        assert summary.total_income == Decimal("0")
        assert summary.net_amount == Decimal("-10")

    def test_wire_format_is_camel_case_numbers(self):
        wire = BudgetSummary.of(Decimal("100.25"), Decimal("0")).to_wire()
        assert wire == {"totalIncome": 100.25, "totalExpenses": 0.0, "netAmount": 100.25}

    def test_parses_wire_json(self):
        summary = BudgetSummary.model_validate_json(
            '{"totalIncome": 5, "totalExpenses": 2.5, "netAmount": 2.5}'
        )
        assert summary.total_expenses == Decimal("2.5")


class TestValidationModels:
    """Tests for validation models."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(issues=[
            ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="❌ Amount must be greater than 0",
                severity="error",
            ),
        ])
        assert result.has_errors
        assert result.error_count == 1

    def test_errors_sorted_ahead_of_warnings(self):
        result = ValidationResult(issues=[
            ValidationIssue(field="notes", issue_type="long", message="w", severity="warning"),
            ValidationIssue(field="amount", issue_type="invalid_value", message="e"),
        ])
        assert result.first_error.field == "amount"
        assert result.issues[0].severity == "error"

    def test_validation_result_no_errors(self):
        result = ValidationResult(issues=[
            ValidationIssue(field="notes", issue_type="long", message="w", severity="warning"),
        ])
        assert not result.has_errors
        assert result.first_error is None


class TestOperationResult:
    """Tests for tagged operation results."""

    def test_success(self):
        result = OperationResult.success("done")
        assert result.ok
        assert result.kind is None
        assert result.as_text() == "done"

    def test_failure_renders_message(self):
        result = OperationResult.failure(ConflictError("❌ Budget exists"))
        assert not result.ok
        assert result.kind == ErrorKind.CONFLICT
        assert result.as_text() == "❌ Budget exists"

    def test_unwrap_or_default_on_failure(self):
        result = OperationResult.failure(UnhandledError("boom"))
        assert result.unwrap_or(BudgetSummary.empty()) == BudgetSummary.empty()


class TestChatModels:
    def test_message_to_turn(self):
        message = ChatMessage(role=ChatRole.USER, content="hi")
        assert message.to_turn() == {"role": "user", "content": "hi"}

    def test_error_response(self):
        response = ChatResponse.error("Invalid request: Message cannot be empty")
        assert response.role == ChatRole.ASSISTANT
        assert response.content == "❌ Invalid request: Message cannot be empty"
        assert response.timestamp > 0

    def test_responses_are_always_from_assistant(self):
        assert ChatResponse.assistant("ok").role == ChatRole.ASSISTANT
        assert not hasattr(ChatResponse, "user")


class TestAuditModels:
    """Tests for audit models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.BUDGET_CREATED,
            entity_type="budget",
            entity_id="1",
            description="Budget created for Food",
        )
        assert event.event_type == AuditEventType.BUDGET_CREATED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        correlation_id = uuid4()
        event = AuditEventBuilder.tool_invoked(
            "createBudget", {"monthlyLimit": 500}, correlation_id
        )

        log_dict = event.to_log_dict()

        assert log_dict["event_type"] == "tool_invoked"
        assert log_dict["correlation_id"] == str(correlation_id)
        assert log_dict["details"] == {"arguments": {"monthlyLimit": "500"}}

    def test_rejection_is_warning(self):
        event = AuditEventBuilder.operation_rejected(
            "createBudget", "conflict", "❌ Budget exists"
        )
        assert event.severity == AuditSeverity.WARNING
        assert event.error_code == "conflict"

    def test_summary_fallback_entity_id(self):
        event = AuditEventBuilder.summary_fallback(2025, 6, "decode", "bad json")
        assert event.entity_id == "2025-06"
        assert event.severity == AuditSeverity.WARNING
