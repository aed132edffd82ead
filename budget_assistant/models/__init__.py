"""
Data Models Package

This package contains all Pydantic models used in Budget Assistant.
All data flowing through the system must conform to these schemas.
"""

from budget_assistant.models.ledger import (
    DEFAULT_ALERT_THRESHOLD,
    Budget,
    BudgetStatus,
    BudgetSummary,
    Transaction,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)
from budget_assistant.models.chat import (
    APOLOGY_REPLY,
    DEFAULT_CONVERSATION_ID,
    ChatMessage,
    ChatResponse,
    ChatRole,
)
from budget_assistant.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from budget_assistant.models.result import OperationResult

__all__ = [
    # Ledger models
    "DEFAULT_ALERT_THRESHOLD",
    "Budget",
    "BudgetStatus",
    "BudgetSummary",
    "Transaction",
    "TransactionType",
    "ValidationIssue",
    "ValidationResult",
    # Chat models
    "APOLOGY_REPLY",
    "DEFAULT_CONVERSATION_ID",
    "ChatMessage",
    "ChatResponse",
    "ChatRole",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
    # Results
    "OperationResult",
]
