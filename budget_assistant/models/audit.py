"""
Audit Models for Budget Assistant

Every write to the ledger, every tool call the agent makes and every
chat turn produces an audit event. This provides:
1. Traceability of what the agent actually did with the user's data
2. Debugging information when a tool call is rejected or fails
3. Ability to reconstruct a conversation's side effects

DESIGN DECISION: Audit events are emitted as structured log records.
They are append-only - nothing in the system edits them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Ledger writes
    BUDGET_CREATED = "budget_created"
    TRANSACTION_ADDED = "transaction_added"

    # Operation outcomes
    OPERATION_REJECTED = "operation_rejected"
    OPERATION_FAILED = "operation_failed"

    # Tool dispatch
    TOOL_INVOKED = "tool_invoked"
    TOOL_DISPATCH_FAILED = "tool_dispatch_failed"

    # Conversation
    CHAT_MESSAGE_RECEIVED = "chat_message_received"
    CHAT_REPLY_GENERATED = "chat_reply_generated"
    CHAT_FAILED = "chat_failed"
    MEMORY_CLEARED = "memory_cleared"

    # Direct structured reads
    SUMMARY_FETCHED = "summary_fetched"
    SUMMARY_FALLBACK = "summary_fallback"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'budget', 'transaction', 'tool', 'conversation')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID or name of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all tool calls in one chat turn)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.budget_created(budget_id, "Food", "500.00")
        event = AuditEventBuilder.tool_invoked("getSummary", {...}, correlation_id)
    """

    @staticmethod
    def budget_created(
        budget_id: Optional[int],
        category: str,
        monthly_limit: str,
        period: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_CREATED,
            entity_type="budget",
            entity_id=str(budget_id) if budget_id is not None else None,
            description=f"Budget created for {category}",
            details={
                "category": category,
                "monthly_limit": monthly_limit,
                "period": period,
            },
        )

    @staticmethod
    def transaction_added(
        transaction_id: Optional[int],
        transaction_type: str,
        amount: str,
        category: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=str(transaction_id) if transaction_id is not None else None,
            description=f"{transaction_type} transaction added in {category}",
            details={
                "type": transaction_type,
                "amount": amount,
                "category": category,
            },
        )

    @staticmethod
    def operation_rejected(
        operation: str,
        kind: str,
        message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPERATION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="operation",
            entity_id=operation,
            description=f"{operation} rejected ({kind})",
            error_code=kind,
            error_message=message,
        )

    @staticmethod
    def operation_failed(
        operation: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPERATION_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="operation",
            entity_id=operation,
            description=f"{operation} failed",
            error_code="unhandled",
            error_message=error_message,
        )

    @staticmethod
    def tool_invoked(
        tool_name: str,
        arguments: dict[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TOOL_INVOKED,
            entity_type="tool",
            entity_id=tool_name,
            correlation_id=correlation_id,
            description=f"Tool called: {tool_name}",
            details={"arguments": {k: str(v) for k, v in arguments.items()}},
        )

    @staticmethod
    def tool_dispatch_failed(
        tool_name: str,
        kind: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TOOL_DISPATCH_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="tool",
            entity_id=tool_name,
            correlation_id=correlation_id,
            description=f"Tool call could not be dispatched: {tool_name}",
            error_code=kind,
            error_message=error_message,
        )

    @staticmethod
    def chat_message_received(
        conversation_id: str,
        message_length: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CHAT_MESSAGE_RECEIVED,
            entity_type="conversation",
            entity_id=conversation_id,
            correlation_id=correlation_id,
            description="Chat message received",
            details={"message_length": message_length},
        )

    @staticmethod
    def chat_reply_generated(
        conversation_id: str,
        reply_length: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CHAT_REPLY_GENERATED,
            entity_type="conversation",
            entity_id=conversation_id,
            correlation_id=correlation_id,
            description="Chat reply generated",
            details={"reply_length": reply_length},
        )

    @staticmethod
    def chat_failed(
        conversation_id: str,
        error_message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CHAT_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="conversation",
            entity_id=conversation_id,
            correlation_id=correlation_id,
            description="Chat round trip failed",
            error_message=error_message,
        )

    @staticmethod
    def memory_cleared(conversation_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MEMORY_CLEARED,
            entity_type="conversation",
            entity_id=conversation_id,
            description="Conversation memory cleared",
        )

    @staticmethod
    def summary_fetched(year: int, month: int, net_amount: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUMMARY_FETCHED,
            entity_type="summary",
            entity_id=f"{year}-{month:02d}",
            description=f"Direct summary read for {month}/{year}",
            details={"net_amount": net_amount},
        )

    @staticmethod
    def summary_fallback(
        year: int,
        month: int,
        kind: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUMMARY_FALLBACK,
            severity=AuditSeverity.WARNING,
            entity_type="summary",
            entity_id=f"{year}-{month:02d}",
            description=f"Direct summary read for {month}/{year} fell back to zero",
            error_code=kind,
            error_message=error_message,
        )
