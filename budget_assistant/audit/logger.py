"""
Audit Logger

DESIGN DECISION: Every ledger write, tool call and chat turn is logged.
This provides:
1. Traceability of what the agent did on the user's behalf
2. Debugging capability when tools reject input
3. A record of failures that the user only saw as a short message

The audit logger:
- Writes structured records through structlog
- Never raises (a logging failure must not break a tool call)
- Supports correlation IDs to tie tool calls to the chat turn that caused them
"""

import logging
import sys
from typing import Any, Optional
from uuid import UUID, uuid4

import structlog

from budget_assistant.models.audit import AuditEvent, AuditEventBuilder


def configure_logging(log_level: str = "INFO", json_logs: bool = True) -> None:
    """
    Configure structlog on top of the standard library logger.

    Call once at process start (the orchestrator does this).
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Every component that changes the ledger or talks to the agent
    receives one of these (or builds a default one).
    """

    def __init__(self, logger: Optional[Any] = None):
        """
        Initialize audit logger.

        Args:
            logger: structlog-compatible logger. Defaults to
                    structlog.get_logger("budget_assistant.audit").
        """
        self._logger = logger or structlog.get_logger("budget_assistant.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the log call itself failed.
        """
        log_dict = event.to_log_dict()
        try:
            if event.severity.value == "error":
                self._logger.error("audit_event", **log_dict)
            elif event.severity.value == "warning":
                self._logger.warning("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            return False
        return True

    def log_budget_created(
        self,
        budget_id: Optional[int],
        category: str,
        monthly_limit: str,
        period: str,
    ) -> None:
        self.log(AuditEventBuilder.budget_created(
            budget_id=budget_id,
            category=category,
            monthly_limit=monthly_limit,
            period=period,
        ))

    def log_transaction_added(
        self,
        transaction_id: Optional[int],
        transaction_type: str,
        amount: str,
        category: str,
    ) -> None:
        self.log(AuditEventBuilder.transaction_added(
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            amount=amount,
            category=category,
        ))

    def log_operation_rejected(self, operation: str, kind: str, message: str) -> None:
        self.log(AuditEventBuilder.operation_rejected(
            operation=operation,
            kind=kind,
            message=message,
        ))

    def log_operation_failed(self, operation: str, error_message: str) -> None:
        self.log(AuditEventBuilder.operation_failed(
            operation=operation,
            error_message=error_message,
        ))

    def log_tool_invoked(
        self,
        tool_name: str,
        arguments: dict[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.tool_invoked(
            tool_name=tool_name,
            arguments=arguments,
            correlation_id=correlation_id,
        ))

    def log_tool_dispatch_failed(
        self,
        tool_name: str,
        kind: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.tool_dispatch_failed(
            tool_name=tool_name,
            kind=kind,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_chat_message_received(
        self,
        conversation_id: str,
        message_length: int,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.chat_message_received(
            conversation_id=conversation_id,
            message_length=message_length,
            correlation_id=correlation_id,
        ))

    def log_chat_reply_generated(
        self,
        conversation_id: str,
        reply_length: int,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.chat_reply_generated(
            conversation_id=conversation_id,
            reply_length=reply_length,
            correlation_id=correlation_id,
        ))

    def log_chat_failed(
        self,
        conversation_id: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.chat_failed(
            conversation_id=conversation_id,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_memory_cleared(self, conversation_id: str) -> None:
        self.log(AuditEventBuilder.memory_cleared(conversation_id))

    def log_summary_fetched(self, year: int, month: int, net_amount: str) -> None:
        self.log(AuditEventBuilder.summary_fetched(year, month, net_amount))

    def log_summary_fallback(
        self,
        year: int,
        month: int,
        kind: str,
        error_message: str,
    ) -> None:
        self.log(AuditEventBuilder.summary_fallback(year, month, kind, error_message))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a chat turn and pass it to every
    tool call made while answering it.
    """
    return uuid4()
