"""
Direct Query Gateway

Reads the structured monthly summary without going through the LLM.
Used by the UI's quick stats.

DESIGN DECISION: fetch_totals() keeps failures classified
(TransportError / DecodeError) for callers and tests that care;
get_totals() is the failure-silent surface that always returns a
summary, zero when anything went wrong.
"""

from typing import Optional

from pydantic import ValidationError

from budget_assistant.audit.logger import AuditLogger
from budget_assistant.errors import DecodeError, TransportError
from budget_assistant.models.ledger import BudgetSummary
from budget_assistant.models.result import OperationResult
from budget_assistant.tools.channel import ToolChannel


SUMMARY_TOOL = "getSummary"


class BudgetSummaryGateway:
    """
    Structured summary reads over the first available tool channel.
    """

    def __init__(
        self,
        channels: list[ToolChannel],
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._channels = list(channels)
        self._audit_logger = audit_logger or AuditLogger()

    def fetch_totals(self, year: int, month: int) -> OperationResult[BudgetSummary]:
        """
        Call getSummary on the first channel and decode its text.

        Returns:
            OperationResult with the summary, or a TransportError /
            DecodeError. Failures carry no partial value.
        """
        if not self._channels:
            return self._fallback(year, month, TransportError("No tool channel available"))

        channel = self._channels[0]
        try:
            result = channel.call_tool(SUMMARY_TOOL, {"year": year, "month": month})
        except Exception as e:
            return self._fallback(year, month, TransportError(f"{SUMMARY_TOOL} call failed: {e}"))

        if result.is_error:
            return self._fallback(
                year, month, TransportError(result.first_text or f"{SUMMARY_TOOL} failed")
            )

        text = result.first_text
        if text is None:
            text = "{}"

        try:
            summary = BudgetSummary.model_validate_json(text)
        except ValidationError as e:
            return self._fallback(
                year, month, DecodeError(f"Malformed {SUMMARY_TOOL} payload: {e}")
            )

        self._audit_logger.log_summary_fetched(year, month, str(summary.net_amount))
        return OperationResult.success(summary)

    def get_totals(self, year: int, month: int) -> BudgetSummary:
        """Totals for a month; the zero summary on any failure."""
        return self.fetch_totals(year, month).unwrap_or(BudgetSummary.empty())

    def _fallback(self, year: int, month: int, error) -> OperationResult[BudgetSummary]:
        self._audit_logger.log_summary_fallback(year, month, error.kind.value, error.message)
        return OperationResult.failure(error)
