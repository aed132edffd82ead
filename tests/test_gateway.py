"""
Tests for the direct query gateway.
"""

from decimal import Decimal

from budget_assistant.errors import ErrorKind
from budget_assistant.models.ledger import BudgetSummary
from budget_assistant.tools import BudgetSummaryGateway, LocalToolChannel, ToolChannel, ToolResult
from budget_assistant.tools.registry import TextContent


class StubChannel(ToolChannel):
    """Returns a canned result (or raises) and records calls."""

    def __init__(self, result=None, exc=None):
        self.result = result
        self.exc = exc
        self.calls = []

    def call_tool(self, name, arguments):
        self.calls.append((name, arguments))
        if self.exc is not None:
            raise self.exc
        return self.result


class TestBudgetSummaryGateway:
    """Tests for BudgetSummaryGateway."""

    def test_reads_summary_through_local_channel(self, registry, service, audit_logger):
        service.add_transaction(Decimal("3000"), "Salary", "Salary", "INCOME", "2025-06-01")
        service.add_transaction(Decimal("45.50"), "Groceries", "Food", "EXPENSE", "2025-06-02")
        gateway = BudgetSummaryGateway([LocalToolChannel(registry)], audit_logger=audit_logger)

        summary = gateway.get_totals(2025, 6)

        assert summary.total_income == Decimal("3000")
        assert summary.total_expenses == Decimal("45.5")
        assert summary.net_amount == Decimal("2954.5")

    def test_passes_year_and_month(self, audit_logger):
        channel = StubChannel(ToolResult.text(
            '{"totalIncome": 1, "totalExpenses": 2, "netAmount": -1}'
        ))
        gateway = BudgetSummaryGateway([channel], audit_logger=audit_logger)

        result = gateway.fetch_totals(2024, 2)

        assert result.ok
        assert result.value.net_amount == Decimal("-1")
        assert channel.calls == [("getSummary", {"year": 2024, "month": 2})]

    def test_no_channels_is_transport_failure(self, audit_logger, recording_logger):
        gateway = BudgetSummaryGateway([], audit_logger=audit_logger)

        result = gateway.fetch_totals(2025, 6)

        assert result.kind == ErrorKind.TRANSPORT
        assert gateway.get_totals(2025, 6) == BudgetSummary.empty()
        assert "summary_fallback" in recording_logger.event_types()

    def test_channel_exception_falls_back_to_zero(self, audit_logger):
        gateway = BudgetSummaryGateway(
            [StubChannel(exc=RuntimeError("connection refused"))], audit_logger=audit_logger
        )

        result = gateway.fetch_totals(2025, 6)

        assert result.kind == ErrorKind.TRANSPORT
        assert "connection refused" in result.message
        assert gateway.get_totals(2025, 6).net_amount == Decimal("0")

    def test_error_result_is_transport_failure(self, audit_logger):
        channel = StubChannel(ToolResult.error("❌ Unknown tool: getSummary", ErrorKind.TRANSPORT))
        gateway = BudgetSummaryGateway([channel], audit_logger=audit_logger)

        assert gateway.fetch_totals(2025, 6).kind == ErrorKind.TRANSPORT

    def test_malformed_json_is_decode_failure(self, audit_logger):
        gateway = BudgetSummaryGateway(
            [StubChannel(ToolResult.text("not json"))], audit_logger=audit_logger
        )

        result = gateway.fetch_totals(2025, 6)

        assert result.kind == ErrorKind.DECODE
        assert result.value is None
        assert gateway.get_totals(2025, 6) == BudgetSummary.empty()

    def test_missing_text_block_is_decode_failure(self, audit_logger):
        gateway = BudgetSummaryGateway([StubChannel(ToolResult())], audit_logger=audit_logger)

        assert gateway.fetch_totals(2025, 6).kind == ErrorKind.DECODE

    def test_only_first_channel_is_used(self, audit_logger):
        first = StubChannel(ToolResult(content=[TextContent(
            text='{"totalIncome": 5, "totalExpenses": 0, "netAmount": 5}'
        )]))
        second = StubChannel(exc=AssertionError("should not be called"))
        gateway = BudgetSummaryGateway([first, second], audit_logger=audit_logger)

        assert gateway.get_totals(2025, 6).total_income == Decimal("5")
        assert second.calls == []
