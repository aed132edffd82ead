"""
Tests for the BudgetAssistant facade and the component factory.

The agent is always a stub; storage is in-memory SQLite.
"""

from datetime import date
from decimal import Decimal

import pytest

from budget_assistant.agents.ai_agents import ChatAgent
from budget_assistant.config import Settings
from budget_assistant.models.chat import APOLOGY_REPLY, ChatRole
from budget_assistant.models.ledger import BudgetSummary
from budget_assistant.orchestrator import (
    HEALTH_MESSAGE,
    MEMORY_CLEARED_MESSAGE,
    QUICK_ACTIONS,
    create_app_components,
)
from budget_assistant.services.storage import InMemoryChatMemory


TODAY = date(2025, 6, 15)


class ScriptedAgent(ChatAgent):
    """Calls at most one tool, then replies with the tool text or a fixed line."""

    def __init__(self, tool_call=None, fail=False):
        self.tool_call = tool_call
        self.fail = fail
        self.tool_counts = []

    async def reply(self, system_instruction, history, message, tools, correlation_id=None):
        self.tool_counts.append(len(tools))
        if self.fail:
            raise RuntimeError("model unavailable")
        if self.tool_call is not None:
            name, arguments = self.tool_call
            return tools.dispatch(name, arguments, correlation_id).first_text
        return f"You said: {message}"


class BrokenMemory(InMemoryChatMemory):
    def get(self, conversation_id, last_n=None):
        raise RuntimeError("memory offline")

    def clear(self, conversation_id):
        raise RuntimeError("memory offline")


@pytest.fixture(autouse=True)
def app_environment(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
    monkeypatch.setenv("JSON_LOGS", "false")
    for name in ["STORAGE_BACKEND", "TOOLS_ENABLED", "HISTORY_WINDOW", "CONVERSATION_ID"]:
        monkeypatch.delenv(name, raising=False)


def build(agent=None, **kwargs):
    return create_app_components(
        settings=Settings(),
        agent=agent or ScriptedAgent(),
        clock=lambda: TODAY,
        **kwargs,
    )


class TestBudgetAssistant:
    """Tests for the facade operations."""

    @pytest.mark.asyncio
    async def test_chat_round_trip_and_history(self):
        assistant = build()

        response = await assistant.chat("hello")

        assert response.role == ChatRole.ASSISTANT
        assert response.content == "You said: hello"
        assert assistant.history() == [
            {"role": "user", "content": "hello"},
            {"role": "assistant", "content": "You said: hello"},
        ]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("message", ["", "   ", None])
    async def test_blank_message_rejected(self, message):
        assistant = build()

        response = await assistant.chat(message)

        assert response.content == "❌ Invalid request: Message cannot be empty"
        assert assistant.history() == []

    @pytest.mark.asyncio
    async def test_agent_failure_is_apology(self):
        assistant = build(ScriptedAgent(fail=True))

        response = await assistant.chat("hello")

        assert response.content == APOLOGY_REPLY
        assert assistant.history() == [{"role": "user", "content": "hello"}]

    @pytest.mark.asyncio
    async def test_quick_actions_go_through_chat(self):
        assistant = build()

        for prompt in QUICK_ACTIONS.values():
            response = await assistant.chat(prompt)
            assert response.content == f"You said: {prompt}"

        user_turns = [t["content"] for t in assistant.history() if t["role"] == "user"]
        assert user_turns == [
            "Show me all my current budgets",
            "I want to add an expense",
            "Help me create a new budget",
            "Give me financial advice based on my spending",
        ]

    @pytest.mark.asyncio
    async def test_clear_memory(self):
        assistant = build()
        await assistant.chat("hello")

        assert assistant.clear_memory() == {"message": MEMORY_CLEARED_MESSAGE}
        assert assistant.history() == []

    @pytest.mark.asyncio
    async def test_chat_tool_call_reaches_ledger(self):
        agent = ScriptedAgent(tool_call=("addTransaction", {
            "amount": 50, "description": "Groceries", "category": "Food", "type": "EXPENSE",
        }))
        assistant = build(agent)

        response = await assistant.chat("I spent $50 on groceries")

        assert response.content.startswith("💸 Transaction added successfully!")
        assert assistant.totals(2025, 6).total_expenses == Decimal("50")
        assert agent.tool_counts == [6]

    def test_totals_read_directly(self):
        assistant = build()
        assistant.service.add_transaction(Decimal("3000"), "Salary", "Salary", "INCOME")
        assistant.service.add_transaction(Decimal("1200"), "Rent", "Home", "EXPENSE")

        summary = assistant.totals(2025, 6)

        assert summary.total_income == Decimal("3000")
        assert summary.total_expenses == Decimal("1200")
        assert summary.net_amount == Decimal("1800")
        assert assistant.totals(2025, 5) == BudgetSummary.empty()

    def test_health_and_tool_status(self):
        assistant = build()

        assert assistant.health() == HEALTH_MESSAGE
        assert assistant.tools_status() == "MCP Tools Available: true"
        overview = assistant.tools_overview()
        assert overview["totalTools"] == 6
        assert overview["mcpEndpoint"] == "/mcp/messages"

    def test_memory_failures_do_not_raise(self):
        assistant = build(memory=BrokenMemory())

        assert "error" in assistant.clear_memory()
        assert assistant.clear_memory()["error"].startswith("Failed to clear chat memory")
        assert assistant.history() == []


class TestCreateAppComponents:
    """Tests for the component factory."""

    @pytest.mark.asyncio
    async def test_tools_disabled(self, monkeypatch):
        monkeypatch.setenv("TOOLS_ENABLED", "false")
        agent = ScriptedAgent()
        assistant = build(agent)

        await assistant.chat("hello")

        assert agent.tool_counts == [0]
        assert assistant.tools_status() == "MCP Tools Available: false"
        assert assistant.tools_overview()["totalTools"] == 0
        assert assistant.totals(2025, 6) == BudgetSummary.empty()

    @pytest.mark.asyncio
    async def test_configured_conversation_id(self, monkeypatch):
        monkeypatch.setenv("CONVERSATION_ID", "household")
        assistant = build()

        await assistant.chat("hello")

        assert len(assistant.history("household")) == 2
        assert assistant.history("budget-chat") == []

    def test_injected_storage_is_used(self, storage):
        assistant = build(storage=storage)
        assistant.service.create_budget("Food", Decimal("500"))

        assert storage.find_active_budget("Food", 2025, 6) is not None
