"""
Main Orchestrator for Budget Assistant

This module ties together all the components and exposes the
operational surface used by the UI:
1. Chat (message -> agent with tools -> reply)
2. Conversation memory (history, clear)
3. Structured totals for a month (no LLM involved)
4. Health and tool availability checks

DESIGN DECISION: The facade is failure-silent, like the surfaces it
wraps. Chat failures come back as an apology reply, totals degrade to
zero, and memory operations report errors in their result instead of
raising into the UI.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Callable, Optional

from budget_assistant.agents import ChatAgent, ConversationService, GeminiChatAgent
from budget_assistant.audit import AuditLogger, configure_logging
from budget_assistant.config import Settings, get_settings
from budget_assistant.models.chat import ChatResponse
from budget_assistant.models.ledger import BudgetSummary
from budget_assistant.services.budget_service import BudgetService
from budget_assistant.services.storage import (
    ChatMemoryInterface,
    GoogleSheetsClient,
    GoogleSheetsLedgerStorage,
    InMemoryChatMemory,
    LedgerStorageInterface,
    SqlChatMemory,
    SqlLedgerStorage,
    create_ledger_engine,
)
from budget_assistant.tools import (
    BudgetSummaryGateway,
    LocalToolChannel,
    ToolRegistry,
    build_budget_tools,
)


HEALTH_MESSAGE = "Budget Chat Client is running!"
MEMORY_CLEARED_MESSAGE = "Chat memory cleared successfully"

# Sidebar shortcuts: button label -> message sent through chat()
QUICK_ACTIONS = {
    "📋 Show my budgets": "Show me all my current budgets",
    "💸 Add expense": "I want to add an expense",
    "🎯 Create budget": "Help me create a new budget",
    "💡 Financial advice": "Give me financial advice based on my spending",
}


class BudgetAssistant:
    """
    Operational surface over the conversation, registry and gateway.

    Every method here maps to one action of the chat UI.
    """

    def __init__(
        self,
        conversation: ConversationService,
        registry: ToolRegistry,
        gateway: BudgetSummaryGateway,
        service: BudgetService,
        mcp_endpoint: str = "/mcp/messages",
    ):
        self._conversation = conversation
        self._registry = registry
        self._gateway = gateway
        self._service = service
        self._mcp_endpoint = mcp_endpoint

    @property
    def service(self) -> BudgetService:
        return self._service

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    async def chat(
        self,
        message: str,
        conversation_id: Optional[str] = None,
    ) -> ChatResponse:
        """Submit a chat message; blank messages are rejected up front."""
        if message is None or not message.strip():
            return ChatResponse.error("Invalid request: Message cannot be empty")
        return await self._conversation.send_message(message, conversation_id)

    def clear_memory(self, conversation_id: Optional[str] = None) -> dict[str, str]:
        try:
            self._conversation.clear_memory(conversation_id)
        except Exception as e:
            return {"error": f"Failed to clear chat memory: {e}"}
        return {"message": MEMORY_CLEARED_MESSAGE}

    def history(self, conversation_id: Optional[str] = None) -> list[dict[str, str]]:
        """Ordered {role, content} turns; empty if memory can't be read."""
        try:
            return [turn.to_turn() for turn in self._conversation.get_history(conversation_id)]
        except Exception:
            return []

    def totals(self, year: int, month: int) -> BudgetSummary:
        return self._gateway.get_totals(year, month)

    def health(self) -> str:
        return HEALTH_MESSAGE

    def tools_status(self) -> str:
        available = "true" if self._conversation.has_tools() else "false"
        return f"MCP Tools Available: {available}"

    def tools_overview(self) -> dict[str, Any]:
        return self._registry.describe(self._mcp_endpoint)


def create_app_components(
    settings: Optional[Settings] = None,
    storage: Optional[LedgerStorageInterface] = None,
    memory: Optional[ChatMemoryInterface] = None,
    agent: Optional[ChatAgent] = None,
    clock: Callable[[], date] = date.today,
) -> BudgetAssistant:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use (default get_settings())
        storage: Ledger storage; built from AppSettings.storage_backend
                 when omitted
        memory: Conversation memory; SQL when the SQL backend is built
                here, in-process otherwise
        agent: Chat agent (default GeminiChatAgent)
        clock: Returns "today" for every component

    Returns:
        BudgetAssistant facade
    """
    settings = settings or get_settings()
    app_settings = settings.app

    configure_logging(app_settings.log_level, app_settings.json_logs)
    audit_logger = AuditLogger()

    if storage is None:
        if app_settings.storage_backend == "google_sheets":
            storage = GoogleSheetsLedgerStorage(GoogleSheetsClient(settings.google_sheets))
        else:
            database = settings.database
            engine = create_ledger_engine(database.url, echo=database.echo)
            storage = SqlLedgerStorage(engine)
            if memory is None:
                memory = SqlChatMemory(engine)
    if memory is None:
        memory = InMemoryChatMemory()

    service = BudgetService(
        storage,
        audit_logger=audit_logger,
        clock=clock,
        recent_limit=app_settings.recent_transactions_limit,
        default_alert_threshold=Decimal(str(app_settings.default_alert_threshold)),
    )

    # Tools disabled -> empty registry; chat still works, without tool use
    tools = build_budget_tools(service) if app_settings.tools_enabled else []
    registry = ToolRegistry(tools, audit_logger=audit_logger)

    channels = [LocalToolChannel(registry)] if len(registry) else []
    gateway = BudgetSummaryGateway(channels, audit_logger=audit_logger)

    conversation = ConversationService(
        agent=agent or GeminiChatAgent(settings.gemini),
        memory=memory,
        registry=registry,
        audit_logger=audit_logger,
        clock=clock,
        history_window=app_settings.history_window,
        default_conversation_id=app_settings.conversation_id,
    )

    return BudgetAssistant(
        conversation=conversation,
        registry=registry,
        gateway=gateway,
        service=service,
        mcp_endpoint=app_settings.mcp_endpoint,
    )
