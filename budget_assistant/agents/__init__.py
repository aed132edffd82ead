"""AI Agents package."""

from budget_assistant.agents.ai_agents import (
    AgentError,
    ChatAgent,
    GeminiChatAgent,
)
from budget_assistant.agents.conversation import (
    ConversationService,
    build_system_instruction,
)

__all__ = [
    "AgentError",
    "ChatAgent",
    "ConversationService",
    "GeminiChatAgent",
    "build_system_instruction",
]
