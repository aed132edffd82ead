"""
Conversational Bridge

Threads every user message through the agent and a persistent memory:

1. Build a system instruction stating today's date (and its year/month)
2. Read the stored history for the conversation
3. Store the user message
4. Let the agent reply, calling registry tools as it likes
5. Store the reply and return it

IMPORTANT: A failure anywhere in 2-5 becomes a generic apology. There
is no retry, and a user message that was already stored stays stored.
"""

from datetime import date
from typing import Callable, Optional

from budget_assistant.agents.ai_agents import ChatAgent
from budget_assistant.audit.logger import AuditLogger, create_correlation_id
from budget_assistant.models.chat import (
    APOLOGY_REPLY,
    DEFAULT_CONVERSATION_ID,
    ChatMessage,
    ChatResponse,
    ChatRole,
)
from budget_assistant.services.storage.interface import ChatMemoryInterface
from budget_assistant.tools.registry import ToolRegistry


SYSTEM_PROMPT_TEMPLATE = """You are a budget management assistant with conversation memory and access to budget tools.

Current date: {current_date} (year: {year}, month: {month})
When users say "today" or don't specify a date, use: {current_date}

Remember conversation context and reference previous messages naturally.
When users say "that category" or "that transaction", use context to understand.
"""


def build_system_instruction(today: date) -> str:
    return SYSTEM_PROMPT_TEMPLATE.format(
        current_date=today.isoformat(),
        year=today.year,
        month=today.month,
    )


class ConversationService:
    """
    One ordered history per conversation id.

    The id is explicit on every call and defaults to the configured
    single conversation.
    """

    def __init__(
        self,
        agent: ChatAgent,
        memory: ChatMemoryInterface,
        registry: Optional[ToolRegistry] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Callable[[], date] = date.today,
        history_window: int = 20,
        default_conversation_id: str = DEFAULT_CONVERSATION_ID,
    ):
        self._agent = agent
        self._memory = memory
        self._registry = registry if registry is not None else ToolRegistry()
        self._audit_logger = audit_logger or AuditLogger()
        self._clock = clock
        self._history_window = history_window
        self._default_conversation_id = default_conversation_id

    @property
    def default_conversation_id(self) -> str:
        return self._default_conversation_id

    def _resolve(self, conversation_id: Optional[str]) -> str:
        return conversation_id or self._default_conversation_id

    async def send_message(
        self,
        message: str,
        conversation_id: Optional[str] = None,
    ) -> ChatResponse:
        """Run one chat turn; never raises."""
        conversation_id = self._resolve(conversation_id)
        correlation_id = create_correlation_id()

        try:
            self._audit_logger.log_chat_message_received(
                conversation_id, len(message), correlation_id
            )
            history = self._memory.get(conversation_id, last_n=self._history_window)
            self._memory.add(conversation_id, [ChatMessage(role=ChatRole.USER, content=message)])

            reply = await self._agent.reply(
                system_instruction=build_system_instruction(self._clock()),
                history=history,
                message=message,
                tools=self._registry,
                correlation_id=correlation_id,
            )

            self._memory.add(conversation_id, [ChatMessage(role=ChatRole.ASSISTANT, content=reply)])
            self._audit_logger.log_chat_reply_generated(
                conversation_id, len(reply), correlation_id
            )
            return ChatResponse.assistant(reply)
        except Exception as e:
            self._audit_logger.log_chat_failed(conversation_id, str(e), correlation_id)
            return ChatResponse.assistant(APOLOGY_REPLY)

    def clear_memory(self, conversation_id: Optional[str] = None) -> None:
        conversation_id = self._resolve(conversation_id)
        self._memory.clear(conversation_id)
        self._audit_logger.log_memory_cleared(conversation_id)

    def get_history(self, conversation_id: Optional[str] = None) -> list[ChatMessage]:
        """Stored turns, oldest first."""
        return self._memory.get(self._resolve(conversation_id))

    def has_tools(self) -> bool:
        return len(self._registry) > 0
