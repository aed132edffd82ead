"""
In-process conversation memory.

Used when the ledger lives in Google Sheets (no database to put the
chat_memory table in) and in tests. Contents are lost on restart.
"""

from collections import defaultdict
from typing import Optional

from budget_assistant.models.chat import ChatMessage
from budget_assistant.services.storage.interface import ChatMemoryInterface


class InMemoryChatMemory(ChatMemoryInterface):
    """Conversation turns kept in a dict of lists."""

    def __init__(self):
        self._conversations: dict[str, list[ChatMessage]] = defaultdict(list)

    def add(self, conversation_id: str, messages: list[ChatMessage]) -> None:
        self._conversations[conversation_id].extend(messages)

    def get(self, conversation_id: str, last_n: Optional[int] = None) -> list[ChatMessage]:
        turns = list(self._conversations.get(conversation_id, []))
        if last_n is not None:
            turns = turns[-last_n:] if last_n > 0 else []
        return turns

    def clear(self, conversation_id: str) -> None:
        self._conversations.pop(conversation_id, None)
