"""
Conversation Models

A conversation is an ordered, append-only list of ChatMessage turns
stored under one conversation id.
"""

import time
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


DEFAULT_CONVERSATION_ID = "budget-chat"

APOLOGY_REPLY = "I encountered an error. Please try again."


class ChatRole(str, Enum):
    """Who produced a turn."""
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """One stored turn of a conversation."""

    role: ChatRole
    content: str
    created_at: datetime = Field(
        default_factory=datetime.utcnow
    )

    def to_turn(self) -> dict:
        """The {role, content} shape returned by the history read."""
        return {"role": self.role.value, "content": self.content}


class ChatResponse(BaseModel):
    """Reply returned for a submitted chat message."""

    role: ChatRole
    content: str
    timestamp: int = Field(
        default_factory=lambda: int(time.time() * 1000),
        description="Epoch milliseconds"
    )

    @classmethod
    def assistant(cls, content: str) -> "ChatResponse":
        return cls(role=ChatRole.ASSISTANT, content=content)

    @classmethod
    def error(cls, error_message: str) -> "ChatResponse":
        return cls(role=ChatRole.ASSISTANT, content=f"❌ {error_message}")
