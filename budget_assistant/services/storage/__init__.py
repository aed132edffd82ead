"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
SQL (SQLAlchemy) is the default ledger backend; Google Sheets is the
alternative. Conversation memory lives in SQL or in process.
"""

from budget_assistant.services.storage.interface import (
    ChatMemoryInterface,
    ConnectionError,
    LedgerStorageInterface,
    StorageError,
)
from budget_assistant.services.storage.chat_memory import InMemoryChatMemory
from budget_assistant.services.storage.sql import (
    SqlChatMemory,
    SqlLedgerStorage,
    create_ledger_engine,
    create_schema,
)
from budget_assistant.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsLedgerStorage,
)

__all__ = [
    # Interfaces
    "ChatMemoryInterface",
    "LedgerStorageInterface",
    # Exceptions
    "ConnectionError",
    "StorageError",
    # SQL implementation
    "SqlChatMemory",
    "SqlLedgerStorage",
    "create_ledger_engine",
    "create_schema",
    # Google Sheets implementation
    "GoogleSheetsClient",
    "GoogleSheetsLedgerStorage",
    # In-process memory
    "InMemoryChatMemory",
]
